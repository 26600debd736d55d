"""
Clients for the language model provider and Jira.
"""

from ticketpilot.clients.jira_client import JiraClient, build_issue_payload, extract_error_message
from ticketpilot.clients.llm_client import ChatMessage, LanguageModelClient

__all__ = [
    "ChatMessage",
    "JiraClient",
    "LanguageModelClient",
    "build_issue_payload",
    "extract_error_message",
]
