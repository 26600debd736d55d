"""
Domain models.
"""

from ticketpilot.domain.credentials import (
    IssueTypeInfo,
    JiraCredential,
    JiraProjectConfig,
    LanguageModelCredential,
)
from ticketpilot.domain.tickets import DraftTicket, PublishReport, PublishResult

__all__ = [
    "DraftTicket",
    "IssueTypeInfo",
    "JiraCredential",
    "JiraProjectConfig",
    "LanguageModelCredential",
    "PublishReport",
    "PublishResult",
]
