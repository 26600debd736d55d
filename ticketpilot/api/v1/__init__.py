"""
API v1 routers.
"""

from ticketpilot.api.v1 import api_keys, documents, health, jira_credentials, jira_project_config, jira_tickets

__all__ = [
    "api_keys",
    "documents",
    "health",
    "jira_credentials",
    "jira_project_config",
    "jira_tickets",
]
