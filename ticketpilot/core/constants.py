"""
System-wide constants for TicketPilot.
"""

from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class MessageRole(str, Enum):
    """Message roles in a chat completion request."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TicketType(str, Enum):
    """Kinds of draft ticket the generator may propose."""

    TASK = "task"
    STORY = "story"
    BUG = "bug"

    @property
    def jira_name(self) -> str:
        """Issue type name as Jira expects it (e.g. "Task")."""
        return self.value.capitalize()


class TicketPriority(str, Enum):
    """Priority levels for draft tickets."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PublishStatus(str, Enum):
    """Outcome of creating one ticket in Jira."""

    CREATED = "created"
    FAILED = "failed"


# =============================================================================
# API Constants
# =============================================================================

API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# =============================================================================
# Credential Kinds
# =============================================================================

CREDENTIAL_LANGUAGE_MODEL = "language_model"
CREDENTIAL_JIRA = "jira"

# =============================================================================
# User-facing Messages
# =============================================================================

MSG_NO_API_KEY = "No API key found. Please add an API key first."
MSG_NO_JIRA_CREDENTIALS = (
    "Jira credentials not found. Please set up your Jira credentials first."
)
MSG_TICKETS_GENERATED = (
    "Tickets generated successfully. Please review before creating in Jira."
)
MSG_ALL_CREATED = "All tickets created successfully"
MSG_SOME_FAILED = "Some tickets failed to create"
MSG_CREATE_FAILED = "Failed to create Jira ticket"

# =============================================================================
# Jira
# =============================================================================

JIRA_ISSUE_ENDPOINT = "/rest/api/{version}/issue"
JIRA_CREATEMETA_ENDPOINT = "/rest/api/{version}/issue/createmeta"
JIRA_BROWSE_PATH = "/browse/{key}"
