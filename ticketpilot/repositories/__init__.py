"""
Repository implementations for the credential store.
"""

from ticketpilot.repositories.base import (
    ApiKeyRepository,
    BaseRepository,
    JiraCredentialRepository,
    ProjectConfigRepository,
)
from ticketpilot.repositories.credential_repo import (
    InMemoryApiKeyRepository,
    InMemoryJiraCredentialRepository,
    PostgresApiKeyRepository,
    PostgresJiraCredentialRepository,
)
from ticketpilot.repositories.project_config_repo import (
    InMemoryProjectConfigRepository,
    PostgresProjectConfigRepository,
)

__all__ = [
    "BaseRepository",
    "ApiKeyRepository",
    "JiraCredentialRepository",
    "ProjectConfigRepository",
    "InMemoryApiKeyRepository",
    "InMemoryJiraCredentialRepository",
    "InMemoryProjectConfigRepository",
    "PostgresApiKeyRepository",
    "PostgresJiraCredentialRepository",
    "PostgresProjectConfigRepository",
]
