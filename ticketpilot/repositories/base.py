"""
Base repository interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from ticketpilot.domain.credentials import (
    JiraCredential,
    JiraProjectConfig,
    LanguageModelCredential,
)

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for repositories.
    """

    @abstractmethod
    async def get(self, id: str) -> Optional[T]:
        """Get an entity by ID."""
        ...

    @abstractmethod
    async def save(self, entity: T) -> T:
        """Save an entity."""
        ...

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """Delete an entity by ID."""
        ...

    @abstractmethod
    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[T]:
        """List entities with optional filters."""
        ...


class ApiKeyRepository(BaseRepository[LanguageModelCredential]):
    """Storage for users' language model credentials."""

    @abstractmethod
    async def get_for_user(self, user_id: str) -> Optional[LanguageModelCredential]:
        """Get the credential used for generation (the user's oldest key)."""
        ...


class JiraCredentialRepository(BaseRepository[JiraCredential]):
    """Storage for Jira credentials, at most one per user."""

    @abstractmethod
    async def get_for_user(self, user_id: str) -> Optional[JiraCredential]:
        """Get the user's Jira credential."""
        ...

    @abstractmethod
    async def delete_for_user(self, user_id: str) -> bool:
        """Delete the user's Jira credential."""
        ...


class ProjectConfigRepository(ABC):
    """Storage for Jira project configuration, one per Jira credential."""

    @abstractmethod
    async def get_for_credential(self, jira_credential_id: str) -> Optional[JiraProjectConfig]:
        ...

    @abstractmethod
    async def save(self, config: JiraProjectConfig) -> JiraProjectConfig:
        ...

    @abstractmethod
    async def delete_for_credential(self, jira_credential_id: str) -> bool:
        ...
