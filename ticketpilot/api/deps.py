"""
API dependencies for dependency injection.
"""

from typing import Any, Optional

import asyncpg
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ticketpilot.core.config import settings
from ticketpilot.core.exceptions import AuthenticationError
from ticketpilot.core.logging import bind_context, get_logger
from ticketpilot.core.security import verify_user_token
from ticketpilot.repositories import (
    ApiKeyRepository,
    InMemoryApiKeyRepository,
    InMemoryJiraCredentialRepository,
    InMemoryProjectConfigRepository,
    JiraCredentialRepository,
    PostgresApiKeyRepository,
    PostgresJiraCredentialRepository,
    PostgresProjectConfigRepository,
    ProjectConfigRepository,
)
from ticketpilot.repositories.schema import create_schema
from ticketpilot.services import (
    CredentialService,
    ProjectConfigService,
    TicketDraftGenerator,
    TicketPublisher,
)

logger = get_logger(__name__)


class ServiceContainer:
    """
    Container for all application services.
    Provides singleton instances of services.

    Services hold repositories, never credentials: every pipeline call reads
    the user's credentials from the store.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._initialized = False
        self._pool: Any = None

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    async def startup(self) -> None:
        """Open storage and initialize services."""
        if settings.uses_postgres:
            self._pool = await asyncpg.create_pool(
                dsn=settings.database.url,
                min_size=settings.database.min_pool_size,
                max_size=settings.database.max_pool_size,
            )
            await create_schema(self._pool)
            logger.info("PostgreSQL credential store connected")

        self.initialize(connection_pool=self._pool)

    async def shutdown(self) -> None:
        """Release storage connections."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
        self._initialized = False

    def initialize(self, connection_pool: Any = None) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        # Initialize repositories
        if connection_pool is not None:
            self._api_key_repository: ApiKeyRepository = PostgresApiKeyRepository(connection_pool)
            self._jira_credential_repository: JiraCredentialRepository = (
                PostgresJiraCredentialRepository(connection_pool)
            )
            self._project_config_repository: ProjectConfigRepository = (
                PostgresProjectConfigRepository(connection_pool)
            )
        else:
            self._api_key_repository = InMemoryApiKeyRepository()
            self._jira_credential_repository = InMemoryJiraCredentialRepository()
            self._project_config_repository = InMemoryProjectConfigRepository()

        # Initialize services
        self._credential_service = CredentialService(
            api_key_repository=self._api_key_repository,
            jira_credential_repository=self._jira_credential_repository,
            project_config_repository=self._project_config_repository,
        )

        self._ticket_generator = TicketDraftGenerator(
            api_key_repository=self._api_key_repository,
        )

        self._ticket_publisher = TicketPublisher(
            jira_credential_repository=self._jira_credential_repository,
        )

        self._project_config_service = ProjectConfigService(
            jira_credential_repository=self._jira_credential_repository,
            project_config_repository=self._project_config_repository,
        )

        self._initialized = True

    def reset(self) -> None:
        """Drop all services so the next access rebuilds them."""
        self._initialized = False

    @property
    def pool(self) -> Any:
        return self._pool

    @property
    def api_key_repository(self) -> ApiKeyRepository:
        self.initialize()
        return self._api_key_repository

    @property
    def jira_credential_repository(self) -> JiraCredentialRepository:
        self.initialize()
        return self._jira_credential_repository

    @property
    def project_config_repository(self) -> ProjectConfigRepository:
        self.initialize()
        return self._project_config_repository

    @property
    def credential_service(self) -> CredentialService:
        """Get the credential service."""
        self.initialize()
        return self._credential_service

    @property
    def ticket_generator(self) -> TicketDraftGenerator:
        """Get the ticket draft generator."""
        self.initialize()
        return self._ticket_generator

    @property
    def ticket_publisher(self) -> TicketPublisher:
        """Get the ticket publisher."""
        self.initialize()
        return self._ticket_publisher

    @property
    def project_config_service(self) -> ProjectConfigService:
        """Get the project configuration service."""
        self.initialize()
        return self._project_config_service


# Singleton container instance
container = ServiceContainer.get_instance()

bearer_scheme = HTTPBearer(auto_error=False)


# Dependency functions for FastAPI
async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Resolve the signed-in user from the bearer token.

    Raises:
        AuthenticationError: If no valid token was presented
    """
    if credentials is None:
        raise AuthenticationError()

    try:
        user_id = verify_user_token(credentials.credentials)
    except AuthenticationError as e:
        logger.info("Rejected bearer token", reason=e.message)
        raise AuthenticationError() from e

    bind_context(user_id=user_id)
    return user_id


def get_credential_service() -> CredentialService:
    """Get the credential service instance."""
    return container.credential_service


def get_ticket_generator() -> TicketDraftGenerator:
    """Get the ticket draft generator instance."""
    return container.ticket_generator


def get_ticket_publisher() -> TicketPublisher:
    """Get the ticket publisher instance."""
    return container.ticket_publisher


def get_project_config_service() -> ProjectConfigService:
    """Get the project configuration service instance."""
    return container.project_config_service
