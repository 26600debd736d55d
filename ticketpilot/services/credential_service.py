"""
Credential management for language model keys and Jira connections.
"""

from typing import Optional

from ticketpilot.core.exceptions import NotFoundError
from ticketpilot.core.logging import get_logger
from ticketpilot.core.security import mask_secret
from ticketpilot.domain.credentials import JiraCredential, LanguageModelCredential
from ticketpilot.repositories.base import (
    ApiKeyRepository,
    JiraCredentialRepository,
    ProjectConfigRepository,
)

logger = get_logger(__name__)


class CredentialService:
    """
    Service for storing and removing a user's vendor credentials.
    Every operation is scoped to the requesting user.
    """

    def __init__(
        self,
        api_key_repository: ApiKeyRepository,
        jira_credential_repository: JiraCredentialRepository,
        project_config_repository: Optional[ProjectConfigRepository] = None,
    ) -> None:
        self.api_key_repository = api_key_repository
        self.jira_credential_repository = jira_credential_repository
        self.project_config_repository = project_config_repository

    # -------------------------------------------------------------------------
    # Language model keys
    # -------------------------------------------------------------------------

    async def add_api_key(self, user_id: str, key: str, model: str) -> LanguageModelCredential:
        """Store a new language model key for the user."""
        credential = LanguageModelCredential(user_id=user_id, key=key, model=model)
        await self.api_key_repository.save(credential)
        logger.info(
            "API key added",
            user_id=user_id,
            credential_id=credential.id,
            model=model,
            key=mask_secret(key),
        )
        return credential

    async def list_api_keys(self, user_id: str) -> list[LanguageModelCredential]:
        """List the user's language model keys, oldest first."""
        return await self.api_key_repository.list(filters={"user_id": user_id})

    async def delete_api_key(self, user_id: str, key_id: str) -> None:
        """
        Delete one of the user's keys.

        Raises:
            NotFoundError: If the key does not exist or belongs to someone else
        """
        credential = await self.api_key_repository.get(key_id)
        if credential is None or credential.user_id != user_id:
            raise NotFoundError("API key", key_id, message="API key not found")

        await self.api_key_repository.delete(key_id)
        logger.info("API key deleted", user_id=user_id, credential_id=key_id)

    # -------------------------------------------------------------------------
    # Jira credentials
    # -------------------------------------------------------------------------

    async def save_jira_credential(
        self,
        user_id: str,
        domain: str,
        email: str,
        api_token: str,
        project_key: str,
    ) -> JiraCredential:
        """Create or replace the user's Jira credential."""
        credential = JiraCredential(
            user_id=user_id,
            domain=domain,
            email=email,
            api_token=api_token,
            project_key=project_key,
        )
        stored = await self.jira_credential_repository.save(credential)

        # A changed project or site invalidates the cached configuration
        if self.project_config_repository is not None:
            await self.project_config_repository.delete_for_credential(stored.id)

        logger.info(
            "Jira credential saved",
            user_id=user_id,
            domain=stored.domain,
            project_key=stored.project_key,
            api_token=mask_secret(stored.api_token),
        )
        return stored

    async def get_jira_credential(self, user_id: str) -> Optional[JiraCredential]:
        return await self.jira_credential_repository.get_for_user(user_id)

    async def delete_jira_credential(self, user_id: str) -> None:
        """
        Delete the user's Jira credential and its cached project configuration.

        Raises:
            NotFoundError: If the user has no Jira credential
        """
        credential = await self.jira_credential_repository.get_for_user(user_id)
        if credential is None:
            raise NotFoundError("Jira credentials", message="Jira credentials not found")

        if self.project_config_repository is not None:
            await self.project_config_repository.delete_for_credential(credential.id)
        await self.jira_credential_repository.delete_for_user(user_id)
        logger.info("Jira credential deleted", user_id=user_id)
