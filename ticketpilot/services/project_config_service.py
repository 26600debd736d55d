"""
Jira project configuration lookup with a per-credential cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ticketpilot.clients.jira_client import JiraClient
from ticketpilot.core.config import settings
from ticketpilot.core.constants import CREDENTIAL_JIRA, MSG_NO_JIRA_CREDENTIALS
from ticketpilot.core.exceptions import CredentialMissingError, JiraError, ProjectConfigError
from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import IssueTypeInfo, JiraCredential, JiraProjectConfig
from ticketpilot.repositories.base import JiraCredentialRepository, ProjectConfigRepository

logger = get_logger(__name__)

JiraClientFactory = Callable[[JiraCredential], JiraClient]


@dataclass
class ProjectConfigResult:
    """A project configuration and whether it came from the cache."""

    config: JiraProjectConfig
    cached: bool

    def to_response(self) -> dict[str, Any]:
        return {
            "projectKey": self.config.project_key,
            "projectName": self.config.project_name,
            "issueTypes": [t.model_dump() for t in self.config.issue_types],
            "cached": self.cached,
        }


def parse_create_meta(jira_credential_id: str, data: Any) -> JiraProjectConfig:
    """
    Extract the first project's issue types from a createmeta document.

    Raises:
        ProjectConfigError: If the document lists no usable project
    """
    if not isinstance(data, dict):
        raise ProjectConfigError("createmeta response is not an object")

    projects = data.get("projects") or []
    if not isinstance(projects, list) or not projects:
        raise ProjectConfigError("createmeta returned no projects")

    project = projects[0]
    if not isinstance(project, dict):
        raise ProjectConfigError("createmeta project is malformed")

    raw_types = project.get("issuetypes") or []
    if not isinstance(raw_types, list) or not all(isinstance(t, dict) for t in raw_types):
        raise ProjectConfigError("createmeta issue types are malformed")

    try:
        issue_types = [
            IssueTypeInfo(
                id=str(t.get("id", "")),
                name=t.get("name", ""),
                description=t.get("description") or "",
                subtask=bool(t.get("subtask", False)),
            )
            for t in raw_types
        ]
        return JiraProjectConfig(
            jira_credential_id=jira_credential_id,
            project_key=project.get("key", ""),
            project_name=project.get("name", ""),
            issue_types=issue_types,
        )
    except PydanticValidationError as e:
        raise ProjectConfigError(
            f"createmeta project is malformed: {e.error_count()} error(s)"
        ) from e


class ProjectConfigService:
    """
    Serves the Jira project configuration for a user's stored project.
    Fetched configurations are reused until they are older than the TTL.
    """

    def __init__(
        self,
        jira_credential_repository: JiraCredentialRepository,
        project_config_repository: ProjectConfigRepository,
        client_factory: Optional[JiraClientFactory] = None,
        ttl_hours: Optional[int] = None,
    ) -> None:
        self.jira_credential_repository = jira_credential_repository
        self.project_config_repository = project_config_repository
        self.client_factory = client_factory or JiraClient.from_credential
        self.ttl_hours = ttl_hours if ttl_hours is not None else settings.jira.project_config_ttl_hours

    async def get_project_config(self, user_id: str) -> ProjectConfigResult:
        """
        Get the project configuration for the user's Jira credential.

        Raises:
            CredentialMissingError: If the user has no Jira credential
            ProjectConfigError: If Jira could not provide the configuration
        """
        credential = await self.jira_credential_repository.get_for_user(user_id)
        if credential is None:
            raise CredentialMissingError(CREDENTIAL_JIRA, MSG_NO_JIRA_CREDENTIALS)

        stored = await self.project_config_repository.get_for_credential(credential.id)
        if stored is not None and stored.is_fresh(self.ttl_hours):
            return ProjectConfigResult(config=stored, cached=True)

        try:
            async with self.client_factory(credential) as client:
                data = await client.get_create_meta(credential.project_key)
        except JiraError as e:
            logger.error(
                "Error fetching Jira project configuration",
                user_id=user_id,
                domain=credential.domain,
                project_key=credential.project_key,
                error=e.message,
            )
            raise ProjectConfigError(e.message) from e

        config = parse_create_meta(credential.id, data)
        await self.project_config_repository.save(config)

        logger.info(
            "Project configuration refreshed",
            user_id=user_id,
            project_key=config.project_key,
            issue_types=len(config.issue_types),
        )
        return ProjectConfigResult(config=config, cached=False)
