"""
Repositories for Jira project configuration.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import IssueTypeInfo, JiraProjectConfig
from ticketpilot.repositories.base import ProjectConfigRepository

logger = get_logger(__name__)


class InMemoryProjectConfigRepository(ProjectConfigRepository):
    """
    In-memory project configuration repository for development/testing.
    """

    def __init__(self) -> None:
        self._configs: dict[str, JiraProjectConfig] = {}

    async def get_for_credential(self, jira_credential_id: str) -> Optional[JiraProjectConfig]:
        return self._configs.get(jira_credential_id)

    async def save(self, config: JiraProjectConfig) -> JiraProjectConfig:
        self._configs[config.jira_credential_id] = config
        logger.debug("Project config saved", jira_credential_id=config.jira_credential_id)
        return config

    async def delete_for_credential(self, jira_credential_id: str) -> bool:
        return self._configs.pop(jira_credential_id, None) is not None


class PostgresProjectConfigRepository(ProjectConfigRepository):
    """
    PostgreSQL project configuration repository for production.
    """

    def __init__(self, connection_pool: Any) -> None:
        self.pool = connection_pool

    async def get_for_credential(self, jira_credential_id: str) -> Optional[JiraProjectConfig]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT jira_credential_id, project_key, project_name, issue_types, updated_at
                FROM jira_project_configs
                WHERE jira_credential_id = $1
                """,
                jira_credential_id,
            )

        if not row:
            return None

        issue_types = row["issue_types"]
        if isinstance(issue_types, str):
            issue_types = json.loads(issue_types)

        return JiraProjectConfig(
            jira_credential_id=row["jira_credential_id"],
            project_key=row["project_key"],
            project_name=row["project_name"],
            issue_types=[IssueTypeInfo(**t) for t in issue_types or []],
            updated_at=row["updated_at"],
        )

    async def save(self, config: JiraProjectConfig) -> JiraProjectConfig:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO jira_project_configs
                    (jira_credential_id, project_key, project_name, issue_types, updated_at)
                VALUES ($1, $2, $3, $4::jsonb, $5)
                ON CONFLICT (jira_credential_id) DO UPDATE SET
                    project_key = EXCLUDED.project_key,
                    project_name = EXCLUDED.project_name,
                    issue_types = EXCLUDED.issue_types,
                    updated_at = EXCLUDED.updated_at
                """,
                config.jira_credential_id,
                config.project_key,
                config.project_name,
                json.dumps([t.model_dump() for t in config.issue_types]),
                config.updated_at,
            )
        return config

    async def delete_for_credential(self, jira_credential_id: str) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM jira_project_configs WHERE jira_credential_id = $1",
                jira_credential_id,
            )
            return result == "DELETE 1"
