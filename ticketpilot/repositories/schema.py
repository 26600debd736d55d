"""
PostgreSQL schema for the credential store.
"""

from typing import Any

import asyncpg

from ticketpilot.core.exceptions import DatabaseError
from ticketpilot.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS api_keys (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        key TEXT NOT NULL,
        model TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS api_keys_user_id_idx ON api_keys (user_id)",
    """
    CREATE TABLE IF NOT EXISTS jira_credentials (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        domain TEXT NOT NULL,
        email TEXT NOT NULL,
        api_token TEXT NOT NULL,
        project_key TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jira_project_configs (
        jira_credential_id TEXT PRIMARY KEY
            REFERENCES jira_credentials (id) ON DELETE CASCADE,
        project_key TEXT NOT NULL,
        project_name TEXT NOT NULL,
        issue_types JSONB NOT NULL DEFAULT '[]'::jsonb,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
]


async def create_schema(connection_pool: Any) -> None:
    """
    Create the credential tables if they do not exist.

    Args:
        connection_pool: AsyncPG connection pool

    Raises:
        DatabaseError: If a statement fails
    """
    async with connection_pool.acquire() as conn:
        try:
            async with conn.transaction():
                for statement in SCHEMA_STATEMENTS:
                    await conn.execute(statement)
        except asyncpg.PostgresError as e:
            raise DatabaseError(f"Schema creation failed: {e}") from e

    logger.info("Credential schema ready", tables=3)
