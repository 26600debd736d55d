"""
Credential repositories for language model keys and Jira connections.
"""

from __future__ import annotations

from typing import Any, Optional

from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import JiraCredential, LanguageModelCredential, utcnow
from ticketpilot.repositories.base import ApiKeyRepository, JiraCredentialRepository

logger = get_logger(__name__)


class InMemoryApiKeyRepository(ApiKeyRepository):
    """
    In-memory API key repository for development/testing.
    """

    def __init__(self) -> None:
        self._keys: dict[str, LanguageModelCredential] = {}

    async def get(self, id: str) -> Optional[LanguageModelCredential]:
        return self._keys.get(id)

    async def save(self, entity: LanguageModelCredential) -> LanguageModelCredential:
        self._keys[entity.id] = entity
        logger.debug("API key saved", credential_id=entity.id, user_id=entity.user_id)
        return entity

    async def delete(self, id: str) -> bool:
        if id in self._keys:
            del self._keys[id]
            logger.debug("API key deleted", credential_id=id)
            return True
        return False

    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LanguageModelCredential]:
        keys = list(self._keys.values())

        if filters and "user_id" in filters:
            keys = [k for k in keys if k.user_id == filters["user_id"]]

        keys.sort(key=lambda k: k.created_at)
        return keys[offset : offset + limit]

    async def get_for_user(self, user_id: str) -> Optional[LanguageModelCredential]:
        keys = await self.list(filters={"user_id": user_id}, limit=1)
        return keys[0] if keys else None


class InMemoryJiraCredentialRepository(JiraCredentialRepository):
    """
    In-memory Jira credential repository for development/testing.
    """

    def __init__(self) -> None:
        self._by_user: dict[str, JiraCredential] = {}

    async def get(self, id: str) -> Optional[JiraCredential]:
        for credential in self._by_user.values():
            if credential.id == id:
                return credential
        return None

    async def save(self, entity: JiraCredential) -> JiraCredential:
        """Create or replace the user's credential, keeping its identity."""
        existing = self._by_user.get(entity.user_id)
        if existing is not None:
            entity = entity.model_copy(
                update={
                    "id": existing.id,
                    "created_at": existing.created_at,
                    "updated_at": utcnow(),
                }
            )
        self._by_user[entity.user_id] = entity
        logger.debug("Jira credential saved", credential_id=entity.id, user_id=entity.user_id)
        return entity

    async def delete(self, id: str) -> bool:
        for user_id, credential in list(self._by_user.items()):
            if credential.id == id:
                del self._by_user[user_id]
                return True
        return False

    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[JiraCredential]:
        credentials = list(self._by_user.values())

        if filters and "user_id" in filters:
            credentials = [c for c in credentials if c.user_id == filters["user_id"]]

        credentials.sort(key=lambda c: c.created_at)
        return credentials[offset : offset + limit]

    async def get_for_user(self, user_id: str) -> Optional[JiraCredential]:
        return self._by_user.get(user_id)

    async def delete_for_user(self, user_id: str) -> bool:
        if user_id in self._by_user:
            del self._by_user[user_id]
            logger.debug("Jira credential deleted", user_id=user_id)
            return True
        return False


class PostgresApiKeyRepository(ApiKeyRepository):
    """
    PostgreSQL API key repository for production.
    """

    def __init__(self, connection_pool: Any) -> None:
        """
        Initialize with a database connection pool.

        Args:
            connection_pool: AsyncPG connection pool
        """
        self.pool = connection_pool

    @staticmethod
    def _from_row(row: Any) -> LanguageModelCredential:
        return LanguageModelCredential(
            id=row["id"],
            user_id=row["user_id"],
            key=row["key"],
            model=row["model"],
            created_at=row["created_at"],
        )

    async def get(self, id: str) -> Optional[LanguageModelCredential]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, user_id, key, model, created_at FROM api_keys WHERE id = $1",
                id,
            )
            return self._from_row(row) if row else None

    async def save(self, entity: LanguageModelCredential) -> LanguageModelCredential:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO api_keys (id, user_id, key, model, created_at)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (id) DO UPDATE SET
                    key = EXCLUDED.key,
                    model = EXCLUDED.model
                """,
                entity.id,
                entity.user_id,
                entity.key,
                entity.model,
                entity.created_at,
            )
        return entity

    async def delete(self, id: str) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM api_keys WHERE id = $1", id)
            return result == "DELETE 1"

    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LanguageModelCredential]:
        query = "SELECT id, user_id, key, model, created_at FROM api_keys WHERE 1=1"
        params: list[Any] = []

        if filters and "user_id" in filters:
            query += f" AND user_id = ${len(params) + 1}"
            params.append(filters["user_id"])

        query += f" ORDER BY created_at ASC LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}"
        params.extend([limit, offset])

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
            return [self._from_row(row) for row in rows]

    async def get_for_user(self, user_id: str) -> Optional[LanguageModelCredential]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, user_id, key, model, created_at
                FROM api_keys
                WHERE user_id = $1
                ORDER BY created_at ASC
                LIMIT 1
                """,
                user_id,
            )
            return self._from_row(row) if row else None


class PostgresJiraCredentialRepository(JiraCredentialRepository):
    """
    PostgreSQL Jira credential repository for production.
    """

    _COLUMNS = "id, user_id, domain, email, api_token, project_key, created_at, updated_at"

    def __init__(self, connection_pool: Any) -> None:
        self.pool = connection_pool

    @staticmethod
    def _from_row(row: Any) -> JiraCredential:
        return JiraCredential(
            id=row["id"],
            user_id=row["user_id"],
            domain=row["domain"],
            email=row["email"],
            api_token=row["api_token"],
            project_key=row["project_key"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def get(self, id: str) -> Optional[JiraCredential]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {self._COLUMNS} FROM jira_credentials WHERE id = $1",
                id,
            )
            return self._from_row(row) if row else None

    async def save(self, entity: JiraCredential) -> JiraCredential:
        """Upsert keyed by user; the stored row keeps its original id."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO jira_credentials ({self._COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                ON CONFLICT (user_id) DO UPDATE SET
                    domain = EXCLUDED.domain,
                    email = EXCLUDED.email,
                    api_token = EXCLUDED.api_token,
                    project_key = EXCLUDED.project_key,
                    updated_at = now()
                RETURNING {self._COLUMNS}
                """,
                entity.id,
                entity.user_id,
                entity.domain,
                entity.email,
                entity.api_token,
                entity.project_key,
                entity.created_at,
                entity.updated_at,
            )
            return self._from_row(row)

    async def delete(self, id: str) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM jira_credentials WHERE id = $1", id)
            return result == "DELETE 1"

    async def list(
        self,
        filters: Optional[dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[JiraCredential]:
        query = f"SELECT {self._COLUMNS} FROM jira_credentials WHERE 1=1"
        params: list[Any] = []

        if filters and "user_id" in filters:
            query += f" AND user_id = ${len(params) + 1}"
            params.append(filters["user_id"])

        query += f" ORDER BY created_at ASC LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}"
        params.extend([limit, offset])

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
            return [self._from_row(row) for row in rows]

    async def get_for_user(self, user_id: str) -> Optional[JiraCredential]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {self._COLUMNS} FROM jira_credentials WHERE user_id = $1",
                user_id,
            )
            return self._from_row(row) if row else None

    async def delete_for_user(self, user_id: str) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM jira_credentials WHERE user_id = $1",
                user_id,
            )
            return result == "DELETE 1"
