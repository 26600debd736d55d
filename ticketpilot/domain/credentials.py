"""
Credential domain models.

Each credential is owned by exactly one user and is looked up by user
identity on every pipeline call.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ticketpilot.core.security import generate_credential_id
from ticketpilot.domain.base import CamelModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LanguageModelCredential(BaseModel):
    """A user's language model API key and the model to call with it."""

    id: str = Field(default_factory=generate_credential_id)
    user_id: str
    key: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utcnow)

    def public_view(self) -> dict[str, Any]:
        """Representation safe to return to clients (never the key)."""
        return self.model_dump(include={"id", "model"})


class JiraCredential(CamelModel):
    """Connection details for a user's Jira project."""

    id: str = Field(default_factory=generate_credential_id)
    user_id: str
    domain: str = Field(..., min_length=1, description="e.g. acme.atlassian.net")
    email: str = Field(..., min_length=1)
    api_token: str = Field(..., min_length=1)
    project_key: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, v: str) -> str:
        v = v.strip()
        for scheme in ("https://", "http://"):
            if v.lower().startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip("/")

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    def public_view(self) -> dict[str, Any]:
        """Representation safe to return to clients (never the API token)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"api_token"})


class IssueTypeInfo(BaseModel):
    """An issue type available in a Jira project."""

    id: str
    name: str
    description: str = ""
    subtask: bool = False


class JiraProjectConfig(BaseModel):
    """Project configuration fetched from Jira, stored per credential."""

    jira_credential_id: str
    project_key: str
    project_name: str
    issue_types: list[IssueTypeInfo] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_fresh(self, ttl_hours: int, now: Optional[datetime] = None) -> bool:
        """Check whether the stored configuration is younger than the TTL."""
        now = now or utcnow()
        return now - self.updated_at < timedelta(hours=ttl_hours)
