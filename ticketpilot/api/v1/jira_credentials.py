"""
Jira credential endpoints.
"""

import re
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator

from ticketpilot.api.deps import get_credential_service, get_current_user_id
from ticketpilot.domain.base import CamelModel
from ticketpilot.services.credential_service import CredentialService

router = APIRouter()

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SaveJiraCredentialsRequest(CamelModel):
    """Request to create or replace the user's Jira credential."""

    domain: str = Field(..., min_length=1, description="e.g. acme.atlassian.net")
    email: str = Field(..., min_length=1)
    api_token: str = Field(..., min_length=1)
    project_key: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not _EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


@router.post("/jira-credentials", status_code=status.HTTP_201_CREATED)
async def save_jira_credentials(
    request: SaveJiraCredentialsRequest,
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    """Create or update the user's Jira credential. The token is never echoed back."""
    credential = await service.save_jira_credential(
        user_id,
        domain=request.domain,
        email=request.email,
        api_token=request.api_token,
        project_key=request.project_key,
    )
    return {
        "credentials": credential.public_view(),
        "message": "Jira credentials saved successfully",
    }


@router.get("/jira-credentials")
async def get_jira_credentials(
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    credential = await service.get_jira_credential(user_id)
    return {"credentials": credential.public_view() if credential else None}


@router.delete("/jira-credentials")
async def delete_jira_credentials(
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, str]:
    await service.delete_jira_credential(user_id)
    return {"message": "Jira credentials deleted successfully"}
