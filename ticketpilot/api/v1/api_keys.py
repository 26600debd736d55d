"""
Language model API key endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from ticketpilot.api.deps import get_credential_service, get_current_user_id
from ticketpilot.core.exceptions import InvalidRequestError
from ticketpilot.services.credential_service import CredentialService

router = APIRouter()


class CreateApiKeyRequest(BaseModel):
    """Request to store a language model key."""

    key: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)


@router.post("/api-keys", status_code=status.HTTP_201_CREATED)
async def create_api_key(
    request: CreateApiKeyRequest,
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    """Store a language model key. The key itself is never echoed back."""
    credential = await service.add_api_key(user_id, key=request.key, model=request.model)
    return {
        "apiKey": credential.public_view(),
        "message": "API key saved successfully",
    }


@router.get("/api-keys")
async def list_api_keys(
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    credentials = await service.list_api_keys(user_id)
    return {"apiKeys": [c.public_view() for c in credentials]}


@router.delete("/api-keys")
async def delete_api_key(
    id: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: CredentialService = Depends(get_credential_service),
) -> dict[str, str]:
    if not id:
        raise InvalidRequestError("API key ID is required", field="id")

    await service.delete_api_key(user_id, id)
    return {"message": "API key deleted successfully"}
