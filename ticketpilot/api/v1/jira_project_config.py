"""
Jira project configuration endpoint.
"""

from typing import Any

from fastapi import APIRouter, Depends

from ticketpilot.api.deps import get_current_user_id, get_project_config_service
from ticketpilot.services.project_config_service import ProjectConfigService

router = APIRouter()


@router.get("/jira-project-config")
async def get_jira_project_config(
    user_id: str = Depends(get_current_user_id),
    service: ProjectConfigService = Depends(get_project_config_service),
) -> dict[str, Any]:
    """
    Issue types available in the user's Jira project.
    Served from storage while younger than the configured TTL.
    """
    result = await service.get_project_config(user_id)
    return result.to_response()
