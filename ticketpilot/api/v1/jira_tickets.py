"""
Ticket publishing endpoint: creates approved tickets in Jira.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ticketpilot.api.deps import get_current_user_id, get_ticket_publisher
from ticketpilot.domain.tickets import DraftTicket, PublishReport
from ticketpilot.services.ticket_publisher import TicketPublisher

router = APIRouter()


class CreateTicketsRequest(BaseModel):
    """Approved tickets to create in Jira."""

    tickets: list[DraftTicket]


@router.post(
    "/jira-tickets",
    response_model=PublishReport,
    responses={
        status.HTTP_207_MULTI_STATUS: {
            "model": PublishReport,
            "description": "Some tickets failed to create",
        }
    },
)
async def create_jira_tickets(
    request: CreateTicketsRequest,
    user_id: str = Depends(get_current_user_id),
    publisher: TicketPublisher = Depends(get_ticket_publisher),
) -> JSONResponse:
    """
    Create each submitted ticket in the user's Jira project.

    Returns 200 when every ticket was created and 207 when some failed; the
    result list always covers every submitted ticket in order, so only the
    failed entries need resubmitting.
    """
    report = await publisher.publish(user_id=user_id, tickets=request.tickets)

    status_code = status.HTTP_207_MULTI_STATUS if report.has_failures else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=report.to_response())
