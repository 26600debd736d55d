"""
Document processing endpoint: turns a document into draft tickets.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ticketpilot.api.deps import get_current_user_id, get_ticket_generator
from ticketpilot.core.constants import MSG_TICKETS_GENERATED
from ticketpilot.domain.base import CamelModel
from ticketpilot.domain.tickets import DraftTicket
from ticketpilot.services.ticket_generator import TicketDraftGenerator

router = APIRouter()


class ProcessDocumentRequest(BaseModel):
    """Request to generate draft tickets from a document."""

    content: str = Field(..., min_length=1, description="Free-form document text")


class ProcessDocumentResponse(CamelModel):
    """Draft tickets awaiting review."""

    tickets: list[DraftTicket]
    message: str


@router.post(
    "/process-document",
    response_model=ProcessDocumentResponse,
    response_model_exclude_none=True,
)
async def process_document(
    request: ProcessDocumentRequest,
    user_id: str = Depends(get_current_user_id),
    generator: TicketDraftGenerator = Depends(get_ticket_generator),
) -> ProcessDocumentResponse:
    """
    Generate draft tickets for review.

    Nothing is created in Jira here; approved tickets are submitted
    separately to the tickets endpoint.
    """
    tickets = await generator.generate(user_id=user_id, content=request.content)
    return ProcessDocumentResponse(tickets=tickets, message=MSG_TICKETS_GENERATED)
