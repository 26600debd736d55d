"""
Service layer implementations.
"""

from ticketpilot.services.credential_service import CredentialService
from ticketpilot.services.project_config_service import ProjectConfigResult, ProjectConfigService
from ticketpilot.services.ticket_generator import TicketDraftGenerator, parse_ticket_drafts
from ticketpilot.services.ticket_publisher import TicketPublisher

__all__ = [
    "CredentialService",
    "ProjectConfigResult",
    "ProjectConfigService",
    "TicketDraftGenerator",
    "TicketPublisher",
    "parse_ticket_drafts",
]
