"""
Publishing approved draft tickets to Jira.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Sequence

from ticketpilot.clients.jira_client import JiraClient, build_issue_payload
from ticketpilot.core.config import settings
from ticketpilot.core.constants import (
    CREDENTIAL_JIRA,
    MSG_ALL_CREATED,
    MSG_CREATE_FAILED,
    MSG_NO_JIRA_CREDENTIALS,
    MSG_SOME_FAILED,
)
from ticketpilot.core.exceptions import CredentialMissingError, JiraError
from ticketpilot.core.logging import LogContext, get_logger
from ticketpilot.domain.credentials import JiraCredential
from ticketpilot.domain.tickets import DraftTicket, PublishReport, PublishResult
from ticketpilot.repositories.base import JiraCredentialRepository

logger = get_logger(__name__)

JiraClientFactory = Callable[[JiraCredential], JiraClient]


class TicketPublisher:
    """
    Creates one Jira issue per approved draft ticket.

    Every ticket is an independent call: a failure is recorded against that
    ticket and never stops or rolls back the others. There is no duplicate
    guard, so resubmitting a ticket that was already created creates it
    again; callers retry only the entries reported as failed.
    """

    def __init__(
        self,
        jira_credential_repository: JiraCredentialRepository,
        client_factory: Optional[JiraClientFactory] = None,
        max_concurrency: Optional[int] = None,
        story_points_field: Optional[str] = None,
    ) -> None:
        """
        Initialize the publisher.

        Args:
            jira_credential_repository: Store holding users' Jira credentials
            client_factory: Builds a Jira client from a credential
            max_concurrency: Upper bound on simultaneous issue creations
            story_points_field: Custom field ID for story points
        """
        self.jira_credential_repository = jira_credential_repository
        self.client_factory = client_factory or JiraClient.from_credential
        self.max_concurrency = max_concurrency or settings.jira.max_concurrent_requests
        self.story_points_field = story_points_field or settings.jira.story_points_field

    async def publish(self, user_id: str, tickets: Sequence[DraftTicket]) -> PublishReport:
        """
        Create the given tickets in the user's Jira project.

        Args:
            user_id: The requesting user
            tickets: Approved tickets, possibly edited or filtered

        Returns:
            Report with one result per ticket, in input order

        Raises:
            CredentialMissingError: If the user has no Jira credential
        """
        credential = await self.jira_credential_repository.get_for_user(user_id)
        if credential is None:
            raise CredentialMissingError(CREDENTIAL_JIRA, MSG_NO_JIRA_CREDENTIALS)

        logger.info(
            "Creating tickets",
            user_id=user_id,
            domain=credential.domain,
            email=credential.email,
            project_key=credential.project_key,
            count=len(tickets),
        )

        if not tickets:
            return PublishReport(message=MSG_ALL_CREATED, results=[])

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async with self.client_factory(credential) as client:
            # gather keeps results positional; each task owns its result
            results = await asyncio.gather(
                *(
                    self._publish_one(client, credential, ticket, semaphore)
                    for ticket in tickets
                )
            )

        failed = sum(1 for r in results if not r.is_created)
        logger.info(
            "Tickets published",
            user_id=user_id,
            created=len(results) - failed,
            failed=failed,
        )

        return PublishReport(
            message=MSG_SOME_FAILED if failed else MSG_ALL_CREATED,
            results=list(results),
        )

    async def _publish_one(
        self,
        client: JiraClient,
        credential: JiraCredential,
        ticket: DraftTicket,
        semaphore: asyncio.Semaphore,
    ) -> PublishResult:
        """Create a single issue and convert the outcome into a result."""
        payload = build_issue_payload(ticket, credential.project_key, self.story_points_field)

        with LogContext(ticket_title=ticket.title):
            async with semaphore:
                try:
                    created = await client.create_issue(payload)
                except JiraError as e:
                    logger.warning(
                        "Error creating Jira ticket",
                        domain=credential.domain,
                        project_key=credential.project_key,
                        error=e.message,
                        jira_status=e.details.get("jira_status"),
                    )
                    return PublishResult.failed(ticket, e.message)
                except Exception as e:
                    # One broken ticket must not take the batch down with it
                    logger.exception(
                        "Unexpected error creating Jira ticket",
                        domain=credential.domain,
                    )
                    return PublishResult.failed(ticket, str(e) or MSG_CREATE_FAILED)

        return PublishResult.created(
            ticket,
            issue_id=created["id"],
            issue_key=created["key"],
            url=client.browse_url(created["key"]),
        )
