"""
Unit tests for the ticket publisher.
"""

import asyncio
import json
from typing import Callable

import httpx
import pytest

from ticketpilot.clients.jira_client import JiraClient
from ticketpilot.core.constants import MSG_ALL_CREATED, MSG_SOME_FAILED, PublishStatus
from ticketpilot.core.exceptions import CredentialMissingError
from ticketpilot.domain.credentials import JiraCredential
from ticketpilot.domain.tickets import DraftTicket
from ticketpilot.repositories import InMemoryJiraCredentialRepository
from ticketpilot.services.ticket_publisher import TicketPublisher


class JiraStub:
    """Answers issue-creation requests and remembers every payload."""

    def __init__(self, reject: tuple[str, ...] = ()) -> None:
        self.reject = reject
        self.payloads: list[dict] = []
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(request)
        self.payloads.append(payload)
        summary = payload["fields"]["summary"]

        if summary in self.reject:
            return httpx.Response(400, json={"errorMessages": ["Project 'BAD' does not exist"]})

        number = len(self.payloads)
        return httpx.Response(201, json={"id": str(10000 + number), "key": f"PROJ-{number}"})

    def payload_for(self, title: str) -> dict:
        return next(p for p in self.payloads if p["fields"]["summary"] == title)


@pytest.fixture
async def stored_credential(
    jira_credential_repository: InMemoryJiraCredentialRepository,
    jira_credential: JiraCredential,
) -> JiraCredential:
    return await jira_credential_repository.save(jira_credential)


class TestTicketPublisher:
    """Tests for the TicketPublisher class."""

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_calls(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        with pytest.raises(CredentialMissingError) as exc_info:
            await publisher.publish(user_id, sample_tickets)

        assert exc_info.value.status_code == 400
        assert stub.requests == []

    @pytest.mark.asyncio
    async def test_all_tickets_created(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        report = await publisher.publish(user_id, sample_tickets)

        assert report.message == MSG_ALL_CREATED
        assert not report.has_failures
        assert [r.title for r in report.results] == [t.title for t in sample_tickets]
        for result in report.results:
            assert result.status == PublishStatus.CREATED
            assert result.key.startswith("PROJ-")
            assert result.url == f"https://acme.atlassian.net/browse/{result.key}"

        assert str(stub.requests[0].url) == "https://acme.atlassian.net/rest/api/2/issue"

    @pytest.mark.asyncio
    async def test_rejected_ticket_does_not_affect_others(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub(reject=("Fix crash on login",))
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        report = await publisher.publish(user_id, sample_tickets)

        assert len(report.results) == 3
        assert [r.status for r in report.results] == [
            PublishStatus.CREATED,
            PublishStatus.FAILED,
            PublishStatus.CREATED,
        ]
        assert report.has_failures
        assert report.message == MSG_SOME_FAILED

        failed = report.results[1]
        assert failed.title == "Fix crash on login"
        assert failed.error == "Project 'BAD' does not exist"
        assert failed.key is None

        assert [r.title for r in report.failed_results] == ["Fix crash on login"]

    @pytest.mark.asyncio
    async def test_payload_fields(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        await publisher.publish(user_id, sample_tickets)

        story = stub.payload_for("Add dark mode")["fields"]
        assert story["project"] == {"key": "PROJ"}
        assert story["issuetype"] == {"name": "Story"}
        assert story["description"] == sample_tickets[0].description
        assert story["customfield_10016"] == 5

        bug = stub.payload_for("Fix crash on login")["fields"]
        assert bug["issuetype"] == {"name": "Bug"}
        assert "customfield_10016" not in bug

        task = stub.payload_for("Update onboarding copy")["fields"]
        assert task["issuetype"] == {"name": "Task"}
        assert task["customfield_10016"] == 1.5

    @pytest.mark.asyncio
    async def test_custom_story_points_field(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository,
            client_factory=jira_client_factory(stub),
            story_points_field="customfield_20000",
        )

        await publisher.publish(user_id, sample_tickets[:1])

        fields = stub.payloads[0]["fields"]
        assert fields["customfield_20000"] == 5
        assert "customfield_10016" not in fields

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        user_id: str,
    ) -> None:
        in_flight = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            summary = json.loads(request.content)["fields"]["summary"]
            return httpx.Response(201, json={"id": "1", "key": f"PROJ-{summary}"})

        tickets = [
            DraftTicket(title=str(i), description="d", type="task", priority="low")
            for i in range(8)
        ]
        publisher = TicketPublisher(
            jira_credential_repository,
            client_factory=jira_client_factory(handler),
            max_concurrency=2,
        )

        report = await publisher.publish(user_id, tickets)

        assert peak <= 2
        # Order follows the input even though calls overlap
        assert [r.key for r in report.results] == [f"PROJ-{i}" for i in range(8)]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_isolated(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            summary = json.loads(request.content)["fields"]["summary"]
            if summary == "Add dark mode":
                raise RuntimeError("boom")
            return httpx.Response(201, json={"id": "1", "key": "PROJ-1"})

        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(handler)
        )

        report = await publisher.publish(user_id, sample_tickets)

        assert report.results[0].status == PublishStatus.FAILED
        assert report.results[0].error == "boom"
        assert [r.status for r in report.results[1:]] == [PublishStatus.CREATED] * 2

    @pytest.mark.asyncio
    async def test_unreachable_jira_fails_every_ticket(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        attempts = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ConnectError("connection refused", request=request)

        def factory(credential: JiraCredential) -> JiraClient:
            return JiraClient(
                domain=credential.domain,
                email=credential.email,
                api_token=credential.api_token,
                connect_retries=1,
                transport=httpx.MockTransport(handler),
            )

        publisher = TicketPublisher(jira_credential_repository, client_factory=factory)

        report = await publisher.publish(user_id, sample_tickets)

        assert all(r.status == PublishStatus.FAILED for r in report.results)
        assert all(r.error.startswith("Request failed") for r in report.results)
        assert attempts == 3

    @pytest.mark.asyncio
    async def test_empty_list_creates_nothing(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        report = await publisher.publish(user_id, [])

        assert report.results == []
        assert report.message == MSG_ALL_CREATED
        assert stub.requests == []

    @pytest.mark.asyncio
    async def test_resubmitting_creates_a_duplicate(
        self,
        jira_credential_repository: InMemoryJiraCredentialRepository,
        stored_credential: JiraCredential,
        jira_client_factory: Callable,
        sample_tickets: list[DraftTicket],
        user_id: str,
    ) -> None:
        stub = JiraStub()
        publisher = TicketPublisher(
            jira_credential_repository, client_factory=jira_client_factory(stub)
        )

        first = await publisher.publish(user_id, sample_tickets[:1])
        second = await publisher.publish(user_id, sample_tickets[:1])

        assert len(stub.payloads) == 2
        assert first.results[0].key != second.results[0].key
