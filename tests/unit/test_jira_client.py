"""
Unit tests for the Jira REST client.
"""

import base64
import json

import httpx
import pytest

from ticketpilot.clients.jira_client import JiraClient, build_issue_payload, extract_error_message
from ticketpilot.core.exceptions import JiraError
from ticketpilot.domain.credentials import JiraCredential
from ticketpilot.domain.tickets import DraftTicket


class TestBuildIssuePayload:
    """Tests for issue payload construction."""

    def test_payload_with_estimate(self) -> None:
        ticket = DraftTicket(
            title="Add dark mode",
            description="Support a dark theme.",
            type="story",
            priority="medium",
            estimated_points=8,
        )

        payload = build_issue_payload(ticket, "PROJ", "customfield_10016")

        assert payload == {
            "fields": {
                "project": {"key": "PROJ"},
                "summary": "Add dark mode",
                "description": "Support a dark theme.",
                "issuetype": {"name": "Story"},
                "customfield_10016": 8,
            }
        }

    def test_payload_without_estimate_omits_points_field(self) -> None:
        ticket = DraftTicket(title="t", description="d", type="bug", priority="high")

        fields = build_issue_payload(ticket, "PROJ", "customfield_10016")["fields"]

        assert "customfield_10016" not in fields
        assert fields["issuetype"] == {"name": "Bug"}

    def test_priority_is_not_sent(self) -> None:
        ticket = DraftTicket(title="t", description="d", type="task", priority="high")
        assert "priority" not in build_issue_payload(ticket, "PROJ")["fields"]


class TestExtractErrorMessage:
    """Tests for Jira error body interpretation."""

    def test_prefers_error_messages(self) -> None:
        body = json.dumps(
            {
                "errorMessages": ["Issue type is required"],
                "errors": {"summary": "Summary is required"},
                "message": "Bad request",
            }
        )
        assert extract_error_message(body) == "Issue type is required"

    def test_falls_back_to_field_errors(self) -> None:
        body = json.dumps({"errorMessages": [], "errors": {"summary": "Summary is required"}})
        assert extract_error_message(body) == "Summary is required"

    def test_falls_back_to_message(self) -> None:
        assert extract_error_message(json.dumps({"message": "Bad request"})) == "Bad request"

    @pytest.mark.parametrize("body", ["", "<html>oops</html>", "[]", "{}"])
    def test_default_when_unreadable(self, body: str) -> None:
        assert extract_error_message(body, "fallback") == "fallback"


class TestJiraClient:
    """Tests for the JiraClient class."""

    @pytest.mark.asyncio
    async def test_create_issue_sends_basic_auth(self, jira_credential: JiraCredential) -> None:
        seen: list[httpx.Request] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 10001, "key": "PROJ-1", "self": "..."})

        async with JiraClient.from_credential(
            jira_credential, transport=httpx.MockTransport(handler)
        ) as client:
            created = await client.create_issue({"fields": {"summary": "t"}})

        assert created == {"id": "10001", "key": "PROJ-1"}

        request = seen[0]
        expected = base64.b64encode(b"dev@acme.io:jira-token-123").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.method == "POST"
        assert request.url.path == "/rest/api/2/issue"
        assert json.loads(request.content) == {"fields": {"summary": "t"}}

    @pytest.mark.asyncio
    async def test_create_issue_rejection(self, jira_credential: JiraCredential) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={"errorMessages": [], "errors": {"issuetype": "Issue type is invalid"}}
            )

        async with JiraClient.from_credential(
            jira_credential, transport=httpx.MockTransport(handler)
        ) as client:
            with pytest.raises(JiraError) as exc_info:
                await client.create_issue({"fields": {}})

        assert exc_info.value.message == "Issue type is invalid"
        assert exc_info.value.details["jira_status"] == 400

    @pytest.mark.asyncio
    async def test_create_issue_unreadable_success_body(
        self, jira_credential: JiraCredential
    ) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, text="created")

        async with JiraClient.from_credential(
            jira_credential, transport=httpx.MockTransport(handler)
        ) as client:
            with pytest.raises(JiraError, match="Unexpected response"):
                await client.create_issue({"fields": {}})

    @pytest.mark.asyncio
    async def test_connect_errors_are_retried(self, jira_credential: JiraCredential) -> None:
        attempts = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(201, json={"id": "1", "key": "PROJ-1"})

        client = JiraClient(
            domain=jira_credential.domain,
            email=jira_credential.email,
            api_token=jira_credential.api_token,
            connect_retries=2,
            transport=httpx.MockTransport(handler),
        )
        async with client:
            created = await client.create_issue({"fields": {}})

        assert created["key"] == "PROJ-1"
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_read_timeouts_are_not_retried(self, jira_credential: JiraCredential) -> None:
        attempts = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ReadTimeout("timed out", request=request)

        client = JiraClient(
            domain=jira_credential.domain,
            email=jira_credential.email,
            api_token=jira_credential.api_token,
            connect_retries=3,
            transport=httpx.MockTransport(handler),
        )
        async with client:
            with pytest.raises(JiraError, match="Request failed"):
                await client.create_issue({"fields": {}})

        assert attempts == 1

    @pytest.mark.asyncio
    async def test_get_create_meta(self, jira_credential: JiraCredential) -> None:
        seen: list[httpx.Request] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"projects": []})

        async with JiraClient.from_credential(
            jira_credential, transport=httpx.MockTransport(handler)
        ) as client:
            data = await client.get_create_meta("PROJ")

        assert data == {"projects": []}
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/api/2/issue/createmeta"
        assert request.url.params["projectKeys"] == "PROJ"
        assert request.url.params["expand"] == "projects.issuetypes.fields"

    @pytest.mark.asyncio
    async def test_get_create_meta_failure(self, jira_credential: JiraCredential) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Client must be authenticated"})

        async with JiraClient.from_credential(
            jira_credential, transport=httpx.MockTransport(handler)
        ) as client:
            with pytest.raises(JiraError) as exc_info:
                await client.get_create_meta("PROJ")

        assert exc_info.value.message == "Client must be authenticated"

    def test_browse_url(self, jira_credential: JiraCredential) -> None:
        client = JiraClient.from_credential(jira_credential)
        assert client.browse_url("PROJ-7") == "https://acme.atlassian.net/browse/PROJ-7"
