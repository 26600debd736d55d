"""
Jira REST API client.
Creates issues and reads project metadata on behalf of a user.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ticketpilot.core.config import settings
from ticketpilot.core.constants import (
    JIRA_BROWSE_PATH,
    JIRA_CREATEMETA_ENDPOINT,
    JIRA_ISSUE_ENDPOINT,
    MSG_CREATE_FAILED,
)
from ticketpilot.core.exceptions import JiraError
from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import JiraCredential
from ticketpilot.domain.tickets import DraftTicket

logger = get_logger(__name__)

# Only errors raised before the request reached Jira are safe to retry;
# a resent issue-creation POST would create a duplicate issue.
_RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


def build_issue_payload(
    ticket: DraftTicket,
    project_key: str,
    story_points_field: Optional[str] = None,
) -> dict[str, Any]:
    """
    Build the issue-creation payload for a draft ticket.

    The story points field is only present when the ticket carries an
    estimate.

    Args:
        ticket: The approved draft ticket
        project_key: Key of the target Jira project
        story_points_field: Custom field ID for story points

    Returns:
        Payload for ``POST /rest/api/2/issue``
    """
    fields: dict[str, Any] = {
        "project": {"key": project_key},
        "summary": ticket.title,
        "description": ticket.description,
        "issuetype": {"name": ticket.type.jira_name},
    }

    if ticket.has_estimate:
        fields[story_points_field or settings.jira.story_points_field] = ticket.estimated_points

    return {"fields": fields}


def extract_error_message(body: str, default: str = MSG_CREATE_FAILED) -> str:
    """
    Pull a human-readable message out of a Jira error body.

    Checks, in order, ``errorMessages``, the field-keyed ``errors`` map and a
    generic ``message`` field.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return default

    if not isinstance(data, dict):
        return default

    error_messages = data.get("errorMessages")
    if isinstance(error_messages, list) and error_messages and error_messages[0]:
        return str(error_messages[0])

    errors = data.get("errors")
    if isinstance(errors, dict) and errors:
        first = next(iter(errors.values()))
        if first:
            return str(first)

    message = data.get("message")
    if message:
        return str(message)

    return default


class JiraClient:
    """
    Async client for a single Jira site, authenticated as one user.
    """

    def __init__(
        self,
        domain: str,
        email: str,
        api_token: str,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        connect_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Jira client.

        Args:
            domain: Jira site host, e.g. ``acme.atlassian.net``
            email: Account email used for Basic auth
            api_token: Jira API token used for Basic auth
            api_version: REST API version
            timeout: Request timeout in seconds
            connect_retries: Attempts when the connection cannot be established
            transport: Optional transport override (used by tests)
        """
        self.domain = domain
        self.base_url = f"https://{domain}"
        self.api_version = api_version or settings.jira.api_version
        self.timeout = timeout if timeout is not None else settings.jira.timeout
        self.connect_retries = connect_retries or settings.jira.connect_retries
        self._auth = httpx.BasicAuth(email, api_token)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_credential(
        cls,
        credential: JiraCredential,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> JiraClient:
        """Build a client from a stored Jira credential."""
        return cls(
            domain=credential.domain,
            email=credential.email,
            api_token=credential.api_token,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=self._auth,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send a request to Jira.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint
            data: Request body data
            params: Query parameters

        Returns:
            The raw response; status handling is left to the caller

        Raises:
            JiraError: If Jira cannot be reached
        """
        client = await self._get_client()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.connect_retries),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
                retry=retry_if_exception_type(_RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    return await client.request(
                        method=method,
                        url=endpoint,
                        json=data,
                        params=params,
                    )
        except httpx.RequestError as e:
            logger.error(
                "Jira request error",
                domain=self.domain,
                endpoint=endpoint,
                error=str(e),
            )
            raise JiraError(f"Request failed: {e}") from e

        raise JiraError("Request failed: no attempt was made")

    async def create_issue(self, payload: dict[str, Any]) -> dict[str, str]:
        """
        Create one issue.

        Args:
            payload: Body built by build_issue_payload

        Returns:
            Dictionary with the new issue's ``id`` and ``key``

        Raises:
            JiraError: If Jira rejects the issue or returns an unreadable body
        """
        endpoint = JIRA_ISSUE_ENDPOINT.format(version=self.api_version)
        response = await self._request("POST", endpoint, data=payload)

        logger.debug(
            "Jira create issue response",
            domain=self.domain,
            status_code=response.status_code,
            body=response.text,
        )

        if not response.is_success:
            message = extract_error_message(response.text, MSG_CREATE_FAILED)
            raise JiraError(message, status_code=response.status_code)

        try:
            result = response.json()
            return {"id": str(result["id"]), "key": str(result["key"])}
        except (ValueError, KeyError, TypeError) as e:
            raise JiraError(
                "Unexpected response from Jira",
                status_code=response.status_code,
            ) from e

    async def get_create_meta(self, project_key: str) -> dict[str, Any]:
        """
        Fetch issue-creation metadata for a project.

        Args:
            project_key: Key of the Jira project

        Returns:
            The ``createmeta`` document with issue types and their fields
        """
        endpoint = JIRA_CREATEMETA_ENDPOINT.format(version=self.api_version)
        response = await self._request(
            "GET",
            endpoint,
            params={
                "projectKeys": project_key,
                "expand": "projects.issuetypes.fields",
            },
        )

        if not response.is_success:
            logger.error(
                "Jira createmeta failed",
                domain=self.domain,
                status_code=response.status_code,
                body=response.text,
            )
            raise JiraError(
                extract_error_message(response.text, "Failed to fetch Jira project configuration"),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise JiraError("Unexpected response from Jira") from e

    def browse_url(self, key: str) -> str:
        """Link to an issue in the Jira web UI."""
        return self.base_url + JIRA_BROWSE_PATH.format(key=key)

    async def __aenter__(self) -> JiraClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
