"""
Pytest configuration and fixtures.
"""

import json
from typing import Any, AsyncGenerator, Awaitable, Callable, Generator, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from ticketpilot.api.deps import container
from ticketpilot.clients.jira_client import JiraClient
from ticketpilot.core.exceptions import LLMError
from ticketpilot.core.security import create_user_token
from ticketpilot.domain.credentials import JiraCredential, LanguageModelCredential
from ticketpilot.domain.tickets import DraftTicket
from ticketpilot.main import app
from ticketpilot.repositories import (
    InMemoryApiKeyRepository,
    InMemoryJiraCredentialRepository,
    InMemoryProjectConfigRepository,
)

JiraHandler = Callable[[httpx.Request], Awaitable[httpx.Response]]


class FakeLLMClient:
    """Stands in for LanguageModelClient and records every completion request."""

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def complete_json(self, model: str, messages: list[Any]) -> str:
        self.calls.append({"model": model, "messages": messages})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    async def __aenter__(self) -> "FakeLLMClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def fresh_container() -> Generator[None, None, None]:
    """Give every test its own in-memory stores and no dependency overrides."""
    container.reset()
    container.initialize()
    yield
    app.dependency_overrides.clear()
    container.reset()


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def user_id() -> str:
    """Sample user ID for testing."""
    return "user_test123456"


@pytest.fixture
def auth_headers(user_id: str) -> dict[str, str]:
    """Bearer token header for the sample user."""
    return {"Authorization": f"Bearer {create_user_token(user_id)}"}


@pytest.fixture
def api_key_repository() -> InMemoryApiKeyRepository:
    return InMemoryApiKeyRepository()


@pytest.fixture
def jira_credential_repository() -> InMemoryJiraCredentialRepository:
    return InMemoryJiraCredentialRepository()


@pytest.fixture
def project_config_repository() -> InMemoryProjectConfigRepository:
    return InMemoryProjectConfigRepository()


@pytest.fixture
def language_model_credential(user_id: str) -> LanguageModelCredential:
    return LanguageModelCredential(user_id=user_id, key="sk-test-key", model="gpt-4o-mini")


@pytest.fixture
def jira_credential(user_id: str) -> JiraCredential:
    return JiraCredential(
        user_id=user_id,
        domain="acme.atlassian.net",
        email="dev@acme.io",
        api_token="jira-token-123",
        project_key="PROJ",
    )


@pytest.fixture
def sample_tickets() -> list[DraftTicket]:
    """Three approved tickets, the middle one without an estimate."""
    return [
        DraftTicket(
            title="Add dark mode",
            description="Support a dark colour scheme across the app.",
            type="story",
            priority="medium",
            estimated_points=5,
        ),
        DraftTicket(
            title="Fix crash on login",
            description="The app crashes when the password field is empty.",
            type="bug",
            priority="high",
        ),
        DraftTicket(
            title="Update onboarding copy",
            description="Rewrite the welcome screen text.",
            type="task",
            priority="low",
            estimated_points=1.5,
        ),
    ]


@pytest.fixture
def llm_response() -> str:
    """A well-formed model response for a two-item document."""
    return json.dumps(
        {
            "tickets": [
                {
                    "title": "Add dark mode",
                    "description": "Offer a dark theme toggle in settings.",
                    "type": "story",
                    "priority": "medium",
                    "estimatedPoints": 3,
                },
                {
                    "title": "Fix crash on login",
                    "description": "Login crashes; add a guard and a regression test.",
                    "type": "bug",
                    "priority": "high",
                },
            ]
        }
    )


@pytest.fixture
def jira_client_factory() -> Callable[[JiraHandler], Callable[[JiraCredential], JiraClient]]:
    """Build a Jira client factory whose requests are answered by a handler."""

    def make(handler: JiraHandler) -> Callable[[JiraCredential], JiraClient]:
        def factory(credential: JiraCredential) -> JiraClient:
            return JiraClient.from_credential(credential, transport=httpx.MockTransport(handler))

        return factory

    return make


@pytest.fixture
def llm_error() -> LLMError:
    return LLMError("Completion request failed: upstream timeout")


@pytest.fixture
def make_llm_client() -> Callable[..., FakeLLMClient]:
    """Build a fake language model client with a canned response or error."""

    def make(response: Optional[str] = None, error: Optional[Exception] = None) -> FakeLLMClient:
        return FakeLLMClient(response=response, error=error)

    return make
