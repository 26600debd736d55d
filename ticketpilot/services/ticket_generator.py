"""
Ticket draft generation from free-form documents.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ticketpilot.clients.llm_client import ChatMessage, LanguageModelClient
from ticketpilot.core.constants import CREDENTIAL_LANGUAGE_MODEL, MSG_NO_API_KEY, MessageRole
from ticketpilot.core.exceptions import CredentialMissingError, GenerationFailedError, LLMError
from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import LanguageModelCredential
from ticketpilot.domain.tickets import DraftTicket
from ticketpilot.prompts.ticket_generation import TICKET_GENERATION_SYSTEM_PROMPT
from ticketpilot.repositories.base import ApiKeyRepository

logger = get_logger(__name__)

LLMClientFactory = Callable[[LanguageModelCredential], LanguageModelClient]

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_DRAFT_LIST = TypeAdapter(list[DraftTicket])


def _clean_estimate(value: Any) -> Optional[float]:
    """Keep an estimate only when it is a positive number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value if value > 0 else None


def parse_ticket_drafts(raw: str) -> list[DraftTicket]:
    """
    Parse a model response into draft tickets.

    The response is expected to be a JSON object with a ``tickets`` array,
    but nothing guarantees it: code fences are stripped, unusable estimates
    are dropped, and every other deviation fails the whole batch.

    Args:
        raw: Completion text returned by the model

    Returns:
        Validated draft tickets, in the order the model listed them

    Raises:
        GenerationFailedError: If the text is not a usable ticket list
    """
    text = raw.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except ValueError as e:
        raise GenerationFailedError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("tickets"), list):
        raise GenerationFailedError("Response has no 'tickets' array")

    items: list[Any] = []
    for item in data["tickets"]:
        if isinstance(item, dict) and "estimatedPoints" in item:
            item = dict(item)
            estimate = _clean_estimate(item.pop("estimatedPoints"))
            if estimate is not None:
                item["estimatedPoints"] = estimate
        items.append(item)

    try:
        return _DRAFT_LIST.validate_python(items)
    except PydanticValidationError as e:
        raise GenerationFailedError(
            f"Response contains malformed tickets: {e.error_count()} error(s)"
        ) from e


class TicketDraftGenerator:
    """
    Turns document text into draft tickets using the user's language model.

    Drafts are returned for review and never stored.
    """

    def __init__(
        self,
        api_key_repository: ApiKeyRepository,
        client_factory: Optional[LLMClientFactory] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            api_key_repository: Store holding users' language model keys
            client_factory: Builds a client from a credential
        """
        self.api_key_repository = api_key_repository
        self.client_factory = client_factory or LanguageModelClient.from_credential

    async def generate(self, user_id: str, content: str) -> list[DraftTicket]:
        """
        Generate draft tickets for a document.

        Args:
            user_id: The requesting user
            content: Document text

        Returns:
            Draft tickets for the caller to review

        Raises:
            CredentialMissingError: If the user has no language model key
            GenerationFailedError: If the model call or its output is unusable
        """
        # Read fresh on every call; the user may have changed keys meanwhile
        credential = await self.api_key_repository.get_for_user(user_id)
        if credential is None:
            raise CredentialMissingError(CREDENTIAL_LANGUAGE_MODEL, MSG_NO_API_KEY)

        messages = [
            ChatMessage(role=MessageRole.SYSTEM, content=TICKET_GENERATION_SYSTEM_PROMPT),
            ChatMessage(role=MessageRole.USER, content=content),
        ]

        logger.info(
            "Generating ticket drafts",
            user_id=user_id,
            model=credential.model,
            content_length=len(content),
        )

        try:
            async with self.client_factory(credential) as client:
                raw = await client.complete_json(credential.model, messages)
        except LLMError as e:
            logger.error("Ticket generation failed", user_id=user_id, error=e.message)
            raise GenerationFailedError(e.message) from e

        try:
            tickets = parse_ticket_drafts(raw)
        except GenerationFailedError as e:
            logger.error(
                "Model response rejected",
                user_id=user_id,
                model=credential.model,
                reason=e.reason,
            )
            raise

        logger.info("Ticket drafts generated", user_id=user_id, count=len(tickets))
        return tickets
