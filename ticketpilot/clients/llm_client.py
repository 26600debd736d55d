"""
Language model client built on the OpenAI SDK.
A client is created per request from the requesting user's stored key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from ticketpilot.core.config import settings
from ticketpilot.core.constants import MessageRole
from ticketpilot.core.exceptions import LLMError
from ticketpilot.core.logging import get_logger
from ticketpilot.domain.credentials import LanguageModelCredential

logger = get_logger(__name__)


@dataclass
class ChatMessage:
    """A message in a chat completion request."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to API format."""
        return {"role": self.role.value, "content": self.content}


class LanguageModelClient:
    """
    Wrapper around the OpenAI chat completions API.
    Works with any OpenAI-compatible endpoint via ``LLM_BASE_URL``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or settings.llm.base_url,
            timeout=timeout if timeout is not None else settings.llm.timeout,
            max_retries=max_retries if max_retries is not None else settings.llm.max_retries,
        )

    @classmethod
    def from_credential(cls, credential: LanguageModelCredential) -> LanguageModelClient:
        """Build a client from a stored language model credential."""
        return cls(api_key=credential.key)

    async def complete_json(
        self,
        model: str,
        messages: list[ChatMessage],
        temperature: Optional[float] = None,
    ) -> str:
        """
        Request a completion constrained to a JSON object.

        Args:
            model: Model name stored with the user's key
            messages: Conversation to send
            temperature: Optional sampling temperature

        Returns:
            Raw text of the first choice

        Raises:
            LLMError: If the provider call fails or returns no content
        """
        kwargs: dict[str, Any] = {}
        temperature = temperature if temperature is not None else settings.llm.temperature
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            completion = await self._client.chat.completions.create(
                model=model,
                messages=[m.to_dict() for m in messages],
                response_format={"type": "json_object"},
                **kwargs,
            )
        except openai.OpenAIError as e:
            logger.error("Completion request failed", model=model, error=str(e))
            raise LLMError(f"Completion request failed: {e}", details={"model": model}) from e

        if not completion.choices:
            raise LLMError("Completion returned no choices", details={"model": model})

        content = completion.choices[0].message.content
        if not content:
            raise LLMError("Completion returned empty content", details={"model": model})

        usage = getattr(completion, "usage", None)
        logger.debug(
            "Completion received",
            model=model,
            total_tokens=getattr(usage, "total_tokens", None),
        )
        return content

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> LanguageModelClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
