"""
Ticket domain models shared by the generator and the publisher.

Draft tickets are never persisted: they live in the generate response and in
whatever the caller keeps until it submits them for publishing.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

from pydantic import Field, PositiveFloat, PositiveInt, field_validator

from ticketpilot.core.constants import PublishStatus, TicketPriority, TicketType
from ticketpilot.domain.base import CamelModel


class DraftTicket(CamelModel):
    """A proposed work ticket awaiting review."""

    title: str = Field(..., min_length=1, description="Short ticket summary")
    description: str = Field(..., min_length=1, description="Ticket body")
    type: TicketType = Field(..., description="task, story or bug")
    priority: TicketPriority = Field(..., description="low, medium or high")
    estimated_points: Optional[Union[PositiveInt, PositiveFloat]] = Field(
        default=None, description="Story point estimate"
    )

    @field_validator("type", "priority", mode="before")
    @classmethod
    def normalize_enum_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("estimated_points", mode="before")
    @classmethod
    def require_finite_number(cls, v: Any) -> Any:
        # Lax mode would read true as 1 and "5" as 5
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("estimatedPoints must be a number")
        if not math.isfinite(v):
            raise ValueError("estimatedPoints must be finite")
        return v

    @property
    def has_estimate(self) -> bool:
        return self.estimated_points is not None


class PublishResult(CamelModel):
    """Outcome of publishing one draft ticket."""

    title: str
    status: PublishStatus
    id: Optional[str] = None
    key: Optional[str] = None
    url: Optional[str] = None
    priority: Optional[TicketPriority] = None
    error: Optional[str] = None

    @classmethod
    def created(
        cls,
        ticket: DraftTicket,
        issue_id: str,
        issue_key: str,
        url: Optional[str] = None,
    ) -> PublishResult:
        return cls(
            title=ticket.title,
            status=PublishStatus.CREATED,
            id=issue_id,
            key=issue_key,
            url=url,
            priority=ticket.priority,
        )

    @classmethod
    def failed(cls, ticket: DraftTicket, error: str) -> PublishResult:
        return cls(title=ticket.title, status=PublishStatus.FAILED, error=error)

    @property
    def is_created(self) -> bool:
        return self.status == PublishStatus.CREATED


class PublishReport(CamelModel):
    """Per-ticket outcomes of a publish call, in submission order."""

    message: str
    results: list[PublishResult] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """True when at least one ticket failed to publish."""
        return any(not r.is_created for r in self.results)

    @property
    def failed_results(self) -> list[PublishResult]:
        return [r for r in self.results if not r.is_created]

    def to_response(self) -> dict[str, Any]:
        """Wire representation with absent fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
