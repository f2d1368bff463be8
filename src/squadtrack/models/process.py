"""Records kept by the in-memory process service."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from squadtrack.models._base import SquadBaseModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProcessStatus(StrEnum):
    RUNNING = "running"
    FAILED = "failed"
    COMPLETED = "completed"


class StatusUpdate(SquadBaseModel):
    percentage: float = Field(ge=0, le=100)
    text: str
    at: datetime = Field(default_factory=_utcnow)


class ProcessResult(SquadBaseModel):
    text: str
    data: dict[str, Any] = Field(default_factory=dict)
    ui: dict[str, Any] | None = None
    at: datetime = Field(default_factory=_utcnow)


class ProcessRecord(SquadBaseModel):
    """State of one registered process.

    Records are replaced, never mutated: every store operation produces a
    new record via ``model_copy(update=...)``.
    """

    process_id: str
    kind: str
    name: str
    description: str
    status: ProcessStatus = ProcessStatus.RUNNING
    created_at: datetime = Field(default_factory=_utcnow)
    updates: tuple[StatusUpdate, ...] = ()
    results: tuple[ProcessResult, ...] = ()
    failure_reason: str | None = None

    @property
    def latest_result(self) -> ProcessResult | None:
        return self.results[-1] if self.results else None
