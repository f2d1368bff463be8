"""Structured diagnostic events emitted while processing frames.

The straggler detector and the update loop report each decision they make
(frame size, group centroid, per-entity distance and flag) as a
:class:`TrackerEvent`.  Observers receive them without being able to
influence control flow.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from squadtrack.models._base import SquadBaseModel
from squadtrack.models.coordinate import Centroid


class EventKind(StrEnum):
    FRAME_LOADED = "frame_loaded"
    GROUP_CENTROID = "group_centroid"
    DISTANCE_EVALUATED = "distance_evaluated"
    STRAGGLERS_FLAGGED = "stragglers_flagged"
    SNAPSHOT_EMITTED = "snapshot_emitted"
    LOOP_TERMINATED = "loop_terminated"


class TrackerEvent(SquadBaseModel):
    """A single observability event."""

    kind: EventKind
    tick: int | None = Field(default=None, description="Frame index the event belongs to")
    group_id: str | None = None
    entity_id: str | None = None
    distance_feet: float | None = None
    threshold_feet: float | None = None
    flagged: bool | None = None
    centroid: Centroid | None = None
    count: int | None = Field(default=None, description="Frame size or number of flagged entities")
    detail: str | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
