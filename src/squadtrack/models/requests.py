"""Validated input of the live tracking operation."""

from __future__ import annotations

from pydantic import Field

from squadtrack._constants import DEFAULT_THRESHOLD_FEET
from squadtrack.models._base import SquadBaseModel


class LiveMapRequest(SquadBaseModel):
    """Body of ``POST /tools/live-map``.

    ``thresholdFeet`` must be a non-negative finite JSON number of feet;
    booleans and numeric strings are rejected.
    """

    threshold_feet: float = Field(
        default=DEFAULT_THRESHOLD_FEET,
        ge=0,
        strict=True,
        allow_inf_nan=False,
        description="Distance threshold in feet for stragglers",
    )


class TrackingHandle(SquadBaseModel):
    """Immediate answer of a tracking start: the process id and an empty straggler list."""

    process_id: str
    stragglers: tuple[str, ...] = ()

    @property
    def initial_stragglers(self) -> list[str]:
        return list(self.stragglers)
