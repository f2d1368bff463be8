"""Position models: a single entity fix and the centroid of a point set."""

from __future__ import annotations

from typing import NamedTuple

from pydantic import AliasChoices, Field, field_validator

from squadtrack.models._base import SquadBaseModel


class Centroid(NamedTuple):
    """Arithmetic mean position of a point set.

    ``Centroid(0.0, 0.0)`` is returned for an empty set.  It is a sentinel,
    not a geographic location; check the set size before trusting it.
    """

    latitude: float
    longitude: float


class Coordinate(SquadBaseModel):
    """One entity's position as read from a group's source.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    entity_id : str
        Stable identifier of the entity (``"<group_id>-<row>"`` for CSV sources).
    group_id : str
        Identifier of the group the entity belongs to.  Never empty.
    """

    latitude: float = Field(allow_inf_nan=False, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(allow_inf_nan=False, validation_alias=AliasChoices("longitude", "lon", "lng"))
    entity_id: str = Field(validation_alias=AliasChoices("entity_id", "entityId", "soldierId"))
    group_id: str = Field(validation_alias=AliasChoices("group_id", "groupId", "squadId"))

    @field_validator("entity_id", "group_id")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("identifier must be non-empty")
        return text

    @property
    def point(self) -> tuple[float, float]:
        """``(latitude, longitude)`` pair."""
        return (self.latitude, self.longitude)
