"""Frame and snapshot models produced by the update loop."""

from __future__ import annotations

from pydantic import Field, field_serializer

from squadtrack.models._base import SquadBaseModel
from squadtrack.models.coordinate import Centroid, Coordinate


class Frame(SquadBaseModel):
    """One synchronized cross-group set of positions."""

    index: int = Field(ge=0)
    coordinates: tuple[Coordinate, ...] = ()

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def is_empty(self) -> bool:
        return not self.coordinates

    @property
    def group_ids(self) -> list[str]:
        """Group ids in order of first appearance."""
        return list(dict.fromkeys(coord.group_id for coord in self.coordinates))


class Snapshot(SquadBaseModel):
    """Result of one successful tick.

    Ownership passes to the sink as soon as the snapshot is emitted; the
    update loop keeps no reference to it.
    """

    frame_index: int = Field(ge=0)
    coordinates: tuple[Coordinate, ...]
    stragglers: frozenset[str] = frozenset()
    centroid: Centroid

    @field_serializer("stragglers")
    def _serialize_stragglers(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    @property
    def row_number(self) -> int:
        """1-based frame number as shown to users."""
        return self.frame_index + 1
