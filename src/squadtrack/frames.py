"""Frame synchronization.

All sources are read and flattened, in catalog order, into one sequence of
coordinates.  Every record gets the id ``"<group_id>-<row>"`` where
``row`` is its 1-based position in its own source.  Frame ``n`` is the
slice ``[n * width, (n + 1) * width)`` of that sequence after records
with unparseable latitude/longitude have been dropped.

The slicing assumes every source contributes ``width`` records per time
step.  Sources with other cardinalities end up sharing frames; that is
kept as is.
"""

from __future__ import annotations

import logging

from squadtrack._constants import DEFAULT_FRAME_WIDTH
from squadtrack.exceptions import SourceReadError
from squadtrack.ingestion.catalog import SourceCatalog
from squadtrack.ingestion.csv_files import PositionSource
from squadtrack.ingestion.normalize import parse_lat_lon
from squadtrack.models.coordinate import Coordinate
from squadtrack.models.snapshot import Frame

_logger = logging.getLogger(__name__)


def source_coordinates(source: PositionSource) -> list[Coordinate]:
    """Parse one source into coordinates, dropping unusable records.

    A dropped record still consumes its row number.
    """
    group_id = source.group_id
    coordinates: list[Coordinate] = []
    dropped = 0
    for row_number, record in enumerate(source.read_records(), start=1):
        point = parse_lat_lon(record)
        if point is None:
            dropped += 1
            continue
        coordinates.append(
            Coordinate(
                latitude=point[0],
                longitude=point[1],
                entity_id=f"{group_id}-{row_number}",
                group_id=group_id,
            )
        )
    if dropped:
        _logger.debug("Dropped %d unparseable records from group %s", dropped, group_id)
    return coordinates


class FrameSynchronizer:
    """Build frame ``n`` from the current contents of every source."""

    def __init__(self, catalog: SourceCatalog, *, width: int = DEFAULT_FRAME_WIDTH) -> None:
        if width < 1:
            raise ValueError(f"frame width must be >= 1, got {width}")
        self._catalog = catalog
        self._width = width

    @property
    def width(self) -> int:
        return self._width

    def flatten(self) -> list[Coordinate]:
        """Every parseable coordinate of every source, in catalog order.

        A source that cannot be read is logged and contributes nothing.
        """
        flat: list[Coordinate] = []
        for source in self._catalog.sources():
            try:
                flat.extend(source_coordinates(source))
            except SourceReadError as exc:
                _logger.warning("Skipping source for group %s: %s", source.group_id, exc)
        return flat

    def read_frame(self, index: int) -> Frame:
        """Return frame *index*; an empty frame means the data is exhausted."""
        if index < 0:
            raise ValueError(f"frame index must be >= 0, got {index}")
        flat = self.flatten()
        start = index * self._width
        selected = tuple(flat[start : start + self._width])
        _logger.debug("Frame %d: %d of %d records", index, len(selected), len(flat))
        return Frame(index=index, coordinates=selected)

    def frame_count(self) -> int:
        """Number of non-empty frames currently available."""
        total = len(self.flatten())
        return -(-total // self._width)
