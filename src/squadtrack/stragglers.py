"""Straggler detection.

Coordinates are partitioned by group id, each group gets its own centroid
and every member further than the threshold from that centroid is a
straggler.  The comparison is strict: an entity exactly at the threshold
is not flagged, so a group of one is never flagged.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from numbers import Real

from squadtrack._constants import DEFAULT_THRESHOLD_FEET
from squadtrack.geometry import centroid, distance
from squadtrack.models.coordinate import Coordinate
from squadtrack.models.events import EventKind, TrackerEvent
from squadtrack.models.snapshot import Frame
from squadtrack.observer import TrackerObserver, notify


def validate_threshold(threshold_feet: object) -> float:
    """Return *threshold_feet* as a float or raise :class:`ValueError`."""
    if isinstance(threshold_feet, bool) or not isinstance(threshold_feet, Real):
        raise ValueError(f"threshold_feet must be a number, got {threshold_feet!r}")
    value = float(threshold_feet)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"threshold_feet must be a non-negative finite number, got {value}")
    return value


def group_coordinates(coordinates: Iterable[Coordinate]) -> dict[str, list[Coordinate]]:
    """Partition coordinates by group id, keeping first-appearance order."""
    groups: dict[str, list[Coordinate]] = {}
    for coord in coordinates:
        groups.setdefault(coord.group_id, []).append(coord)
    return groups


def distances_to_group_centroid(coordinates: Iterable[Coordinate]) -> dict[str, float]:
    """Distance in feet from each entity to its own group's centroid."""
    result: dict[str, float] = {}
    for members in group_coordinates(coordinates).values():
        center = centroid(members)
        for coord in members:
            result[coord.entity_id] = distance(coord, center)
    return result


def flag_stragglers(
    frame: Frame | Iterable[Coordinate],
    threshold_feet: float = DEFAULT_THRESHOLD_FEET,
    *,
    observer: TrackerObserver | None = None,
    tick: int | None = None,
) -> frozenset[str]:
    """Return the ids of entities farther than *threshold_feet* from their group centroid.

    Parameters
    ----------
    frame : Frame or iterable of Coordinate
        Positions to inspect.
    threshold_feet : float
        Non-negative finite distance in feet.  Defaults to 45.
    observer : TrackerObserver, optional
        Receives one ``GROUP_CENTROID`` event per group, one
        ``DISTANCE_EVALUATED`` event per entity and a final
        ``STRAGGLERS_FLAGGED`` event.
    tick : int, optional
        Frame index stamped on emitted events.

    Raises
    ------
    ValueError
        If *threshold_feet* is negative, not finite or not a number.
    """
    threshold = validate_threshold(threshold_feet)
    if isinstance(frame, Frame):
        coordinates: Iterable[Coordinate] = frame.coordinates
        if tick is None:
            tick = frame.index
    else:
        coordinates = frame

    stragglers: set[str] = set()
    for group_id, members in group_coordinates(coordinates).items():
        center = centroid(members)
        notify(observer, TrackerEvent(kind=EventKind.GROUP_CENTROID, tick=tick, group_id=group_id, centroid=center))
        for coord in members:
            dist = distance(coord, center)
            flagged = dist > threshold
            notify(
                observer,
                TrackerEvent(
                    kind=EventKind.DISTANCE_EVALUATED,
                    tick=tick,
                    group_id=group_id,
                    entity_id=coord.entity_id,
                    distance_feet=dist,
                    threshold_feet=threshold,
                    flagged=flagged,
                ),
            )
            if flagged:
                stragglers.add(coord.entity_id)

    notify(
        observer,
        TrackerEvent(
            kind=EventKind.STRAGGLERS_FLAGGED,
            tick=tick,
            threshold_feet=threshold,
            count=len(stragglers),
            detail=", ".join(sorted(stragglers)),
        ),
    )
    return frozenset(stragglers)
