"""Derive presentation payloads and status texts from snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from squadtrack._constants import SOLDIER_MARKER, STRAGGLER_MARKER
from squadtrack.models.snapshot import Snapshot
from squadtrack.models.ui import AlertView, CardView, MapMarker, MapView
from squadtrack.stragglers import distances_to_group_centroid


def _format_hue(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


def group_colors(group_ids: Iterable[str]) -> dict[str, str]:
    """Spread groups evenly around the hue circle, in first-appearance order."""
    ordered = list(dict.fromkeys(group_ids))
    if not ordered:
        return {}
    step = 360 / len(ordered)
    return {group_id: f"hsl({_format_hue(step * i)}, 70%, 50%)" for i, group_id in enumerate(ordered)}


def build_markers(snapshot: Snapshot) -> list[MapMarker]:
    colors = group_colors(coord.group_id for coord in snapshot.coordinates)
    distances = distances_to_group_centroid(snapshot.coordinates) if snapshot.stragglers else {}
    markers: list[MapMarker] = []
    for coord in snapshot.coordinates:
        is_straggler = coord.entity_id in snapshot.stragglers
        description = f"Squad {coord.group_id}"
        if is_straggler:
            description += f" (STRAGGLER - {distances[coord.entity_id]:.2f} ft from center)"
        markers.append(
            MapMarker(
                latitude=coord.latitude,
                longitude=coord.longitude,
                color=colors[coord.group_id],
                text=STRAGGLER_MARKER if is_straggler else SOLDIER_MARKER,
                title=f"Soldier {coord.entity_id}",
                description=description,
            )
        )
    return markers


def build_map_view(snapshot: Snapshot) -> MapView:
    return MapView(
        latitude=snapshot.centroid.latitude,
        longitude=snapshot.centroid.longitude,
        markers=tuple(build_markers(snapshot)),
    )


def build_card(snapshot: Snapshot) -> CardView:
    """Card titled with the 1-based update number, holding the map."""
    return CardView(
        title=f"Squad Positions - Update {snapshot.row_number}",
        children=(build_map_view(snapshot),),
    )


def status_text(snapshot: Snapshot) -> str:
    return f"Updated positions for {len(snapshot.coordinates)} soldiers (Row {snapshot.row_number})"


def result_payload(snapshot: Snapshot) -> dict[str, Any]:
    """Structured result reported for a snapshot."""
    return {
        "stragglers": sorted(snapshot.stragglers),
        "coordinates": len(snapshot.coordinates),
        "currentRow": snapshot.row_number,
        "frameIndex": snapshot.frame_index,
        "centroid": [snapshot.centroid.latitude, snapshot.centroid.longitude],
    }


def started_alert(process_id: str) -> AlertView:
    return AlertView(
        variant="success",
        title="Live Tracking Started",
        message=f"Started tracking process with ID: {process_id}",
    )


def startup_error_alert(message: str) -> AlertView:
    return AlertView(variant="error", title="Startup Error", message=message)
