"""Presentation payloads derived from snapshots.

These are plain data descriptions of a map, a card and an alert.  Nothing
in squadtrack renders them; they are handed to the process sink alongside
the structured result.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from squadtrack._constants import MAP_STYLE, MAP_ZOOM
from squadtrack.models._base import SquadBaseModel


class MapMarker(SquadBaseModel):
    latitude: float
    longitude: float
    color: str
    text: str
    title: str
    description: str


class MapView(SquadBaseModel):
    type: Literal["map"] = "map"
    render_mode: str = "page"
    latitude: float
    longitude: float
    zoom: int = MAP_ZOOM
    map_style: str = MAP_STYLE
    markers: tuple[MapMarker, ...] = ()


class CardView(SquadBaseModel):
    type: Literal["card"] = "card"
    title: str
    children: tuple[MapView, ...] = ()


class AlertView(SquadBaseModel):
    type: Literal["alert"] = "alert"
    render_mode: str = "inline"
    variant: Literal["success", "error", "info", "warning"] = "info"
    title: str
    message: str = Field(default="")
