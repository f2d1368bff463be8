"""Data models for squadtrack."""

from squadtrack.models._base import SquadBaseModel
from squadtrack.models.coordinate import Centroid, Coordinate
from squadtrack.models.events import EventKind, TrackerEvent
from squadtrack.models.process import ProcessRecord, ProcessResult, ProcessStatus, StatusUpdate
from squadtrack.models.requests import LiveMapRequest, TrackingHandle
from squadtrack.models.snapshot import Frame, Snapshot
from squadtrack.models.ui import AlertView, CardView, MapMarker, MapView

__all__ = [
    "AlertView",
    "CardView",
    "Centroid",
    "Coordinate",
    "EventKind",
    "Frame",
    "LiveMapRequest",
    "MapMarker",
    "MapView",
    "ProcessRecord",
    "ProcessResult",
    "ProcessStatus",
    "Snapshot",
    "SquadBaseModel",
    "StatusUpdate",
    "TrackerEvent",
    "TrackingHandle",
]
