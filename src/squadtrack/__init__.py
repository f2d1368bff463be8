"""squadtrack - live squad position tracking with straggler detection."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("squadtrack")
except PackageNotFoundError:
    __version__ = "0+local"
from squadtrack.config import MqttSettings, TrackerConfig
from squadtrack.exceptions import (
    ProcessRegistrationError,
    SourceReadError,
    SquadTrackConfigError,
    SquadTrackError,
    TrackerStartupError,
    UnknownProcessError,
)
from squadtrack.frames import FrameSynchronizer
from squadtrack.geometry import centroid, distance, haversine_feet
from squadtrack.ingestion import CsvPositionSource, DirectoryCatalog, RecordListSource, StaticCatalog
from squadtrack.loop import LoopState, UpdateLoop
from squadtrack.models import (
    Centroid,
    Coordinate,
    EventKind,
    Frame,
    ProcessRecord,
    Snapshot,
    TrackerEvent,
    TrackingHandle,
)
from squadtrack.observer import CollectingObserver, LoggingObserver
from squadtrack.state import ProcessStore
from squadtrack.stragglers import flag_stragglers
from squadtrack.tracker import SquadTracker

__all__ = [
    "__version__",
    "Centroid",
    "CollectingObserver",
    "Coordinate",
    "CsvPositionSource",
    "DirectoryCatalog",
    "EventKind",
    "Frame",
    "FrameSynchronizer",
    "LoggingObserver",
    "LoopState",
    "MqttSettings",
    "ProcessRecord",
    "ProcessRegistrationError",
    "ProcessStore",
    "RecordListSource",
    "Snapshot",
    "SourceReadError",
    "SquadTrackConfigError",
    "SquadTrackError",
    "SquadTracker",
    "StaticCatalog",
    "TrackerConfig",
    "TrackerEvent",
    "TrackerStartupError",
    "TrackingHandle",
    "UnknownProcessError",
    "UpdateLoop",
    "centroid",
    "distance",
    "flag_stragglers",
    "haversine_feet",
]
