"""Observers receiving :class:`TrackerEvent` diagnostics."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from squadtrack.models.events import EventKind, TrackerEvent

_logger = logging.getLogger(__name__)


class TrackerObserver(Protocol):
    """Structural observer interface."""

    def on_event(self, event: TrackerEvent) -> None:
        ...


class LoggingObserver:
    """Write every event to a logger at DEBUG level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def on_event(self, event: TrackerEvent) -> None:
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        if event.kind == EventKind.DISTANCE_EVALUATED:
            self._logger.debug(
                "tick=%s group=%s entity=%s distance=%.2f ft threshold=%s flagged=%s",
                event.tick,
                event.group_id,
                event.entity_id,
                event.distance_feet if event.distance_feet is not None else float("nan"),
                event.threshold_feet,
                event.flagged,
            )
            return
        if event.kind == EventKind.GROUP_CENTROID:
            self._logger.debug("tick=%s group=%s centroid=%s", event.tick, event.group_id, event.centroid)
            return
        self._logger.debug(
            "tick=%s %s count=%s %s",
            event.tick,
            event.kind.value,
            event.count,
            event.detail or "",
        )


class CollectingObserver:
    """Keep events in memory, e.g. for inspection in tests or dumps."""

    def __init__(self) -> None:
        self.events: list[TrackerEvent] = []

    def on_event(self, event: TrackerEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[TrackerEvent]:
        return [event for event in self.events if event.kind == kind]


class MultiObserver:
    """Fan events out to several observers."""

    def __init__(self, observers: Iterable[TrackerObserver]) -> None:
        self._observers = list(observers)

    def on_event(self, event: TrackerEvent) -> None:
        for observer in self._observers:
            notify(observer, event)


def notify(observer: TrackerObserver | None, event: TrackerEvent) -> None:
    """Deliver *event* to *observer*; observer failures are logged and swallowed."""
    if observer is None:
        return
    try:
        observer.on_event(event)
    except Exception:
        _logger.debug("Observer %r failed on %s", observer, event.kind, exc_info=True)
