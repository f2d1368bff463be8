"""Custom exception hierarchy for squadtrack."""

from __future__ import annotations


class SquadTrackError(Exception):
    """Base exception for all squadtrack errors."""


class SquadTrackConfigError(SquadTrackError):
    """Invalid or missing configuration."""


class SourceReadError(SquadTrackError):
    """A position source could not be opened or decoded."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class ProcessRegistrationError(SquadTrackError):
    """The process service refused to register a new tracking process."""


class UnknownProcessError(SquadTrackError):
    """No process is registered under the requested id."""

    def __init__(self, process_id: str) -> None:
        self.process_id = process_id
        super().__init__(f"Unknown process: {process_id}")


class TrackerStartupError(SquadTrackError):
    """Tracking could not be started.

    Raised synchronously by :meth:`SquadTracker.start_tracking` before any
    background work is scheduled.  The underlying cause is chained as
    ``__cause__``.
    """
