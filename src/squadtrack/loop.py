"""Periodic update loop.

One :class:`UpdateLoop` drives one tracking process::

    RUNNING --(empty frame)----------> EXHAUSTED
    RUNNING --(unexpected error)-----> FAILED
    RUNNING --(stop signal)----------> STOPPED

Each tick reads the current frame, detects stragglers, computes the
frame centroid and reports a snapshot to the sink, then advances the
frame index by one and waits ``interval`` seconds.  The wait is the only
suspension point besides the frame read and the sink calls, and the stop
signal is honoured both before a tick and during the wait.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from squadtrack._constants import (
    DEFAULT_THRESHOLD_FEET,
    DEFAULT_UPDATE_INTERVAL,
    FAILURE_PREFIX,
    NO_MORE_DATA_REASON,
)
from squadtrack.frames import FrameSynchronizer
from squadtrack.geometry import centroid
from squadtrack.models.events import EventKind, TrackerEvent
from squadtrack.models.snapshot import Frame, Snapshot
from squadtrack.observer import TrackerObserver, notify
from squadtrack.state.sink import ProcessSink
from squadtrack.stragglers import flag_stragglers, validate_threshold
from squadtrack.visualization import build_card, result_payload, status_text

_logger = logging.getLogger(__name__)


class LoopState(StrEnum):
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    STOPPED = "stopped"


TERMINAL_STATES: frozenset[LoopState] = frozenset({LoopState.EXHAUSTED, LoopState.FAILED, LoopState.STOPPED})


def build_snapshot(
    frame: Frame,
    threshold_feet: float,
    *,
    observer: TrackerObserver | None = None,
) -> Snapshot:
    """Run straggler detection and the frame-wide centroid on *frame*."""
    stragglers = flag_stragglers(frame, threshold_feet, observer=observer, tick=frame.index)
    return Snapshot(
        frame_index=frame.index,
        coordinates=frame.coordinates,
        stragglers=stragglers,
        centroid=centroid(frame.coordinates),
    )


class UpdateLoop:
    """State machine producing one snapshot per tick until a terminal state.

    Parameters
    ----------
    frames : FrameSynchronizer
        Source of frames.
    sink : ProcessSink
        Receives status, result and failure reports.
    threshold_feet : float
        Straggler threshold in feet.
    interval : float
        Seconds to wait between ticks.
    observer : TrackerObserver, optional
        Receives diagnostic events.
    stop_event : asyncio.Event, optional
        Stop signal shared with the owner.  A private one is created when
        omitted; :meth:`stop` sets it either way.
    """

    def __init__(
        self,
        frames: FrameSynchronizer,
        sink: ProcessSink,
        threshold_feet: float = DEFAULT_THRESHOLD_FEET,
        *,
        interval: float = DEFAULT_UPDATE_INTERVAL,
        observer: TrackerObserver | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self._frames = frames
        self._sink = sink
        self._threshold = validate_threshold(threshold_feet)
        self._interval = interval
        self._observer = observer
        self._stop_event = stop_event if stop_event is not None else asyncio.Event()
        self._frame_index = 0
        self._snapshots_emitted = 0
        self._state = LoopState.RUNNING
        self._started = False
        self._failure_reason: str | None = None

    @property
    def frame_index(self) -> int:
        """Index of the next frame to read."""
        return self._frame_index

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def snapshots_emitted(self) -> int:
        return self._snapshots_emitted

    @property
    def threshold_feet(self) -> float:
        return self._threshold

    @property
    def failure_reason(self) -> str | None:
        return self._failure_reason

    def stop(self) -> None:
        """Assert the stop signal; the loop ends after the current tick."""
        self._stop_event.set()

    async def tick(self) -> Snapshot | None:
        """Perform one iteration.

        Returns the emitted snapshot, or ``None`` when the current frame is
        empty.  The frame index only advances after a successful emission.
        """
        index = self._frame_index
        loop = asyncio.get_running_loop()
        frame = await loop.run_in_executor(None, self._frames.read_frame, index)
        notify(self._observer, TrackerEvent(kind=EventKind.FRAME_LOADED, tick=index, count=len(frame)))
        if frame.is_empty:
            return None

        snapshot = build_snapshot(frame, self._threshold, observer=self._observer)
        await self._sink.report_status(100, status_text(snapshot))
        await self._sink.report_result(result_payload(snapshot), build_card(snapshot))
        notify(
            self._observer,
            TrackerEvent(
                kind=EventKind.SNAPSHOT_EMITTED,
                tick=index,
                count=len(snapshot.stragglers),
                centroid=snapshot.centroid,
            ),
        )

        self._frame_index = index + 1
        self._snapshots_emitted += 1
        return snapshot

    async def run(self) -> LoopState:
        """Tick until a terminal state is reached and return it.

        A loop runs at most once.
        """
        if self._started:
            raise RuntimeError("UpdateLoop.run() may only be called once")
        self._started = True

        try:
            while True:
                if self._stop_event.is_set():
                    return await self._finish(LoopState.STOPPED)
                try:
                    snapshot = await self.tick()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    _logger.error("Error updating map at frame %d", self._frame_index, exc_info=True)
                    return await self._finish(LoopState.FAILED, f"{FAILURE_PREFIX}: {exc}")
                if snapshot is None:
                    return await self._finish(LoopState.EXHAUSTED, NO_MORE_DATA_REASON)
                if await self._wait_interval():
                    return await self._finish(LoopState.STOPPED)
        except asyncio.CancelledError:
            if not self.is_terminal:
                self._state = LoopState.STOPPED
            raise

    async def _wait_interval(self) -> bool:
        """Sleep for the interval; return ``True`` if the stop signal fired."""
        if self._interval <= 0:
            await asyncio.sleep(0)
            return self._stop_event.is_set()
        try:
            await asyncio.wait_for(self._stop_event.wait(), self._interval)
        except TimeoutError:
            return False
        return True

    async def _finish(self, state: LoopState, reason: str | None = None) -> LoopState:
        self._state = state
        self._failure_reason = reason
        if reason is not None:
            try:
                await self._sink.report_failure(reason)
            except Exception:
                _logger.error("Could not report loop termination (%s)", reason, exc_info=True)
        if state == LoopState.EXHAUSTED:
            _logger.info("No more frames after %d updates", self._snapshots_emitted)
        elif state == LoopState.STOPPED:
            _logger.info("Update loop stopped after %d updates", self._snapshots_emitted)
        notify(
            self._observer,
            TrackerEvent(kind=EventKind.LOOP_TERMINATED, tick=self._frame_index, detail=state.value),
        )
        return state
