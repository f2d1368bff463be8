"""High-level async facade that starts and supervises tracking processes."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any

from squadtrack._constants import PROCESS_NAME, process_description
from squadtrack._mqtt import MqttPublisher, MqttSink, Publisher
from squadtrack.config import TrackerConfig
from squadtrack.exceptions import TrackerStartupError, UnknownProcessError
from squadtrack.frames import FrameSynchronizer
from squadtrack.ingestion.catalog import DirectoryCatalog, SourceCatalog
from squadtrack.loop import LoopState, UpdateLoop
from squadtrack.models.process import ProcessRecord
from squadtrack.models.requests import TrackingHandle
from squadtrack.observer import LoggingObserver, TrackerObserver
from squadtrack.state.sink import FanoutSink, ProcessSink
from squadtrack.state.store import ProcessStore
from squadtrack.stragglers import validate_threshold

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Tracking:
    """A started tracking process and the task running its loop."""

    process_id: str
    loop: UpdateLoop
    task: asyncio.Task[LoopState]


class SquadTracker:
    """Start live squad tracking processes.

    Usage::

        async with SquadTracker(TrackerConfig.from_env()) as tracker:
            handle = await tracker.start_tracking(threshold_feet=45)
            ...
            record = tracker.get_process(handle.process_id)

    Every :meth:`start_tracking` call registers a new process and runs its
    own :class:`UpdateLoop` as a background task; the call returns as soon
    as the task is scheduled.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        catalog: SourceCatalog | None = None,
        store: ProcessStore | None = None,
        observer: TrackerObserver | None = None,
        publisher: Publisher | None = None,
    ) -> None:
        self._config = config if config is not None else TrackerConfig()
        self._catalog = (
            catalog if catalog is not None else DirectoryCatalog(self._config.data_dir, self._config.file_pattern)
        )
        self._frames = FrameSynchronizer(self._catalog, width=self._config.frame_width)
        if store is None:
            store = ProcessStore(
                max_results=self._config.max_results,
                max_processes=self._config.max_processes,
                max_finished=self._config.max_finished_processes,
            )
        self._store = store
        self._observer = observer if observer is not None else LoggingObserver()
        self._publisher = publisher
        self._owned_publisher: MqttPublisher | None = None
        self._trackings: dict[str, _Tracking] = {}

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SquadTracker:
        await self._ensure_publisher_started()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def _ensure_publisher_started(self) -> None:
        """Best-effort MQTT startup (failures must not block tracking)."""
        if self._publisher is not None or not self._config.mqtt.enabled:
            return
        publisher = MqttPublisher(self._config.mqtt, logger=_logger)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, publisher.start)
        except Exception:
            _logger.warning("MQTT publisher start failed; continuing without mirror", exc_info=True)
            return
        self._publisher = publisher
        self._owned_publisher = publisher

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def store(self) -> ProcessStore:
        return self._store

    @property
    def frames(self) -> FrameSynchronizer:
        return self._frames

    def get_process(self, process_id: str) -> ProcessRecord:
        return self._store.get(process_id)

    def loop_state(self, process_id: str) -> LoopState:
        return self._tracking(process_id).loop.state

    def active_process_ids(self) -> list[str]:
        return [pid for pid, tracking in self._trackings.items() if not tracking.task.done()]

    def _tracking(self, process_id: str) -> _Tracking:
        self._prune_finished()
        tracking = self._trackings.get(process_id)
        if tracking is None:
            raise UnknownProcessError(process_id)
        return tracking

    def _prune_finished(self) -> None:
        """Forget finished loops whose process record was evicted from the store."""
        for process_id in [pid for pid, t in self._trackings.items() if t.task.done() and pid not in self._store]:
            del self._trackings[process_id]

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def _build_sink(self, process_id: str) -> ProcessSink:
        primary = self._store.sink(process_id)
        if self._publisher is None:
            return primary
        mirror = MqttSink(self._publisher, process_id, topic_prefix=self._config.mqtt.topic_prefix)
        return FanoutSink(primary, [mirror])

    async def start_tracking(self, threshold_feet: float | None = None) -> TrackingHandle:
        """Register a process and launch its update loop in the background.

        Parameters
        ----------
        threshold_feet : float, optional
            Straggler threshold in feet; defaults to ``config.threshold_feet``.

        Returns
        -------
        TrackingHandle
            The new process id and an empty initial straggler list.

        Raises
        ------
        ValueError
            If *threshold_feet* is negative, not finite or not a number.
        TrackerStartupError
            If the process could not be registered or the loop not created.
        """
        threshold = validate_threshold(self._config.threshold_feet if threshold_feet is None else threshold_feet)
        interval = self._config.update_interval

        try:
            process_id = self._store.create_process(PROCESS_NAME, process_description(interval))
            loop = UpdateLoop(
                self._frames,
                self._build_sink(process_id),
                threshold,
                interval=interval,
                observer=self._observer,
            )
        except Exception as exc:
            _logger.error("Error starting live tracking", exc_info=True)
            raise TrackerStartupError(str(exc)) from exc

        task = asyncio.create_task(loop.run(), name=f"squadtrack-{process_id}")
        self._trackings[process_id] = _Tracking(process_id=process_id, loop=loop, task=task)
        task.add_done_callback(functools.partial(self._on_loop_done, process_id))
        _logger.info("Started tracking process %s threshold=%.2f ft", process_id, threshold)
        return TrackingHandle(process_id=process_id)

    def _on_loop_done(self, process_id: str, task: asyncio.Task[LoopState]) -> None:
        if task.cancelled():
            self._complete(process_id)
        else:
            exc = task.exception()
            if exc is not None:
                _logger.error("Tracking task %s crashed", process_id, exc_info=exc)
            elif task.result() == LoopState.STOPPED:
                self._complete(process_id)
        self._prune_finished()

    def _complete(self, process_id: str) -> None:
        if process_id in self._store:
            self._store.complete_process(process_id)

    async def stop_tracking(self, process_id: str, *, wait: bool = True) -> LoopState:
        """Assert the stop signal of a process and optionally wait for it to end.

        Raises
        ------
        UnknownProcessError
            If no process with this id was started by this tracker.
        """
        tracking = self._tracking(process_id)
        tracking.loop.stop()
        if wait and not tracking.task.done():
            await asyncio.wait({tracking.task})
        return tracking.loop.state

    async def aclose(self) -> None:
        """Stop every running loop, wait for the tasks and stop the MQTT mirror."""
        tasks = []
        for tracking in self._trackings.values():
            if not tracking.task.done():
                tracking.loop.stop()
                tasks.append(tracking.task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        publisher = self._owned_publisher
        self._owned_publisher = None
        if publisher is not None:
            self._publisher = None
            await asyncio.get_running_loop().run_in_executor(None, publisher.stop)
