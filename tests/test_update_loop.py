from __future__ import annotations

import asyncio
from typing import Any

import pytest

from squadtrack.frames import FrameSynchronizer
from squadtrack.ingestion.catalog import StaticCatalog
from squadtrack.ingestion.csv_files import RecordListSource
from squadtrack.loop import LoopState, UpdateLoop, build_snapshot
from squadtrack.models.events import EventKind
from squadtrack.observer import CollectingObserver


class _RecordingSink:
    def __init__(self) -> None:
        self.statuses: list[tuple[float, str]] = []
        self.results: list[tuple[dict[str, Any], Any]] = []
        self.failures: list[str] = []

    async def report_status(self, percentage: float, text: str) -> None:
        self.statuses.append((percentage, text))

    async def report_result(self, payload: dict[str, Any], visualization: Any = None, *, text: str = "") -> None:
        self.results.append((payload, visualization))

    async def report_failure(self, reason: str) -> None:
        self.failures.append(reason)


class _ExplodingSource:
    group_id = "1"

    def read_records(self) -> list[dict[str, str]]:
        raise RuntimeError("disk on fire")


def _frames(*counts: int, width: int = 5) -> FrameSynchronizer:
    sources = []
    for group, count in enumerate(counts, start=1):
        source = RecordListSource(str(group))
        for i in range(count):
            source.append(34.0 + group * 0.001 + i * 0.00001, -118.0)
        sources.append(source)
    return FrameSynchronizer(StaticCatalog(sources), width=width)


@pytest.mark.asyncio
async def test_source_without_valid_rows_exhausts_immediately() -> None:
    source = RecordListSource("1", [{"latitude": "", "longitude": ""}, {"latitude": "x", "longitude": "y"}])
    sink = _RecordingSink()
    loop = UpdateLoop(FrameSynchronizer(StaticCatalog([source])), sink, 45, interval=0)

    state = await loop.run()

    assert state == LoopState.EXHAUSTED
    assert loop.state == LoopState.EXHAUSTED
    assert sink.failures == ["No more data available"]
    assert sink.results == []
    assert loop.frame_index == 0


@pytest.mark.asyncio
async def test_frame_index_advances_by_one_per_tick() -> None:
    sink = _RecordingSink()
    loop = UpdateLoop(_frames(5, 5, 5), sink, 45, interval=0)

    state = await loop.run()

    assert state == LoopState.EXHAUSTED
    assert [payload["frameIndex"] for payload, _ui in sink.results] == [0, 1, 2]
    assert [payload["currentRow"] for payload, _ui in sink.results] == [1, 2, 3]
    assert loop.frame_index == 3
    assert loop.snapshots_emitted == 3
    assert sink.failures == ["No more data available"]


@pytest.mark.asyncio
async def test_each_tick_reports_status_and_result() -> None:
    sink = _RecordingSink()
    loop = UpdateLoop(_frames(5), sink, 45, interval=0)

    snapshot = await loop.tick()

    assert snapshot is not None
    assert snapshot.frame_index == 0
    assert sink.statuses == [(100, "Updated positions for 5 soldiers (Row 1)")]
    payload, card = sink.results[0]
    assert payload["coordinates"] == 5
    assert payload["stragglers"] == []
    assert card.title == "Squad Positions - Update 1"


@pytest.mark.asyncio
async def test_tick_on_empty_frame_does_not_advance() -> None:
    sink = _RecordingSink()
    loop = UpdateLoop(_frames(), sink, 45, interval=0)

    assert await loop.tick() is None
    assert loop.frame_index == 0
    assert loop.state == LoopState.RUNNING
    assert sink.statuses == []


@pytest.mark.asyncio
async def test_unexpected_error_fails_without_retry() -> None:
    sink = _RecordingSink()
    loop = UpdateLoop(FrameSynchronizer(StaticCatalog([_ExplodingSource()])), sink, 45, interval=0)

    state = await loop.run()

    assert state == LoopState.FAILED
    assert sink.failures == ["Failed to update map: disk on fire"]
    assert loop.failure_reason == "Failed to update map: disk on fire"


@pytest.mark.asyncio
async def test_sink_error_mid_tick_fails_loop() -> None:
    class _BrokenResultSink(_RecordingSink):
        async def report_result(self, payload: dict[str, Any], visualization: Any = None, *, text: str = "") -> None:
            raise ConnectionError("sink offline")

    sink = _BrokenResultSink()
    loop = UpdateLoop(_frames(5, 5), sink, 45, interval=0)

    assert await loop.run() == LoopState.FAILED
    assert sink.failures == ["Failed to update map: sink offline"]
    assert loop.frame_index == 0


@pytest.mark.asyncio
async def test_failure_while_reporting_failure_still_terminates() -> None:
    class _Unreachable(_RecordingSink):
        async def report_failure(self, reason: str) -> None:
            raise ConnectionError("gone")

    loop = UpdateLoop(_frames(), _Unreachable(), 45, interval=0)
    assert await loop.run() == LoopState.EXHAUSTED


@pytest.mark.asyncio
async def test_stop_signal_interrupts_wait() -> None:
    sink = _RecordingSink()
    loop = UpdateLoop(_frames(5, 5, 5), sink, 45, interval=30)

    task = asyncio.create_task(loop.run())
    for _ in range(200):
        if sink.results:
            break
        await asyncio.sleep(0.01)
    loop.stop()
    state = await asyncio.wait_for(task, timeout=2)

    assert state == LoopState.STOPPED
    assert len(sink.results) == 1
    assert sink.failures == []


@pytest.mark.asyncio
async def test_shared_stop_event_set_before_run() -> None:
    stop = asyncio.Event()
    stop.set()
    sink = _RecordingSink()
    loop = UpdateLoop(_frames(5), sink, 45, interval=0, stop_event=stop)

    assert await loop.run() == LoopState.STOPPED
    assert sink.results == []


@pytest.mark.asyncio
async def test_cancellation_marks_loop_stopped() -> None:
    loop = UpdateLoop(_frames(5, 5), _RecordingSink(), 45, interval=30)
    task = asyncio.create_task(loop.run())
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert loop.state == LoopState.STOPPED


@pytest.mark.asyncio
async def test_run_only_once() -> None:
    loop = UpdateLoop(_frames(), _RecordingSink(), 45, interval=0)
    await loop.run()
    with pytest.raises(RuntimeError):
        await loop.run()


@pytest.mark.asyncio
async def test_observer_sees_frame_and_termination_events() -> None:
    observer = CollectingObserver()
    loop = UpdateLoop(_frames(5), _RecordingSink(), 45, interval=0, observer=observer)

    await loop.run()

    assert [e.count for e in observer.of_kind(EventKind.FRAME_LOADED)] == [5, 0]
    assert len(observer.of_kind(EventKind.SNAPSHOT_EMITTED)) == 1
    terminated = observer.of_kind(EventKind.LOOP_TERMINATED)
    assert [e.detail for e in terminated] == ["exhausted"]


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        UpdateLoop(_frames(), _RecordingSink(), -1)
    with pytest.raises(ValueError):
        UpdateLoop(_frames(), _RecordingSink(), 45, interval=-0.5)


def test_build_snapshot_combines_stragglers_and_centroid() -> None:
    frame = _frames(5).read_frame(0)
    snapshot = build_snapshot(frame, 0)

    assert snapshot.frame_index == 0
    assert snapshot.coordinates == frame.coordinates
    assert {"1-1", "1-5"} <= snapshot.stragglers
    assert snapshot.centroid.latitude == pytest.approx(sum(c.latitude for c in frame.coordinates) / 5)
