"""Sinks receiving what the update loop reports."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

from squadtrack.models._base import SquadBaseModel

if TYPE_CHECKING:
    from squadtrack.state.store import ProcessStore

_logger = logging.getLogger(__name__)

RESULT_TEXT = "Latest map update"


class ProcessSink(Protocol):
    """Structural interface of the reporting target of one process."""

    async def report_status(self, percentage: float, text: str) -> None:
        ...

    async def report_result(
        self,
        payload: dict[str, Any],
        visualization: SquadBaseModel | None = None,
        *,
        text: str = RESULT_TEXT,
    ) -> None:
        ...

    async def report_failure(self, reason: str) -> None:
        ...


class StoreSink:
    """Write reports for one process into a :class:`ProcessStore`."""

    def __init__(self, store: ProcessStore, process_id: str) -> None:
        self._store = store
        self.process_id = process_id

    async def report_status(self, percentage: float, text: str) -> None:
        self._store.add_update(self.process_id, percentage, text)

    async def report_result(
        self,
        payload: dict[str, Any],
        visualization: SquadBaseModel | None = None,
        *,
        text: str = RESULT_TEXT,
    ) -> None:
        ui = visualization.to_wire() if visualization is not None else None
        self._store.add_result(self.process_id, text, payload, ui)

    async def report_failure(self, reason: str) -> None:
        self._store.fail_process(self.process_id, reason)


class FanoutSink:
    """Forward every report to several sinks, in order.

    The first sink is authoritative: its errors propagate.  Errors of the
    other (mirror) sinks are logged and do not stop the report.
    """

    def __init__(self, primary: ProcessSink, mirrors: Iterable[ProcessSink] = ()) -> None:
        self._primary = primary
        self._mirrors = list(mirrors)

    async def report_status(self, percentage: float, text: str) -> None:
        await self._primary.report_status(percentage, text)
        for mirror in self._mirrors:
            try:
                await mirror.report_status(percentage, text)
            except Exception:
                _logger.warning("Mirror sink %r failed on status", mirror, exc_info=True)

    async def report_result(
        self,
        payload: dict[str, Any],
        visualization: SquadBaseModel | None = None,
        *,
        text: str = RESULT_TEXT,
    ) -> None:
        await self._primary.report_result(payload, visualization, text=text)
        for mirror in self._mirrors:
            try:
                await mirror.report_result(payload, visualization, text=text)
            except Exception:
                _logger.warning("Mirror sink %r failed on result", mirror, exc_info=True)

    async def report_failure(self, reason: str) -> None:
        await self._primary.report_failure(reason)
        for mirror in self._mirrors:
            try:
                await mirror.report_failure(reason)
            except Exception:
                _logger.warning("Mirror sink %r failed on failure report", mirror, exc_info=True)
