"""In-memory process store.

This is the only component allowed to change process records.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from squadtrack._constants import PROCESS_KIND
from squadtrack.exceptions import ProcessRegistrationError, UnknownProcessError
from squadtrack.models.process import ProcessRecord, ProcessResult, ProcessStatus, StatusUpdate
from squadtrack.state.sink import StoreSink

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_process_id() -> str:
    return secrets.token_hex(8)


class ProcessStore:
    """Registry of tracking processes and what they reported.

    Only the latest ``max_results`` results are kept per process; status
    updates are capped the same way.  When ``max_finished`` is set, only
    that many failed or completed processes are retained; the oldest are
    evicted first.  Running processes are never evicted.
    """

    def __init__(
        self,
        *,
        max_results: int = 50,
        max_processes: int | None = None,
        max_finished: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_process_id,
    ) -> None:
        if max_results < 1:
            raise ValueError(f"max_results must be >= 1, got {max_results}")
        if max_finished is not None and max_finished < 0:
            raise ValueError(f"max_finished must be >= 0, got {max_finished}")
        self._max_results = max_results
        self._max_processes = max_processes
        self._max_finished = max_finished
        self._clock = clock
        self._id_factory = id_factory
        self._records: dict[str, ProcessRecord] = {}

    def create_process(self, name: str, description: str, *, kind: str = PROCESS_KIND) -> str:
        """Register a running process and return its id.

        Raises
        ------
        ProcessRegistrationError
            If the store is full or the id factory produced a duplicate.
        """
        if self._max_processes is not None and self.running_count() >= self._max_processes:
            raise ProcessRegistrationError(f"Too many running processes (limit {self._max_processes})")
        process_id = self._id_factory()
        if not process_id or process_id in self._records:
            raise ProcessRegistrationError(f"Could not allocate a process id (got {process_id!r})")
        self._records[process_id] = ProcessRecord(
            process_id=process_id,
            kind=kind,
            name=name,
            description=description,
            created_at=self._clock(),
        )
        _logger.info("Registered process %s (%s)", process_id, name)
        return process_id

    def get(self, process_id: str) -> ProcessRecord:
        record = self._records.get(process_id)
        if record is None:
            raise UnknownProcessError(process_id)
        return record

    def __contains__(self, process_id: object) -> bool:
        return process_id in self._records

    def records(self) -> list[ProcessRecord]:
        return list(self._records.values())

    def running_count(self) -> int:
        return sum(1 for record in self._records.values() if record.status == ProcessStatus.RUNNING)

    def add_update(self, process_id: str, percentage: float, text: str) -> None:
        record = self.get(process_id)
        update = StatusUpdate(percentage=percentage, text=text, at=self._clock())
        self._replace(record, updates=(*record.updates, update)[-self._max_results :])

    def add_result(
        self,
        process_id: str,
        text: str,
        data: dict[str, Any],
        ui: dict[str, Any] | None = None,
    ) -> None:
        record = self.get(process_id)
        result = ProcessResult(text=text, data=data, ui=ui, at=self._clock())
        self._replace(record, results=(*record.results, result)[-self._max_results :])

    def fail_process(self, process_id: str, reason: str) -> None:
        record = self.get(process_id)
        self._replace(record, status=ProcessStatus.FAILED, failure_reason=reason)
        _logger.info("Process %s failed: %s", process_id, reason)
        self._evict_finished()

    def complete_process(self, process_id: str) -> None:
        record = self.get(process_id)
        if record.status != ProcessStatus.RUNNING:
            return
        self._replace(record, status=ProcessStatus.COMPLETED)
        _logger.info("Process %s completed", process_id)
        self._evict_finished()

    def sink(self, process_id: str) -> StoreSink:
        """Sink writing to this store for *process_id*."""
        self.get(process_id)
        return StoreSink(self, process_id)

    def _evict_finished(self) -> None:
        if self._max_finished is None:
            return
        finished = [pid for pid, record in self._records.items() if record.status != ProcessStatus.RUNNING]
        for process_id in finished[: max(0, len(finished) - self._max_finished)]:
            del self._records[process_id]
            _logger.debug("Evicted finished process %s", process_id)

    def _replace(self, record: ProcessRecord, **changes: Any) -> None:
        self._records[record.process_id] = record.model_copy(update=changes)
