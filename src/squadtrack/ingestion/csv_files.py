"""Tabular position sources."""

from __future__ import annotations

import csv
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from squadtrack.exceptions import SourceReadError

_logger = logging.getLogger(__name__)


class PositionSource(Protocol):
    """Structural interface of one group's record provider.

    ``read_records`` returns every record currently available, in order.
    Records are mappings of column name to text; at least ``latitude`` and
    ``longitude`` are expected.
    """

    @property
    def group_id(self) -> str:
        ...

    def read_records(self) -> list[dict[str, str]]:
        ...


class CsvPositionSource:
    """A CSV file with a header row, re-read on every call.

    Empty lines are skipped.  A row of empty cells is kept as a record so
    it still takes up its row number.  Raises :class:`SourceReadError` when the
    file cannot be opened or decoded.
    """

    def __init__(self, path: str | Path, group_id: str) -> None:
        self._path = Path(path)
        self._group_id = group_id

    @property
    def group_id(self) -> str:
        return self._group_id

    @property
    def path(self) -> Path:
        return self._path

    def read_records(self) -> list[dict[str, str]]:
        try:
            with self._path.open("r", encoding="utf-8-sig", newline="") as handle:
                reader = csv.DictReader(handle)
                records = [_clean_row(row) for row in reader]
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise SourceReadError(f"Cannot read {self._path}: {exc}", source=str(self._path)) from exc
        _logger.debug("Read %d records from %s", len(records), self._path)
        return records

    def __repr__(self) -> str:
        return f"CsvPositionSource(path={str(self._path)!r}, group_id={self._group_id!r})"


class RecordListSource:
    """In-memory source over a fixed or externally appended list of records."""

    def __init__(self, group_id: str, records: Sequence[Mapping[str, str]] = ()) -> None:
        self._group_id = group_id
        self.records: list[dict[str, str]] = [dict(record) for record in records]

    @property
    def group_id(self) -> str:
        return self._group_id

    def append(self, latitude: float | str, longitude: float | str) -> None:
        self.records.append({"latitude": str(latitude), "longitude": str(longitude)})

    def read_records(self) -> list[dict[str, str]]:
        return [dict(record) for record in self.records]


def _clean_row(row: Mapping[str | None, object]) -> dict[str, str]:
    # DictReader files surplus cells under the ``None`` key.
    return {key.strip(): value for key, value in row.items() if isinstance(key, str) and isinstance(value, str)}
