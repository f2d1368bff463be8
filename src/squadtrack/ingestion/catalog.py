"""Source catalogs: which sources exist right now, in which order."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from squadtrack._constants import DEFAULT_FILE_PATTERN, UNKNOWN_GROUP
from squadtrack.ingestion.csv_files import CsvPositionSource, PositionSource

_logger = logging.getLogger(__name__)


class SourceCatalog(Protocol):
    def sources(self) -> list[PositionSource]:
        ...


class StaticCatalog:
    """A fixed, ordered list of sources."""

    def __init__(self, sources: Iterable[PositionSource]) -> None:
        self._sources = list(sources)

    def sources(self) -> list[PositionSource]:
        return list(self._sources)


class DirectoryCatalog:
    """CSV files in a directory whose names fully match a pattern.

    The directory is listed again on every call so files added while a
    tracker runs are picked up.  Files are enumerated in sorted name order.
    The first capture group of the pattern is the group id.
    """

    def __init__(self, directory: str | Path, pattern: str | re.Pattern[str] = DEFAULT_FILE_PATTERN) -> None:
        self._directory = Path(directory)
        self._pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    @property
    def directory(self) -> Path:
        return self._directory

    def sources(self) -> list[PositionSource]:
        if not self._directory.is_dir():
            _logger.warning("Data directory %s does not exist", self._directory)
            return []

        found: list[PositionSource] = []
        for path in sorted(self._directory.iterdir(), key=lambda p: p.name):
            if not path.is_file():
                continue
            match = self._pattern.fullmatch(path.name)
            if match is None:
                continue
            group_id = match.group(1) if match.re.groups >= 1 and match.group(1) else UNKNOWN_GROUP
            found.append(CsvPositionSource(path, group_id))
        _logger.debug("Discovered %d sources in %s", len(found), self._directory)
        return found
