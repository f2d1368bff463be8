"""Ingestion layer.

Adapters that read per-group position records from tabular sources and
turn them into :class:`~squadtrack.models.Coordinate` objects.
"""

from squadtrack.ingestion.catalog import DirectoryCatalog, SourceCatalog, StaticCatalog
from squadtrack.ingestion.csv_files import CsvPositionSource, PositionSource, RecordListSource

__all__ = [
    "CsvPositionSource",
    "DirectoryCatalog",
    "PositionSource",
    "RecordListSource",
    "SourceCatalog",
    "StaticCatalog",
]
