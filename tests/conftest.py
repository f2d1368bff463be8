from __future__ import annotations

import pytest

from squadtrack.ingestion.catalog import StaticCatalog
from squadtrack.ingestion.csv_files import RecordListSource


def make_catalog(*counts: int) -> StaticCatalog:
    """One in-memory source per count, groups numbered from 1, all points tightly clustered."""
    sources = []
    for group, count in enumerate(counts, start=1):
        source = RecordListSource(str(group))
        for i in range(count):
            source.append(34.0 + group * 0.001 + i * 0.00001, -118.0)
        sources.append(source)
    return StaticCatalog(sources)


@pytest.fixture
def catalog_factory():
    return make_catalog
