from __future__ import annotations

import math

import pytest

from squadtrack._constants import EARTH_RADIUS_M, FEET_PER_METER
from squadtrack.geometry import centroid, distance
from squadtrack.models.coordinate import Coordinate
from squadtrack.models.events import EventKind
from squadtrack.models.snapshot import Frame
from squadtrack.observer import CollectingObserver
from squadtrack.stragglers import (
    distances_to_group_centroid,
    flag_stragglers,
    group_coordinates,
    validate_threshold,
)

_FT_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180 * FEET_PER_METER
_BASE_LAT = 34.0522
_BASE_LON = -118.2437


def _at(entity_id: str, group_id: str, north_ft: float = 0.0, east_ft: float = 0.0) -> Coordinate:
    lat = _BASE_LAT + north_ft / _FT_PER_DEG_LAT
    lon = _BASE_LON + east_ft / (_FT_PER_DEG_LAT * math.cos(math.radians(_BASE_LAT)))
    return Coordinate(latitude=lat, longitude=lon, entity_id=entity_id, group_id=group_id)


def _two_squads_with_one_straggler() -> list[Coordinate]:
    squad_1 = [
        _at("1-1", "1", 0.0, 0.0),
        _at("1-2", "1", 2.0, 1.0),
        _at("1-3", "1", -2.0, 3.0),
        _at("1-4", "1", 4.0, -2.0),
        _at("1-5", "1", -3.0, -3.0),
    ]
    squad_2 = [
        _at("2-1", "2", 0.0, 300.0),
        _at("2-2", "2", 1.0, 302.0),
        _at("2-3", "2", -1.0, 299.0),
        _at("2-4", "2", 2.0, 301.0),
        _at("2-5", "2", 100.0, 300.0),
    ]
    return squad_1 + squad_2


def test_far_member_is_the_only_straggler() -> None:
    assert flag_stragglers(_two_squads_with_one_straggler(), 45) == frozenset({"2-5"})


def test_default_threshold_is_45_feet() -> None:
    assert flag_stragglers(_two_squads_with_one_straggler()) == frozenset({"2-5"})


def test_groups_use_their_own_centroid() -> None:
    # Squads are ~300 ft apart; a frame-wide centroid would flag everyone.
    coords = _two_squads_with_one_straggler()
    assert distance(coords[0], centroid(coords)) > 45
    assert "1-1" not in flag_stragglers(coords, 45)


def test_zero_threshold_flags_every_non_coincident_member() -> None:
    coords = [_at("1-1", "1", 0.0, 0.0), _at("1-2", "1", 5.0, 0.0)]
    assert flag_stragglers(coords, 0) == frozenset({"1-1", "1-2"})


def test_exactly_at_threshold_is_not_flagged() -> None:
    coords = [_at("1-1", "1", 0.0, 0.0), _at("1-2", "1", 30.0, 10.0)]
    center = centroid(coords)
    farthest = max(coords, key=lambda c: distance(c, center))
    boundary = distance(farthest, center)

    assert farthest.entity_id not in flag_stragglers(coords, boundary)
    assert farthest.entity_id in flag_stragglers(coords, math.nextafter(boundary, 0.0))


@pytest.mark.parametrize("threshold", [0, 1, 45, 10_000])
def test_single_member_group_never_flagged(threshold: float) -> None:
    coords = [_at("7-1", "7", 123.0, -456.0)]
    assert flag_stragglers(coords, threshold) == frozenset()


def test_empty_frame_has_no_stragglers() -> None:
    assert flag_stragglers(Frame(index=3), 45) == frozenset()


def test_accepts_frame_and_stamps_tick() -> None:
    frame = Frame(index=4, coordinates=tuple(_two_squads_with_one_straggler()))
    observer = CollectingObserver()

    assert flag_stragglers(frame, 45, observer=observer) == frozenset({"2-5"})
    assert {event.tick for event in observer.events} == {4}


def test_observer_receives_one_event_per_decision() -> None:
    coords = _two_squads_with_one_straggler()
    observer = CollectingObserver()

    flag_stragglers(coords, 45, observer=observer, tick=0)

    centroids = observer.of_kind(EventKind.GROUP_CENTROID)
    assert [event.group_id for event in centroids] == ["1", "2"]
    evaluated = observer.of_kind(EventKind.DISTANCE_EVALUATED)
    assert len(evaluated) == len(coords)
    assert [event.entity_id for event in evaluated if event.flagged] == ["2-5"]
    assert all(event.threshold_feet == 45.0 for event in evaluated)
    summary = observer.of_kind(EventKind.STRAGGLERS_FLAGGED)
    assert len(summary) == 1
    assert summary[0].count == 1


def test_failing_observer_does_not_change_result() -> None:
    class _Broken:
        def on_event(self, _event: object) -> None:
            raise RuntimeError("observer down")

    assert flag_stragglers(_two_squads_with_one_straggler(), 45, observer=_Broken()) == frozenset({"2-5"})


@pytest.mark.parametrize("bad", [-0.1, float("nan"), float("inf"), "45", None, True])
def test_invalid_threshold_rejected(bad: object) -> None:
    with pytest.raises(ValueError):
        validate_threshold(bad)
    with pytest.raises(ValueError):
        flag_stragglers([], bad)  # type: ignore[arg-type]


def test_grouping_keeps_first_appearance_order() -> None:
    coords = [_at("2-1", "2"), _at("1-1", "1"), _at("2-2", "2")]
    groups = group_coordinates(coords)
    assert list(groups) == ["2", "1"]
    assert [c.entity_id for c in groups["2"]] == ["2-1", "2-2"]


def test_distances_to_group_centroid() -> None:
    coords = [_at("1-1", "1", 0.0), _at("1-2", "1", 20.0), _at("9-1", "9", 500.0)]
    distances = distances_to_group_centroid(coords)
    assert distances["1-1"] == pytest.approx(10.0, rel=1e-6)
    assert distances["1-2"] == pytest.approx(10.0, rel=1e-6)
    assert distances["9-1"] == 0.0
