from __future__ import annotations

import pytest

from squadtrack.__main__ import build_parser, config_from_args
from squadtrack.config import MqttSettings, TrackerConfig
from squadtrack.exceptions import SquadTrackConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("SQUADTRACK_"):
            monkeypatch.delenv(key)


def test_defaults() -> None:
    config = TrackerConfig.from_env()

    assert config.frame_width == 5
    assert config.update_interval == 3.0
    assert config.threshold_feet == 45.0
    assert config.port == 2022
    assert config.file_pattern == r"soldier_(\d+)\.csv"
    assert config.mqtt == MqttSettings()


def test_environment_values_are_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQUADTRACK_DATA_DIR", "/srv/squads")
    monkeypatch.setenv("SQUADTRACK_FRAME_WIDTH", "4")
    monkeypatch.setenv("SQUADTRACK_UPDATE_INTERVAL", "0.5")
    monkeypatch.setenv("SQUADTRACK_MQTT_ENABLED", "yes")
    monkeypatch.setenv("SQUADTRACK_MQTT_PORT", "8883")
    monkeypatch.setenv("SQUADTRACK_MQTT_TOPIC_PREFIX", "field/alpha")
    monkeypatch.setenv("SQUADTRACK_MAX_PROCESSES", "3")
    monkeypatch.setenv("SQUADTRACK_MAX_FINISHED_PROCESSES", "7")

    config = TrackerConfig.from_env()

    assert config.data_dir == "/srv/squads"
    assert config.frame_width == 4
    assert config.update_interval == 0.5
    assert config.mqtt.enabled is True
    assert config.mqtt.port == 8883
    assert config.mqtt.topic_prefix == "field/alpha"
    assert config.max_processes == 3
    assert config.max_finished_processes == 7


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQUADTRACK_PORT", "not-a-port")
    monkeypatch.setenv("SQUADTRACK_HOST", "10.0.0.1")

    config = TrackerConfig.from_env(port=9000, host="127.0.0.1", mqtt={"host": "broker"})

    assert config.port == 9000
    assert config.host == "127.0.0.1"
    assert config.mqtt.host == "broker"


def test_invalid_numeric_environment_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQUADTRACK_THRESHOLD_FEET", "far")
    with pytest.raises(SquadTrackConfigError, match="SQUADTRACK_THRESHOLD_FEET"):
        TrackerConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frame_width": 0},
        {"update_interval": -1.0},
        {"threshold_feet": float("nan")},
        {"threshold_feet": -3.0},
        {"port": 0},
        {"max_results": 0},
        {"max_processes": -1},
        {"max_finished_processes": -1},
    ],
)
def test_out_of_range_values_rejected(kwargs: dict) -> None:
    with pytest.raises(SquadTrackConfigError):
        TrackerConfig(**kwargs)


def test_cli_arguments_map_to_config() -> None:
    args = build_parser().parse_args(["--data-dir", "data", "--interval", "1", "--threshold", "30", "--port", "8080"])

    config = config_from_args(args)

    assert config.data_dir == "data"
    assert config.update_interval == 1.0
    assert config.threshold_feet == 30.0
    assert config.port == 8080
    assert config.frame_width == 5
