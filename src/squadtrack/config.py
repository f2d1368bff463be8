"""Tracker configuration for squadtrack."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from squadtrack._constants import (
    DEFAULT_FILE_PATTERN,
    DEFAULT_FRAME_WIDTH,
    DEFAULT_PORT,
    DEFAULT_THRESHOLD_FEET,
    DEFAULT_UPDATE_INTERVAL,
)
from squadtrack.exceptions import SquadTrackConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker settings for the optional MQTT mirror sink."""

    enabled: bool = False
    host: str = "localhost"
    port: int = 1883
    topic_prefix: str = "squadtrack"
    keepalive: int = 60


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    data_dir : str
        Directory scanned for per-squad CSV files.
    file_pattern : str
        Regular expression a file name must fully match to be used as a
        source.  The first capture group becomes the group id.
    frame_width : int
        Number of flat-sequence records assigned to one frame.
    update_interval : float
        Seconds to wait between two ticks of the update loop.
    threshold_feet : float
        Default straggler distance threshold, used when a caller does
        not supply one.
    host : str
        Bind address of the HTTP service.
    port : int
        Port of the HTTP service.
    max_results : int
        Number of results kept per process by the in-memory process store.
    max_processes : int, optional
        Limit on concurrently running processes; unlimited when ``None``.
    max_finished_processes : int
        Number of failed or completed processes kept by the process store
        before the oldest are evicted.
    mqtt : MqttSettings
        MQTT mirror settings.
    """

    data_dir: str = "."
    file_pattern: str = DEFAULT_FILE_PATTERN
    frame_width: int = DEFAULT_FRAME_WIDTH
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    threshold_feet: float = DEFAULT_THRESHOLD_FEET
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    max_results: int = 50
    max_processes: int | None = None
    max_finished_processes: int = 100
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    def __post_init__(self) -> None:
        if self.frame_width < 1:
            raise SquadTrackConfigError(f"frame_width must be >= 1, got {self.frame_width}")
        if not math.isfinite(self.update_interval) or self.update_interval < 0:
            raise SquadTrackConfigError(f"update_interval must be a non-negative number, got {self.update_interval}")
        if not math.isfinite(self.threshold_feet) or self.threshold_feet < 0:
            raise SquadTrackConfigError(f"threshold_feet must be a non-negative number, got {self.threshold_feet}")
        if not 1 <= self.port <= 65535:
            raise SquadTrackConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.max_results < 1:
            raise SquadTrackConfigError(f"max_results must be >= 1, got {self.max_results}")
        if self.max_processes is not None and self.max_processes < 0:
            raise SquadTrackConfigError(f"max_processes must be >= 0, got {self.max_processes}")
        if self.max_finished_processes < 0:
            raise SquadTrackConfigError(
                f"max_finished_processes must be >= 0, got {self.max_finished_processes}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from ``SQUADTRACK_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        SquadTrackConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "SQUADTRACK_DATA_DIR": "data_dir",
            "SQUADTRACK_FILE_PATTERN": "file_pattern",
            "SQUADTRACK_HOST": "host",
        }
        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "SQUADTRACK_FRAME_WIDTH": ("frame_width", int),
            "SQUADTRACK_UPDATE_INTERVAL": ("update_interval", float),
            "SQUADTRACK_THRESHOLD_FEET": ("threshold_feet", float),
            "SQUADTRACK_PORT": ("port", int),
            "SQUADTRACK_MAX_RESULTS": ("max_results", int),
            "SQUADTRACK_MAX_PROCESSES": ("max_processes", int),
            "SQUADTRACK_MAX_FINISHED_PROCESSES": ("max_finished_processes", int),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, kind) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = kind(val)
            except ValueError as exc:
                raise SquadTrackConfigError(f"{env_key} is not a valid {kind.__name__}: {val!r}") from exc

        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, MqttSettings):
            mqtt = mqtt_overrides
        else:
            mqtt_kwargs: dict[str, Any] = {"enabled": _env_bool(env.get("SQUADTRACK_MQTT_ENABLED"), False)}
            host = env.get("SQUADTRACK_MQTT_HOST")
            if host is not None:
                mqtt_kwargs["host"] = host
            prefix = env.get("SQUADTRACK_MQTT_TOPIC_PREFIX")
            if prefix is not None:
                mqtt_kwargs["topic_prefix"] = prefix
            for env_key, field_name in (
                ("SQUADTRACK_MQTT_PORT", "port"),
                ("SQUADTRACK_MQTT_KEEPALIVE", "keepalive"),
            ):
                val = env.get(env_key)
                if val is None:
                    continue
                try:
                    mqtt_kwargs[field_name] = int(val)
                except ValueError as exc:
                    raise SquadTrackConfigError(f"{env_key} is not a valid int: {val!r}") from exc
            if isinstance(mqtt_overrides, dict):
                mqtt_kwargs.update(mqtt_overrides)
            mqtt = MqttSettings(**mqtt_kwargs)
        config_kwargs["mqtt"] = mqtt

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
