"""MQTT mirror of process reports.

A threaded paho-mqtt runtime publishes every status update, result and
failure of a tracking process as JSON to
``<prefix>/<process_id>/status|result|failure``.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import UTC, datetime
from typing import Any, Protocol, cast

import paho.mqtt.client as mqtt

from squadtrack.config import MqttSettings
from squadtrack.models._base import SquadBaseModel
from squadtrack.state.sink import RESULT_TEXT


class Publisher(Protocol):
    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        ...


class MqttPublisher:
    """Threaded paho-mqtt client used only for publishing."""

    def __init__(
        self,
        settings: MqttSettings,
        *,
        client_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._client_id = client_id or f"squadtrack_{secrets.token_hex(4)}"
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def topic_prefix(self) -> str:
        return self._settings.topic_prefix.rstrip("/")

    def start(self) -> None:
        """Connect to the broker and start the network loop thread."""
        self.stop()
        self._logger.debug(
            "MQTT publisher start host=%s port=%s client_id=%s",
            self._settings.host,
            self._settings.port,
            self._client_id,
        )
        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)

        def on_connect(
            _c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect
        client.connect(self._settings.host, self._settings.port, keepalive=self._settings.keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Disconnect and stop the network loop if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        client = self._client
        if client is None or not self._running:
            self._logger.debug("MQTT publisher not running, dropping message for %s", topic)
            return
        body = json.dumps(payload, separators=(",", ":"), default=str, ensure_ascii=False)
        client.publish(topic, body, qos=0)


class MqttSink:
    """Process sink that publishes reports through a :class:`Publisher`."""

    def __init__(self, publisher: Publisher, process_id: str, *, topic_prefix: str = "squadtrack") -> None:
        self._publisher = publisher
        self._process_id = process_id
        self._base = f"{topic_prefix.rstrip('/')}/{process_id}"

    def topic(self, kind: str) -> str:
        return f"{self._base}/{kind}"

    def _envelope(self, **fields: Any) -> dict[str, Any]:
        return {"processId": self._process_id, "at": datetime.now(UTC).isoformat(), **fields}

    async def report_status(self, percentage: float, text: str) -> None:
        self._publisher.publish(self.topic("status"), self._envelope(percentage=percentage, text=text))

    async def report_result(
        self,
        payload: dict[str, Any],
        visualization: SquadBaseModel | None = None,
        *,
        text: str = RESULT_TEXT,
    ) -> None:
        ui = visualization.to_wire() if visualization is not None else None
        self._publisher.publish(self.topic("result"), self._envelope(text=text, data=payload, ui=ui))

    async def report_failure(self, reason: str) -> None:
        self._publisher.publish(self.topic("failure"), self._envelope(reason=reason))

    def __repr__(self) -> str:
        return f"MqttSink(base={self._base!r})"
