"""HTTP surface of the live squad tracker.

Routes::

    GET    /                        service metadata
    POST   /tools/live-map          start a tracking process
    GET    /processes/{process_id}  process record (updates, results, failure)
    DELETE /processes/{process_id}  assert the stop signal of a process
"""

from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from squadtrack import __version__
from squadtrack.exceptions import TrackerStartupError, UnknownProcessError
from squadtrack.models.requests import LiveMapRequest
from squadtrack.tracker import SquadTracker
from squadtrack.visualization import started_alert, startup_error_alert

_logger = logging.getLogger(__name__)

TRACKER_KEY: web.AppKey[SquadTracker] = web.AppKey("tracker", SquadTracker)

SERVICE_METADATA: dict[str, Any] = {
    "title": "Live Squad Position Tracker",
    "description": "Real-time tracking of multiple squad positions with straggler detection",
    "tags": ["mapping", "csv", "military", "position-tracking", "real-time"],
    "tools": [
        {
            "id": "live-map",
            "name": "Live Squad Map",
            "description": "Shows live updates of squad positions from CSV files",
            "path": "/tools/live-map",
        }
    ],
}


def _json(payload: dict[str, Any], *, status: int = 200) -> web.Response:
    return web.json_response(payload, status=status, dumps=lambda obj: json.dumps(obj, ensure_ascii=False))


async def handle_metadata(request: web.Request) -> web.Response:
    return _json({**SERVICE_METADATA, "version": __version__})


async def handle_live_map(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]

    body: Any = {}
    if request.can_read_body:
        try:
            body = await request.json()
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError both derive from ValueError.
            return _json({"text": "Invalid JSON body", "data": {"error": "invalid json"}}, status=400)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return _json({"text": "Request body must be an object", "data": {"error": "invalid body"}}, status=400)

    try:
        params = LiveMapRequest.model_validate(body)
    except ValidationError as exc:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        return _json({"text": "Invalid input", "data": {"error": "; ".join(errors)}}, status=400)

    try:
        handle = await tracker.start_tracking(params.threshold_feet)
    except TrackerStartupError as exc:
        message = str(exc)
        return _json(
            {
                "text": f"Error starting live tracking: {message}",
                "data": {"error": message},
                "ui": startup_error_alert(message).to_wire(),
            },
            status=500,
        )

    return _json(
        {
            "text": "Started live squad tracking",
            "data": handle.to_wire(),
            "ui": started_alert(handle.process_id).to_wire(),
        }
    )


async def handle_get_process(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]
    process_id = request.match_info["process_id"]
    try:
        record = tracker.get_process(process_id)
    except UnknownProcessError as exc:
        return _json({"text": str(exc), "data": {"error": "unknown process"}}, status=404)
    return _json({"text": record.name, "data": record.to_wire()})


async def handle_stop_process(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]
    process_id = request.match_info["process_id"]
    try:
        state = await tracker.stop_tracking(process_id)
    except UnknownProcessError as exc:
        return _json({"text": str(exc), "data": {"error": "unknown process"}}, status=404)
    return _json({"text": f"Tracking {process_id} {state.value}", "data": {"processId": process_id, "state": state.value}})


async def _close_tracker(app: web.Application) -> None:
    await app[TRACKER_KEY].aclose()


def create_app(tracker: SquadTracker) -> web.Application:
    """Build the aiohttp application serving *tracker*.

    The tracker is closed (all loops stopped) on application cleanup.
    """
    app = web.Application()
    app[TRACKER_KEY] = tracker
    app.router.add_get("/", handle_metadata)
    app.router.add_post("/tools/live-map", handle_live_map)
    app.router.add_get("/processes/{process_id}", handle_get_process)
    app.router.add_delete("/processes/{process_id}", handle_stop_process)
    app.on_cleanup.append(_close_tracker)
    return app


async def serve(tracker: SquadTracker, host: str, port: int) -> web.AppRunner:
    """Start serving *tracker* and return the runner (call ``runner.cleanup()`` to stop)."""
    runner = web.AppRunner(create_app(tracker))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    _logger.info("Live squad tracking service is running on %s:%d", host, port)
    return runner
