"""Command line entry point: ``python -m squadtrack``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
from typing import Any

from squadtrack.config import TrackerConfig
from squadtrack.exceptions import SquadTrackConfigError
from squadtrack.service import serve
from squadtrack.tracker import SquadTracker

_logger = logging.getLogger("squadtrack")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="squadtrack",
        description="Serve live squad tracking with straggler detection over HTTP.",
    )
    parser.add_argument("--data-dir", help="Directory containing soldier_<n>.csv files")
    parser.add_argument("--host", help="Bind address (default from SQUADTRACK_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port (default from SQUADTRACK_PORT or 2022)")
    parser.add_argument("--interval", type=float, help="Seconds between updates (default 3)")
    parser.add_argument("--frame-width", type=int, help="Records per frame (default 5)")
    parser.add_argument("--threshold", type=float, help="Default straggler threshold in feet (default 45)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> TrackerConfig:
    overrides: dict[str, Any] = {}
    for arg_name, field_name in (
        ("data_dir", "data_dir"),
        ("host", "host"),
        ("port", "port"),
        ("interval", "update_interval"),
        ("frame_width", "frame_width"),
        ("threshold", "threshold_feet"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    return TrackerConfig.from_env(**overrides)


async def run_service(config: TrackerConfig) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with SquadTracker(config) as tracker:
        runner = await serve(tracker, config.host, config.port)
        try:
            await stop.wait()
        finally:
            _logger.info("Shutting down")
            await runner.cleanup()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = config_from_args(args)
    except SquadTrackConfigError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return 2

    asyncio.run(run_service(config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
