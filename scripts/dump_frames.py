#!/usr/bin/env python3
"""Replay every frame of a data directory without waiting.

Prints, per frame, the frame centroid, each group's centroid and the
flagged stragglers, or the full snapshots as JSON.

Usage::

    python scripts/dump_frames.py --data-dir data --threshold 45
    python scripts/dump_frames.py --data-dir data --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from squadtrack import DirectoryCatalog, FrameSynchronizer  # noqa: E402
from squadtrack.geometry import centroid  # noqa: E402
from squadtrack.loop import build_snapshot  # noqa: E402
from squadtrack.stragglers import distances_to_group_centroid, group_coordinates  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay squadtrack frames offline.")
    parser.add_argument("--data-dir", default=".", help="Directory containing soldier_<n>.csv files")
    parser.add_argument("--pattern", default=r"soldier_(\d+)\.csv", help="File name pattern")
    parser.add_argument("--frame-width", type=int, default=5, help="Records per frame")
    parser.add_argument("--threshold", type=float, default=45.0, help="Straggler threshold in feet")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after N frames")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    frames = FrameSynchronizer(DirectoryCatalog(args.data_dir, args.pattern), width=args.frame_width)
    dumped: list[dict[str, Any]] = []
    index = 0
    while args.max_frames is None or index < args.max_frames:
        frame = frames.read_frame(index)
        if frame.is_empty:
            break
        snapshot = build_snapshot(frame, args.threshold)
        if args.json_mode:
            dumped.append(snapshot.to_wire())
        else:
            print(_section(f"FRAME {index}  ({len(frame)} records)"))
            print(f"  centroid  : {snapshot.centroid.latitude:.7f}, {snapshot.centroid.longitude:.7f}")
            for group_id, members in group_coordinates(frame.coordinates).items():
                center = centroid(members)
                print(f"  group {group_id:<4}: {center.latitude:.7f}, {center.longitude:.7f} ({len(members)} members)")
            distances = distances_to_group_centroid(frame.coordinates)
            for entity_id in sorted(snapshot.stragglers):
                print(f"  STRAGGLER {entity_id}: {distances[entity_id]:.2f} ft")
            if not snapshot.stragglers:
                print("  no stragglers")
        index += 1

    if args.json_mode:
        print(json.dumps(dumped, indent=2, ensure_ascii=False))
    else:
        print(f"\n{index} frames")


if __name__ == "__main__":
    main()
