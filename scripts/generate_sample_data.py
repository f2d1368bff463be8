#!/usr/bin/env python3
"""Write demo ``soldier_<n>.csv`` files for squadtrack.

Each squad file gets ``--steps`` blocks of five positions clustered around
a slowly moving squad center.  With ``--straggle`` the last soldier of
every squad drifts further away at each step.

Usage::

    python scripts/generate_sample_data.py --output data --squads 3 --steps 20
"""

from __future__ import annotations

import argparse
import csv
import math
import random
from pathlib import Path

_FEET_PER_DEGREE_LAT = 364_812.8


def _offset(lat: float, north_ft: float, east_ft: float) -> tuple[float, float]:
    dlat = north_ft / _FEET_PER_DEGREE_LAT
    dlon = east_ft / (_FEET_PER_DEGREE_LAT * math.cos(math.radians(lat)))
    return dlat, dlon


def write_squad(
    path: Path,
    *,
    center: tuple[float, float],
    steps: int,
    soldiers: int,
    spread_ft: float,
    straggle_ft: float,
    rng: random.Random,
) -> None:
    lat0, lon0 = center
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(["latitude", "longitude"])
        for step in range(steps):
            dlat, dlon = _offset(lat0, 3.0 * step, 2.0 * step)
            for soldier in range(soldiers):
                north = rng.uniform(-spread_ft, spread_ft)
                east = rng.uniform(-spread_ft, spread_ft)
                if straggle_ft and soldier == soldiers - 1:
                    east += straggle_ft * step
                slat, slon = _offset(lat0, north, east)
                writer.writerow([f"{lat0 + dlat + slat:.7f}", f"{lon0 + dlon + slon:.7f}"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate demo squad CSV files.")
    parser.add_argument("--output", "-o", default="data", help="Target directory")
    parser.add_argument("--squads", type=int, default=2, help="Number of squad files")
    parser.add_argument("--steps", type=int, default=10, help="Time steps per squad")
    parser.add_argument("--soldiers", type=int, default=5, help="Soldiers per squad and step")
    parser.add_argument("--spread", type=float, default=10.0, help="Cluster half-width in feet")
    parser.add_argument("--straggle", type=float, default=0.0, help="Feet the last soldier drifts per step")
    parser.add_argument("--lat", type=float, default=34.0522, help="Start latitude")
    parser.add_argument("--lon", type=float, default=-118.2437, help="Start longitude")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    out = Path(args.output)
    out.mkdir(parents=True, exist_ok=True)
    for squad in range(1, args.squads + 1):
        dlat, dlon = _offset(args.lat, 0.0, 150.0 * (squad - 1))
        path = out / f"soldier_{squad}.csv"
        write_squad(
            path,
            center=(args.lat + dlat, args.lon + dlon),
            steps=args.steps,
            soldiers=args.soldiers,
            spread_ft=args.spread,
            straggle_ft=args.straggle,
            rng=rng,
        )
        print(f"wrote {path}")


if __name__ == "__main__":
    main()
