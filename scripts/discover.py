#!/usr/bin/env python3
"""Run one territory discovery for a point and radius.

Fetches ZIP geometry for every candidate state around the point, keeps
the ZIP codes within the radius, and prints them with the map framing
region.

Usage
-----
::

    python scripts/discover.py --lat 39.95 --lon -75.16 --radius 10

Options::

    --state NAME      Known state (name or code); skips reverse geocoding
    --offline-state   Resolve the state from the built-in table instead of HTTP
    --cache           Keep fetched state geometry in memory
    --json            Output as machine-readable JSON
    --verbose         Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
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

from zipfence import (  # noqa: E402
    DiscoveryResult,
    GeoPoint,
    InvalidInputError,
    ZipFenceClient,
    ZipFenceConfig,
    resolve_region,
)
from zipfence.ingestion.normalize import parse_radius  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _result_to_dict(result: DiscoveryResult) -> dict[str, Any]:
    region = result.bounding_region
    return {
        "run_id": result.run_id,
        "candidates": [candidate.code for candidate in result.candidates],
        "failed_regions": list(result.failed_regions),
        "zip_codes": [{"zip": f.zip_code, "state": f.region_code} for f in result.features],
        "bounding_region": (
            None
            if region is None
            else {
                "latitude": region.center.latitude,
                "longitude": region.center.longitude,
                "latitude_span": region.latitude_span,
                "longitude_span": region.longitude_span,
            }
        ),
    }


def _print_text(result: DiscoveryResult) -> None:
    print(_section("Candidate states"))
    print("  " + (", ".join(c.code for c in result.candidates) or "<none>"))
    if result.failed_regions:
        print(f"  failed: {', '.join(result.failed_regions)}")

    print(_section(f"ZIP codes within radius ({len(result.features)})"))
    for feature in result.features:
        print(f"  {feature.zip_code}  {feature.region_code}")

    print(_section("Map framing"))
    region = result.bounding_region
    if region is None:
        print("  <none>")
    else:
        print(f"  center: {region.center.latitude:.5f}, {region.center.longitude:.5f}")
        print(f"  span:   {region.latitude_span:.4f} x {region.longitude_span:.4f} deg")


async def run(args: argparse.Namespace) -> int:
    config = ZipFenceConfig.from_env(
        geometry_cache_enabled=args.cache,
        reverse_geocode_enabled=not args.offline_state,
    )
    point = GeoPoint(latitude=args.lat, longitude=args.lon)
    radius = parse_radius(args.radius, max_radius=config.max_radius_miles)

    async with ZipFenceClient(config) as client:
        finder = client.candidate_finder()
        region = resolve_region(args.state) if args.state else await finder.resolve_region(point)
        if region is None:
            print(f"Could not resolve a state for {point.latitude}, {point.longitude}", file=sys.stderr)
            return 1

        orchestrator = client.discovery(finder)
        orchestrator.set_radius(radius)
        orchestrator.set_location(point, region)
        result = await orchestrator.wait_idle()
        await orchestrator.aclose()

    if result is None:
        print("Discovery produced no result", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps(_result_to_dict(result), indent=2))
    else:
        _print_text(result)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Discover ZIP codes within a radius of a point.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude of the home location")
    parser.add_argument("--lon", type=float, required=True, help="Longitude of the home location")
    parser.add_argument("--radius", required=True, help="Radius in miles (clamped to the configured maximum)")
    parser.add_argument("--state", help="Known state name or code")
    parser.add_argument("--offline-state", action="store_true", help="Resolve the state without HTTP")
    parser.add_argument("--cache", action="store_true", help="Cache fetched geometry in memory")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(run(args))
    except InvalidInputError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
