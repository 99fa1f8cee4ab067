#!/usr/bin/env python3
"""
Replay a recorded GPX track through the location map.

Feeds every track point to a simulated location provider, lets the map
re-render as the position changes, and writes snapshots of the rendered
surface as PNG files.
"""

import argparse
import logging
import os
import sys
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError
from tqdm import tqdm

from drawing_surface import DrawingSurface, PillowSurface
from location_map import LocationMap, MapReadout, default_landmark
from location_provider import PositionFix, TrackingOptions
from location_sources import SimulatedLocationProvider, load_gpx_track
from rich_console import (
    setup_rich_logging,
    print_banner,
    print_readout,
    print_completion_summary,
    print_error,
)

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


class ReplayConfig(BaseModel):
    track_file: str
    output_dir: str
    snapshot_every: int = Field(default=1, ge=1)
    accuracy: Optional[float] = Field(default=None, ge=0)
    options: TrackingOptions = Field(default_factory=TrackingOptions)
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay a GPX track on the landmark location map.")
    parser.add_argument("track_file", help="Path to a GPX file with track points")
    parser.add_argument("output_dir", help="Directory for rendered PNG snapshots")
    parser.add_argument("--snapshot-every", type=int, default=1,
                        help="Write every Nth rendered frame (default: 1)")
    parser.add_argument("--accuracy", type=float, default=None,
                        help="Accuracy in meters attached to every fix")
    parser.add_argument("--timeout-ms", type=int, default=TrackingOptions().timeout_ms,
                        help="Provider timeout per fix in milliseconds")
    parser.add_argument("--max-age-ms", type=int, default=TrackingOptions().max_cached_age_ms,
                        help="Oldest cached fix the provider may return, in milliseconds")
    parser.add_argument("--low-accuracy", action="store_true",
                        help="Do not ask the provider for high-accuracy fixes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> ReplayConfig:
    args = build_parser().parse_args(argv)
    return ReplayConfig(
        track_file=args.track_file,
        output_dir=args.output_dir,
        snapshot_every=args.snapshot_every,
        accuracy=args.accuracy,
        options=TrackingOptions(
            high_accuracy_preferred=not args.low_accuracy,
            timeout_ms=args.timeout_ms,
            max_cached_age_ms=args.max_age_ms,
        ),
        verbose=args.verbose,
    )


def replay_track(fixes: List[PositionFix], config: ReplayConfig,
                 show_progress: bool = True) -> Tuple[MapReadout, int, int]:
    """
    Replay fixes through a LocationMap and write snapshots.

    Returns:
        (location_map readout, frames written, total renders)
    """
    os.makedirs(config.output_dir, exist_ok=True)
    logger.info(f"Replaying {len(fixes)} fixes into {config.output_dir}")
    provider = SimulatedLocationProvider()
    surface = PillowSurface()
    written = []
    seen = 0

    with LocationMap(provider, surface, options=config.options) as location_map:
        def on_render(rendered: DrawingSurface) -> None:
            nonlocal seen
            seen += 1
            if (seen - 1) % config.snapshot_every != 0:
                return
            path = os.path.join(config.output_dir, f"frame_{len(written):05d}.png")
            surface.save(path)
            written.append(path)

        location_map.add_render_listener(on_render)
        location_map.start()

        for fix in tqdm(fixes, desc="Replaying", unit="fix", disable=not show_progress):
            provider.push(fix)

        readout = location_map.readout()
        renders = location_map.render_count

    return readout, len(written), renders


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_args(argv)
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        return 1

    setup_rich_logging(config.verbose)
    print_banner(__version__)

    if not os.path.isfile(config.track_file):
        print_error(f"Track file {config.track_file} not found.")
        return 1

    try:
        fixes = load_gpx_track(config.track_file, accuracy=config.accuracy)
    except (ET.ParseError, ValueError) as e:
        print_error(f"Could not read track: {e}", hint="Expected a GPX file with <trkpt lat=.. lon=..> elements")
        return 1

    if not fixes:
        print_error("No track points found!")
        return 1

    readout, frames, renders = replay_track(fixes, config)

    print_readout(readout, default_landmark().label)
    print_completion_summary(config.output_dir, len(fixes), frames, renders)
    return 0


if __name__ == "__main__":
    sys.exit(main())
