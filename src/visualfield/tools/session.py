"""
Collection Session Tools.

Command-line entry points around the collection pipeline:

1.  **visualfield-simulate:** runs a collection session fed by the simulated
    magnetometer and pose sources on an asyncio loop, prints the field
    statistics and optionally exports the collected points.
2.  **visualfield-inspect:** loads an exported file and prints its statistics
    and spatial bounds.

Typical usage:
    $ visualfield-simulate --duration 10 --noise 0.5 --out session.arrow
    $ visualfield-inspect session.arrow
"""

import argparse
import asyncio
import logging as log
import sys
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from ..config import CollectorConfig
from ..enum import FieldFrame
from ..handlers.sample_collector import SampleCollector
from ..handlers.scheduler import AsyncioScheduler
from ..serialization.serializer import MalformedDataError, load, save
from ..sources.simulated import SimulatedMagnetometerSource, SimulatedPoseSource
from ..store.point_store import PointStore

_LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


def _setup_logging(level: str) -> None:
    log.basicConfig(
        level=getattr(log, level.upper()),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def _statistics_table(store: PointStore, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Frame", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Min (μT)", justify="right")
    table.add_column("Max (μT)", justify="right")
    table.add_column("Mean (μT)", justify="right")

    for frame in (FieldFrame.World, FieldFrame.Device):
        stats = store.statistics(frame)
        table.add_row(
            frame.value,
            str(stats.count),
            f"{stats.min:.2f}",
            f"{stats.max:.2f}",
            f"{stats.mean:.2f}",
        )
    return table


def _bounds_table(store: PointStore) -> Table:
    bounds = store.spatial_bounds()
    size = bounds.size()
    center = bounds.center()
    table = Table(title="Spatial bounds (m)")
    table.add_column("Axis", style="cyan")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Center", justify="right")
    for axis in ("x", "y", "z"):
        table.add_row(
            axis,
            f"{getattr(bounds.min_corner, axis):.3f}",
            f"{getattr(bounds.max_corner, axis):.3f}",
            f"{getattr(size, axis):.3f}",
            f"{getattr(center, axis):.3f}",
        )
    return table


async def run_simulation(
    duration: float,
    config: Optional[CollectorConfig] = None,
    noise_std: float = 0.0,
    seed: Optional[int] = None,
    store: Optional[PointStore] = None,
) -> PointStore:
    """
    Runs one simulated collection session for `duration` seconds.

    Must be awaited on a running event loop: both the collector timers and
    the simulated feeds are scheduled on it.

    Returns:
        PointStore: The store holding the collected points.
    """
    config = config or CollectorConfig()
    scheduler = AsyncioScheduler()
    t0 = time.monotonic()

    def elapsed() -> float:
        return time.monotonic() - t0

    pose_source = SimulatedPoseSource(
        scheduler, interval=config.sampling_interval, time_fn=elapsed
    )
    magnetometer = SimulatedMagnetometerSource(
        scheduler,
        interval=config.sampling_interval,
        attitude_fn=pose_source.orientation_at,
        noise_std=noise_std,
        seed=seed,
        time_fn=elapsed,
    )
    collector = SampleCollector(
        store, magnetometer, pose_source, config=config, scheduler=scheduler
    )

    with collector:
        await asyncio.sleep(duration)
    return collector.store


def visualfield_simulate():
    """
    Console script entry point.
    Parses arguments, runs a simulated session and reports the results.
    """
    defaults = CollectorConfig()
    parser = argparse.ArgumentParser(
        description="Run a simulated magnetic field collection session."
    )

    parser.add_argument(
        "--duration", type=float, default=5.0, help="Session length in seconds."
    )
    parser.add_argument(
        "--out",
        type=Path,
        help="Export file (.arrow, .ipc or .json) for the collected points.",
    )

    # Session Arguments
    parser.add_argument(
        "--sampling-interval",
        type=float,
        default=defaults.sampling_interval,
        help=f"Sensor refresh period in seconds (Default: {defaults.sampling_interval}).",
    )
    parser.add_argument(
        "--persist-interval",
        type=float,
        default=defaults.persist_interval,
        help=f"Point capture period in seconds (Default: {defaults.persist_interval}).",
    )
    parser.add_argument(
        "--smoothing",
        type=float,
        default=defaults.smoothing_factor,
        help=f"Smoothing factor in (0, 1] (Default: {defaults.smoothing_factor}).",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=defaults.store_capacity,
        help=f"Maximum number of stored points (Default: {defaults.store_capacity}).",
    )

    # Simulation Arguments
    parser.add_argument(
        "--noise", type=float, default=0.0, help="Sensor noise std-dev in μT."
    )
    parser.add_argument("--seed", type=int, help="Seed for the sensor noise.")
    parser.add_argument(
        "-l", "--log", choices=_LOG_LEVELS, default="info", help="Logging level."
    )

    args = parser.parse_args()
    _setup_logging(args.log)

    try:
        config = CollectorConfig(
            sampling_interval=args.sampling_interval,
            persist_interval=args.persist_interval,
            smoothing_factor=args.smoothing,
            store_capacity=args.capacity,
        )
    except ValueError as e:
        log.error(f"Invalid session configuration: {e}")
        sys.exit(2)

    try:
        store = asyncio.run(
            run_simulation(
                args.duration, config=config, noise_std=args.noise, seed=args.seed
            )
        )
    except KeyboardInterrupt:
        log.warning("Session cancelled by user.")
        sys.exit(130)

    console = Console()
    console.print(_statistics_table(store, "Magnetic field statistics"))
    console.print(_bounds_table(store))

    if args.out is not None:
        try:
            save(args.out, store.snapshot())
        except ValueError as e:
            log.error(f"Export failed: {e}")
            sys.exit(1)


def visualfield_inspect():
    """
    Console script entry point.
    Loads an exported file and prints its statistics.
    """
    parser = argparse.ArgumentParser(description="Inspect an exported point file.")
    parser.add_argument("path", type=Path, help="Path to an .arrow, .ipc or .json file")
    parser.add_argument(
        "-l", "--log", choices=_LOG_LEVELS, default="warning", help="Logging level."
    )
    args = parser.parse_args()
    _setup_logging(args.log)

    if not args.path.is_file():
        log.error(f"File not found: '{args.path}'")
        sys.exit(1)

    try:
        points = load(args.path)
    except MalformedDataError as e:
        log.error(f"'{args.path}' is not a valid point file: {e}")
        sys.exit(1)
    except ValueError as e:
        log.error(str(e))
        sys.exit(1)

    # Sized to hold the whole file: inspection must not evict.
    store = PointStore(capacity=max(1, len(points)))
    store.replace(points)

    tracked = sum(1 for p in points if p.position_tracked)
    oriented = sum(1 for p in points if p.orientation is not None)

    console = Console()
    console.print(_statistics_table(store, args.path.name))
    console.print(_bounds_table(store))
    console.print(
        f"{len(points)} points, {tracked} with tracked position, "
        f"{oriented} with device attitude."
    )


if __name__ == "__main__":
    visualfield_simulate()
