"""
Command-line interface for the orbit visualizer.

This module provides a CLI for rendering TLE catalogs to CZML and for
inspecting parsed element sets and sampled trajectories.
"""

from typing import Optional
import csv
import io
import json
import logging
import sys

import click
from tabulate import tabulate

from .config import load_config
from .elements import load_element_sets, load_tle_text, parse_tle_text
from .models import TimeWindow
from .pipeline import run_session
from .propagator import OrbitPredictorPropagator
from .sampler import sample_trajectory
from .scene import write_czml
from .utils import (
    setup_logging, parse_datetime, get_common_tle_sources,
    create_sample_tle_file, get_current_utc, write_text_file
)

logger = logging.getLogger(__name__)


def _fail(message: str, context: Optional[str] = None) -> None:
    logger.error(f"{context}: {message}" if context else message)
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
def main(log_level: str, log_file: Optional[str]) -> None:
    """Orbit Visualizer - Render TLE satellite orbits for a 3D globe."""
    setup_logging(log_level, log_file)


@main.command()
@click.option('--tle', type=str,
              help='TLE file path or http(s) URL (default: from config, TLE.txt)')
@click.option('--output', required=True, type=click.Path(),
              help='Output CZML file path')
@click.option('--config', 'config_file', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--start-time', type=str,
              help='Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)')
@click.option('--hours', type=float, help='Animation window length in hours')
@click.option('--multiplier', type=float, help='Clock playback multiplier')
@click.option('--path-step', type=float, help='Path sampling stride in seconds')
@click.option('--ground-step', type=float, help='Ground track stride in seconds')
@click.option('--workers', type=int, help='Worker processes for sampling')
def render(
    tle: Optional[str],
    output: str,
    config_file: Optional[str],
    start_time: Optional[str],
    hours: Optional[float],
    multiplier: Optional[float],
    path_step: Optional[float],
    ground_step: Optional[float],
    workers: Optional[int]
) -> None:
    """Sample every satellite in a TLE source and write a CZML scene.

    Example:
    render --tle TLE.txt --output orbits.czml --hours 2 --multiplier 10
    """
    try:
        config = load_config(config_file).override(
            tle_source=tle,
            window_hours=hours,
            clock_multiplier=multiplier,
            path_step_seconds=path_step,
            ground_track_step_seconds=ground_step,
            max_workers=workers,
        )
        start_dt = parse_datetime(start_time) if start_time else None

        click.echo(f"Rendering satellites from {config.tle_source}")
        result = run_session(config, start_time=start_dt)

        scene_path = write_czml(result.czml, output)
    except Exception as e:
        _fail(str(e), "Render failed")
        return

    summary = result.summary
    click.echo("\n=== Render Summary ===")
    click.echo(f"Window: {summary['start']} -> {summary['stop']} "
               f"({result.window.duration_seconds / 3600:g} h)")
    click.echo(f"Satellites: {summary['rendered']}/{summary['satellites']} rendered")
    click.echo(f"Position samples: {summary['samples']}")
    click.echo(f"Ground track points: {summary['ground_track_points']}")
    if summary['satellites'] == 0:
        click.echo(f"No valid TLEs found in {config.tle_source}", err=True)
    click.echo(f"\nCZML saved to: {scene_path}")


@main.command('list-tles')
@click.option('--tle', required=True, type=str,
              help='TLE file path or http(s) URL')
def list_tles(tle: str) -> None:
    """List the element sets parsed from a TLE source."""
    try:
        element_sets = load_element_sets(tle)
    except Exception as e:
        _fail(str(e), "Listing TLEs failed")
        return

    if not element_sets:
        click.echo(f"No valid TLEs found in {tle}")
        return

    rows = [
        [index, es.name, es.catalog_number]
        for index, es in enumerate(element_sets, start=1)
    ]
    click.echo(tabulate(rows, headers=['#', 'Name', 'NORAD'], tablefmt='simple'))


@main.command()
@click.option('--tle', required=True, type=str,
              help='TLE file path or http(s) URL')
@click.option('--satellite', required=True,
              help='Satellite name or NORAD catalog number')
@click.option('--start-time', type=str,
              help='Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)')
@click.option('--hours', default=2.0, type=float,
              help='Window length in hours (default: 2)')
@click.option('--step', default=10.0, type=float,
              help='Sampling stride in seconds (default: 10)')
@click.option('--format', 'output_format', default='csv',
              type=click.Choice(['csv', 'json']),
              help='Output format')
@click.option('--output', type=click.Path(),
              help='Output file (default: stdout)')
def track(
    tle: str,
    satellite: str,
    start_time: Optional[str],
    hours: float,
    step: float,
    output_format: str,
    output: Optional[str]
) -> None:
    """Dump one satellite's sampled trajectory."""
    try:
        element_sets = load_element_sets(tle)
        start_dt = parse_datetime(start_time) if start_time else get_current_utc()
        window = TimeWindow.from_hours(start_dt.replace(microsecond=0), hours, step)
    except Exception as e:
        _fail(str(e), "Track failed")
        return

    wanted = satellite.upper()
    matches = [
        es for es in element_sets
        if wanted in es.name.upper() or wanted == es.catalog_number
    ]
    if not matches:
        _fail(f"Satellite '{satellite}' not found in {tle}")
        return

    trajectory = sample_trajectory(matches[0], window, OrbitPredictorPropagator())
    rows = [
        {
            "time": sample.time.isoformat(),
            "longitude_deg": round(sample.longitude_deg, 6),
            "latitude_deg": round(sample.latitude_deg, 6),
            "altitude_m": round(sample.altitude_m, 1),
        }
        for sample in trajectory
    ]

    if output_format == 'json':
        text = json.dumps({"name": trajectory.name, "samples": rows}, indent=2)
    else:
        buffer = io.StringIO()
        writer = csv.DictWriter(
            buffer, fieldnames=["time", "longitude_deg", "latitude_deg", "altitude_m"]
        )
        writer.writeheader()
        writer.writerows(rows)
        text = buffer.getvalue()

    if output:
        try:
            write_text_file(output, text)
        except OSError as e:
            _fail(str(e), "Track failed")
            return
        click.echo(f"{len(rows)} samples for {trajectory.name} saved to: {output}")
    else:
        click.echo(text)

    if trajectory.is_empty:
        click.echo(f"No positions computed for {trajectory.name}", err=True)


@main.command()
@click.option('--source', default='celestrak_stations',
              help='TLE source (use "list-sources" to see available)')
@click.option('--output', required=True, type=click.Path(),
              help='Output TLE file path')
@click.option('--url', type=str,
              help='Custom URL for TLE data')
def download_tle(source: str, output: str, url: Optional[str]) -> None:
    """Download TLE data from online sources."""
    if url:
        download_url = url
    else:
        sources = get_common_tle_sources()
        if source not in sources:
            click.echo(f"Unknown source: {source}")
            click.echo("Available sources:")
            for name in sources.keys():
                click.echo(f"  {name}")
            sys.exit(1)
        download_url = sources[source]

    click.echo(f"Downloading TLE data from {download_url}")

    try:
        text = load_tle_text(download_url)
        output_path = write_text_file(output, text)
    except Exception as e:
        _fail(str(e), "TLE download failed")
        return

    count = len(parse_tle_text(text))
    click.echo(f"TLE data saved to: {output_path} ({count} element sets)")
    if count == 0:
        click.echo(f"No valid TLEs found in {download_url}", err=True)


@main.command()
def list_sources() -> None:
    """List available TLE data sources."""
    sources = get_common_tle_sources()

    click.echo("Available TLE sources:")
    for name, url in sources.items():
        click.echo(f"  {name:<20} {url}")


@main.command()
@click.option('--output', required=True, type=click.Path(),
              help='Output TLE file path')
def create_sample_tle(output: str) -> None:
    """Create a sample TLE file with named and unnamed element sets."""
    try:
        create_sample_tle_file(output)
    except Exception as e:
        _fail(str(e), "Sample TLE creation failed")
        return

    click.echo(f"Sample TLE file created: {output}")
    click.echo("Contains: ISS (ZARYA), NOAA 18, TERRA and one unnamed set")


if __name__ == '__main__':
    main()
