"""
Time-sampled trajectory generation.

Turns an element set and a time window into a discretized trajectory,
and derives the zero-altitude ground track from an already computed one.
Instants without a solution are skipped rather than failing the whole
satellite.
"""

from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, Tuple
import logging

from .models import (
    ElementSet,
    GroundTrack,
    GroundTrackPoint,
    PositionSample,
    TimeWindow,
    Trajectory,
)
from .propagator import Propagator

logger = logging.getLogger(__name__)

# time -> (longitude_deg, latitude_deg, height_m), or None if unresolvable
PositionSource = Callable[[datetime], Optional[Tuple[float, float, float]]]


def normalize_longitude(longitude_deg: float) -> float:
    """Wrap a longitude into [-180, 180]."""
    if -180.0 <= longitude_deg <= 180.0:
        return longitude_deg
    return (longitude_deg + 180.0) % 360.0 - 180.0


def clamp_latitude(latitude_deg: float) -> float:
    return max(-90.0, min(90.0, latitude_deg))


def iter_samples(
    element_set: ElementSet, window: TimeWindow, propagator: Propagator
) -> Iterator[PositionSample]:
    """
    Lazily yield position samples over the window.

    Args:
        element_set: Satellite to sample
        window: Time window and stride
        propagator: Position capability

    Yields:
        PositionSample for every instant that has a solution
    """
    for offset in window.offsets():
        when = window.start + timedelta(seconds=offset)
        position = propagator.geodetic_position(element_set, when)
        if position is None:
            continue

        lat, lon, alt_km = position
        yield PositionSample(
            time=when,
            longitude_deg=normalize_longitude(lon),
            latitude_deg=clamp_latitude(lat),
            altitude_m=alt_km * 1000.0,
        )


def sample_trajectory(
    element_set: ElementSet, window: TimeWindow, propagator: Propagator
) -> Trajectory:
    """
    Sample one satellite over the whole window.

    Returns:
        Trajectory, empty if propagation failed at every instant
    """
    trajectory = Trajectory(element_set, tuple(iter_samples(element_set, window, propagator)))

    if trajectory.is_empty:
        logger.warning(f"No positions computed for {element_set.name}")
    else:
        logger.info(f"Sampled {len(trajectory)} positions for {element_set.name}")
    return trajectory


def derive_ground_track(
    trajectory: Trajectory, position_source: PositionSource, window: TimeWindow
) -> GroundTrack:
    """
    Project a sampled trajectory onto the surface at a coarser stride.

    The position source is queried at every instant of ``window``; points
    it cannot resolve are skipped.

    Args:
        trajectory: Previously sampled trajectory
        position_source: Reverse query time -> (lon, lat, height)
        window: Same bounds as the trajectory's window, ground-track stride

    Returns:
        GroundTrack with zero-altitude points
    """
    points = []
    if not trajectory.is_empty:
        for when in window.times():
            cartographic = position_source(when)
            if cartographic is None:
                continue
            lon, lat, _ = cartographic
            points.append(GroundTrackPoint(when, normalize_longitude(lon), clamp_latitude(lat)))

    logger.debug(f"Ground track for {trajectory.name}: {len(points)} points")
    return GroundTrack(name=f"{trajectory.name} ground track", points=tuple(points))
