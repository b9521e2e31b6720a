"""
One-shot render session.

Computes the time window once, loads and parses the TLE source, samples
every satellite, derives ground tracks from the sampled positions and
assembles the CZML scene. Re-running the session is the only update path.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
import logging

from .config import VisualizerConfig
from .elements import load_element_sets
from .models import ElementSet, GroundTrack, TimeWindow, Trajectory
from .parallel import sample_trajectories_parallel
from .propagator import OrbitPredictorPropagator, Propagator
from .sampler import derive_ground_track, sample_trajectory
from .scene import CZMLScene, SampledPosition
from .utils import get_current_utc

logger = logging.getLogger(__name__)


@dataclass
class SessionResult:
    """Everything produced by one session."""
    window: TimeWindow
    element_sets: List[ElementSet] = field(default_factory=list)
    trajectories: List[Trajectory] = field(default_factory=list)
    ground_tracks: List[GroundTrack] = field(default_factory=list)
    czml: List[dict] = field(default_factory=list)

    @property
    def summary(self) -> dict:
        return {
            "start": self.window.start.isoformat(),
            "stop": self.window.stop.isoformat(),
            "satellites": len(self.element_sets),
            "rendered": sum(1 for t in self.trajectories if not t.is_empty),
            "samples": sum(len(t) for t in self.trajectories),
            "ground_track_points": sum(len(g) for g in self.ground_tracks),
        }


def build_window(config: VisualizerConfig, start_time: Optional[datetime] = None) -> TimeWindow:
    """Animation window starting now (or at ``start_time``), at the path stride."""
    start = (start_time or get_current_utc()).replace(microsecond=0)
    return TimeWindow.from_hours(start, config.window_hours, config.path_step_seconds)


def sample_all(
    element_sets: Sequence[ElementSet],
    window: TimeWindow,
    propagator: Optional[Propagator] = None,
    max_workers: Optional[int] = None,
) -> List[Trajectory]:
    """
    Sample every element set, in input order.

    A process pool is only used with the default propagator; an explicit
    propagator instance is always run in-process.
    """
    if propagator is None and max_workers is not None and max_workers > 1:
        return sample_trajectories_parallel(element_sets, window, max_workers)

    propagator = propagator or OrbitPredictorPropagator()
    return [sample_trajectory(element_set, window, propagator) for element_set in element_sets]


def build_scene(
    element_sets: Sequence[ElementSet],
    trajectories: Sequence[Trajectory],
    window: TimeWindow,
    config: VisualizerConfig,
    source_label: str,
) -> Tuple[CZMLScene, List[GroundTrack]]:
    """Project sampled trajectories and their ground tracks into a CZML scene."""
    scene = CZMLScene(
        window,
        clock_multiplier=config.clock_multiplier,
        trail_time_seconds=config.trail_time_seconds,
    )
    ground_tracks: List[GroundTrack] = []

    if not element_sets:
        scene.add_notice(f"No valid TLEs found in {source_label}")
        return scene, ground_tracks

    ground_window = window.with_step(config.ground_track_step_seconds)
    for trajectory in trajectories:
        position = SampledPosition.from_trajectory(trajectory, epoch=window.start)
        ground_track = derive_ground_track(trajectory, position.cartographic_at, ground_window)
        ground_tracks.append(ground_track)
        scene.add_satellite(trajectory, ground_track)

    return scene, ground_tracks


def run_session(
    config: VisualizerConfig,
    start_time: Optional[datetime] = None,
    propagator: Optional[Propagator] = None,
) -> SessionResult:
    """
    Run the full pipeline.

    Raises:
        TLESourceError: If the TLE source cannot be read
    """
    window = build_window(config, start_time)
    logger.info(f"Animation window {window.start} -> {window.stop}")

    element_sets = load_element_sets(config.tle_source)
    trajectories = sample_all(element_sets, window, propagator, config.max_workers)
    scene, ground_tracks = build_scene(
        element_sets, trajectories, window, config, str(config.tle_source)
    )

    return SessionResult(
        window=window,
        element_sets=element_sets,
        trajectories=trajectories,
        ground_tracks=ground_tracks,
        czml=scene.build(),
    )
