"""
Orbit Visualizer

Parses Two-Line Element sets, samples satellite positions over a time
window and renders them as a time-dynamic CZML scene for Cesium globes.
"""

from .elements import TLESourceError, load_element_sets, parse_tle_text
from .models import ElementSet, GroundTrack, PositionSample, TimeWindow, Trajectory
from .propagator import OrbitPredictorPropagator, Propagator
from .sampler import derive_ground_track, sample_trajectory

__version__ = "0.1.0"

__all__ = [
    "ElementSet",
    "GroundTrack",
    "OrbitPredictorPropagator",
    "PositionSample",
    "Propagator",
    "TLESourceError",
    "TimeWindow",
    "Trajectory",
    "derive_ground_track",
    "load_element_sets",
    "parse_tle_text",
    "sample_trajectory",
]
