"""
CZML scene generation for Cesium visualization.

Builds a time-dynamic CZML document with:
- A clock spanning the animation window
- One moving satellite marker per trajectory (point, trailing path, label)
- One dashed ground-track polyline per satellite
- Label notices when there is nothing to draw

SampledPosition mirrors Cesium's sampled position property: it stores
Earth-fixed samples, interpolates linearly between them and answers the
reverse query time -> position used to derive ground tracks.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from orbit_predictor.coordinate_systems import ecef_to_llh, llh_to_ecef

from .models import GroundTrack, TimeWindow, Trajectory
from .utils import get_current_utc

logger = logging.getLogger(__name__)

DEFAULT_TRAIL_TIME_SECONDS = 3600.0
DEFAULT_CLOCK_MULTIPLIER = 10.0

WHITE_RGBA: List[int] = [255, 255, 255, 255]
GROUND_TRACK_ALPHA = 204


def format_czml_date(dt: datetime) -> str:
    """Format a datetime as Cesium-compatible ISO 8601 (no microseconds, 'Z')."""
    if dt.tzinfo is not None:
        dt = datetime(*dt.utctimetuple()[:6])
    return dt.replace(microsecond=0).isoformat() + "Z"


def format_interval(start: datetime, stop: datetime) -> str:
    return f"{format_czml_date(start)}/{format_czml_date(stop)}"


class SampledPosition:
    """
    Time-indexed satellite position with linear interpolation.

    Samples are stored as Earth-fixed Cartesian coordinates (km) so
    interpolation does not break across the antimeridian. Queries outside
    the sampled interval resolve to None.
    """

    def __init__(self, epoch: datetime) -> None:
        self.epoch = epoch
        self._seconds: List[float] = []
        self._ecef_km: List[Tuple[float, float, float]] = []
        self._arrays: Optional[Tuple[np.ndarray, np.ndarray]] = None

    @classmethod
    def from_trajectory(cls, trajectory: Trajectory, epoch: Optional[datetime] = None) -> "SampledPosition":
        if epoch is None:
            epoch = trajectory.start if not trajectory.is_empty else get_current_utc()
        position = cls(epoch)
        for sample in trajectory:
            position.add_sample(
                sample.time, sample.longitude_deg, sample.latitude_deg, sample.altitude_m
            )
        return position

    def __len__(self) -> int:
        return len(self._seconds)

    def add_sample(self, when: datetime, longitude_deg: float, latitude_deg: float, height_m: float) -> None:
        seconds = (when - self.epoch).total_seconds()
        if self._seconds and seconds <= self._seconds[-1]:
            raise ValueError(f"Samples must be added in increasing time order ({when})")
        self._seconds.append(seconds)
        self._ecef_km.append(tuple(llh_to_ecef(latitude_deg, longitude_deg, height_m / 1000.0)))
        self._arrays = None

    def _sample_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        # rebuilt only after new samples arrive
        if self._arrays is None:
            self._arrays = (np.asarray(self._seconds), np.asarray(self._ecef_km))
        return self._arrays

    def value_at(self, when: datetime) -> Optional[np.ndarray]:
        """
        Interpolated Earth-fixed position (km) at ``when``.

        Returns:
            Array [x, y, z], or None outside the sampled interval
        """
        if not self._seconds:
            return None

        seconds = (when - self.epoch).total_seconds()
        if seconds < self._seconds[0] or seconds > self._seconds[-1]:
            return None

        times, coords = self._sample_arrays()
        return np.array([np.interp(seconds, times, coords[:, axis]) for axis in range(3)])

    def cartographic_at(self, when: datetime) -> Optional[Tuple[float, float, float]]:
        """
        Reverse query: (longitude_deg, latitude_deg, height_m) at ``when``.

        Returns None when the time cannot be resolved.
        """
        ecef_km = self.value_at(when)
        if ecef_km is None:
            return None
        lat, lon, h_km = ecef_to_llh(tuple(ecef_km))
        return (lon, lat, h_km * 1000.0)


class CZMLScene:
    """Accumulates CZML packets for one render session."""

    def __init__(
        self,
        window: TimeWindow,
        clock_multiplier: float = DEFAULT_CLOCK_MULTIPLIER,
        trail_time_seconds: float = DEFAULT_TRAIL_TIME_SECONDS,
        name: str = "Orbit Visualizer",
    ) -> None:
        self.window = window
        self.clock_multiplier = clock_multiplier
        self.trail_time_seconds = trail_time_seconds
        self.name = name
        self._packets: List[Dict[str, Any]] = []
        self._satellite_count = 0
        self._notice_count = 0

    @property
    def satellite_count(self) -> int:
        return self._satellite_count

    def _document_packet(self) -> Dict[str, Any]:
        return {
            "id": "document",
            "name": self.name,
            "version": "1.0",
            "clock": {
                "interval": format_interval(self.window.start, self.window.stop),
                "currentTime": format_czml_date(self.window.start),
                "multiplier": self.clock_multiplier,
                "range": "LOOP_STOP",
                "step": "SYSTEM_CLOCK_MULTIPLIER",
            },
        }

    def add_satellite(
        self,
        trajectory: Trajectory,
        ground_track: Optional[GroundTrack] = None,
        color_rgba: Optional[List[int]] = None,
    ) -> None:
        """
        Add a moving satellite and its ground track.

        An empty trajectory is replaced by a notice so the satellite does not
        silently disappear.
        """
        if trajectory.is_empty:
            self.add_notice(f"No positions computed for {trajectory.name}")
            return

        self._satellite_count += 1
        sat_id = f"sat_{self._satellite_count}"
        color = list(color_rgba or WHITE_RGBA)
        epoch = self.window.start
        availability = format_interval(trajectory.start, trajectory.stop)

        positions: List[float] = []
        for sample in trajectory:
            positions.extend([
                (sample.time - epoch).total_seconds(),
                sample.longitude_deg,
                sample.latitude_deg,
                sample.altitude_m,
            ])

        self._packets.append({
            "id": sat_id,
            "name": trajectory.name,
            "availability": availability,
            "description": f"NORAD {trajectory.element_set.catalog_number}",
            "position": {
                "epoch": format_czml_date(epoch),
                "interpolationAlgorithm": "LINEAR",
                "cartographicDegrees": positions,
            },
            "orientation": {"velocityReference": "#position"},
            "point": {"pixelSize": 8, "color": {"rgba": color}},
            "path": {
                "leadTime": 0,
                "trailTime": self.trail_time_seconds,
                "width": 2,
                "material": {
                    "polylineGlow": {"glowPower": 0.2, "color": {"rgba": color}}
                },
            },
            "label": {
                "text": trajectory.name,
                "font": "14px sans-serif",
                "pixelOffset": {"cartesian2": [12, -12]},
                "fillColor": {"rgba": list(WHITE_RGBA)},
                "showBackground": True,
            },
        })

        if ground_track is not None:
            self._packets.append(self._ground_track_packet(sat_id, ground_track, color, availability))

    def _ground_track_packet(
        self, sat_id: str, ground_track: GroundTrack, color: List[int], availability: str
    ) -> Dict[str, Any]:
        positions: List[float] = []
        for point in ground_track:
            positions.extend([point.longitude_deg, point.latitude_deg, 0.0])

        return {
            "id": f"{sat_id}_ground_track",
            "name": ground_track.name,
            "availability": availability,
            "polyline": {
                "positions": {"cartographicDegrees": positions},
                "width": 1,
                "material": {
                    "polylineDash": {
                        "dashLength": 8,
                        "color": {"rgba": color[:3] + [GROUND_TRACK_ALPHA]},
                    }
                },
            },
        }

    def add_notice(self, text: str) -> None:
        """Add a fallback label shown instead of missing data."""
        self._notice_count += 1
        logger.warning(text)
        self._packets.append({
            "id": f"notice_{self._notice_count}",
            "name": "Notice",
            "position": {"cartographicDegrees": [0.0, 0.0, 0.0]},
            "label": {
                "text": text,
                "font": "14px sans-serif",
                "pixelOffset": {"cartesian2": [0, -40 - 20 * (self._notice_count - 1)]},
                "fillColor": {"rgba": list(WHITE_RGBA)},
                "showBackground": True,
            },
        })

    def build(self) -> List[Dict[str, Any]]:
        """Complete CZML document: document packet first, then entities."""
        czml = [self._document_packet()] + list(self._packets)
        logger.info(f"Generated CZML with {len(czml)} packets")
        return czml

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.build(), indent=indent)

    def write(self, output_file: Union[str, Path], indent: Optional[int] = 2) -> Path:
        return write_czml(self.build(), output_file, indent=indent)


def write_czml(
    packets: List[Dict[str, Any]], output_file: Union[str, Path], indent: Optional[int] = 2
) -> Path:
    """Write a CZML packet list as JSON, creating parent directories."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(packets, indent=indent), encoding="utf-8")
    logger.info(f"CZML written to {output_path}")
    return output_path
