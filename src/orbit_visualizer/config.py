"""
Session configuration for the orbit visualizer.

Holds the animation window length, playback multiplier and the sampling
strides. Values can come from a YAML file; CLI options override them.
"""

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "window_hours",
    "clock_multiplier",
    "path_step_seconds",
    "ground_track_step_seconds",
    "trail_time_seconds",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class VisualizerConfig:
    """
    Tunables for one render session.

    The 10 s path stride and 30 s ground-track stride are defaults only.
    """
    tle_source: str = "TLE.txt"
    window_hours: float = 2.0
    clock_multiplier: float = 10.0
    path_step_seconds: float = 10.0
    ground_track_step_seconds: float = 30.0
    trail_time_seconds: float = 3600.0
    max_workers: Optional[int] = None  # None or 1 = sequential

    def __post_init__(self):
        if not isinstance(self.tle_source, str) or not self.tle_source:
            raise ValueError(f"tle_source must be a non-empty string, got {self.tle_source!r}")
        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                raise ValueError(f"{name} must be a number, got {value!r}")
        if self.max_workers is not None and (
            not isinstance(self.max_workers, int) or isinstance(self.max_workers, bool)
        ):
            raise ValueError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.window_hours <= 0:
            raise ValueError(f"window_hours must be > 0, got {self.window_hours}")
        if self.clock_multiplier <= 0:
            raise ValueError(f"clock_multiplier must be > 0, got {self.clock_multiplier}")
        if self.path_step_seconds <= 0:
            raise ValueError(f"path_step_seconds must be > 0, got {self.path_step_seconds}")
        if self.ground_track_step_seconds <= 0:
            raise ValueError(
                f"ground_track_step_seconds must be > 0, got {self.ground_track_step_seconds}"
            )
        if self.trail_time_seconds < 0:
            raise ValueError(f"trail_time_seconds must be >= 0, got {self.trail_time_seconds}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def override(self, **changes: Any) -> "VisualizerConfig":
        """Copy with the given values replaced; None values are ignored."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def config_from_dict(data: Dict[str, Any]) -> VisualizerConfig:
    known = {f.name for f in fields(VisualizerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration key(s): {', '.join(unknown)}")
    return VisualizerConfig(**data)


def load_config(config_path: Optional[Union[str, Path]] = None) -> VisualizerConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: YAML file path; None returns the defaults

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid YAML or not a valid configuration
    """
    if config_path is None:
        return VisualizerConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    config = config_from_dict(data)
    logger.info(f"Loaded configuration from {path}")
    return config
