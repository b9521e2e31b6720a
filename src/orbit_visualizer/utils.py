"""
Utility functions for the orbit visualizer.

Logging setup, UTC datetime handling and the TLE source helpers used by
the CLI.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union
import logging
import os

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "ORBIT_VISUALIZER_LOG_LEVEL"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        ORBIT_VISUALIZER_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Parse an ISO 8601 date or datetime into naive UTC.

    Accepts a space or 'T' separator, a trailing 'Z' and explicit UTC
    offsets; values without an offset are taken as UTC already.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_string.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Could not parse datetime string: {date_string}") from None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def get_current_utc() -> datetime:
    """Current UTC time as a timezone-naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


CELESTRAK_GP_URL = "https://celestrak.org/NORAD/elements/gp.php?GROUP={group}&FORMAT=tle"

CELESTRAK_GROUPS = {
    "celestrak_active": "active",
    "celestrak_stations": "stations",
    "celestrak_visual": "visual",
    "celestrak_weather": "weather",
    "celestrak_gps": "gps-ops",
    "celestrak_starlink": "starlink",
    "celestrak_cubesat": "cubesat",
}


def get_common_tle_sources() -> Dict[str, str]:
    """Named CelesTrak GP groups, as TLE-format URLs usable as a TLE source."""
    return {
        name: CELESTRAK_GP_URL.format(group=group)
        for name, group in CELESTRAK_GROUPS.items()
    }


SAMPLE_TLE_TEXT = """# Sample element sets
ISS (ZARYA)
1 25544U 98067A   24001.00000000  .00002182  00000-0  40864-4 0  9990
2 25544  51.6461 339.7939 0001220  92.8340 267.3124 15.49309239426382
NOAA 18
1 28654U 05018A   24001.00000000  .00000012  00000-0  28110-4 0  9997
2 28654  99.0581 161.3857 0013414  73.9446 286.3932 14.12501637967188
TERRA
1 25994U 99068A   24001.00000000  .00000023  00000-0  42979-4 0  9991
2 25994  98.2022  10.3559 0001378  83.7123 276.4313 14.57107527260649

1 27424U 02022A   24001.00000000  .00000024  00000-0  43856-4 0  9996
2 27424  98.2123  70.8559 0002378  93.7123 266.4313 14.57207527160649
"""


def write_text_file(output_file: Union[str, Path], text: str) -> Path:
    """Write UTF-8 text, creating parent directories."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    return output_path


def create_sample_tle_file(output_file: Union[str, Path]) -> Path:
    """Write a TLE file mixing named sets, a comment and one unnamed set."""
    output_path = write_text_file(output_file, SAMPLE_TLE_TEXT)
    logger.info(f"Created sample TLE file: {output_path}")
    return output_path
