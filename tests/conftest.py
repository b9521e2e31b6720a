"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Sample TLE data (named, unnamed and mixed sources)
- A deterministic fake propagator so sampling can be tested without SGP4
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Set, Tuple

import pytest
from _pytest.config import Config

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orbit_visualizer.models import ElementSet, TimeWindow  # noqa: E402
from orbit_visualizer.propagator import Propagator  # noqa: E402


ISS_LINE1 = "1 25544U 98067A   24001.00000000  .00002182  00000-0  40864-4 0  9990"
ISS_LINE2 = "2 25544  51.6461 339.7939 0001220  92.8340 267.3124 15.49309239426382"
NOAA_LINE1 = "1 28654U 05018A   24001.00000000  .00000012  00000-0  28110-4 0  9997"
NOAA_LINE2 = "2 28654  99.0581 161.3857 0013414  73.9446 286.3932 14.12501637967188"


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class FakePropagator(Propagator):
    """
    Deterministic propagator: the satellite drifts east along the equator
    at a fixed rate, 400 km up.

    Instants later than ``fail_after_seconds`` (measured from ``epoch``) or
    listed in ``fail_at`` have no solution.
    """

    def __init__(
        self,
        epoch: datetime,
        fail_after_seconds: Optional[float] = None,
        fail_at: Optional[Set[datetime]] = None,
        degrees_per_second: float = 0.01,
    ) -> None:
        self.epoch = epoch
        self.fail_after_seconds = fail_after_seconds
        self.fail_at = fail_at or set()
        self.degrees_per_second = degrees_per_second
        self.calls = 0

    def geodetic_position(self, element_set, when):
        self.calls += 1
        elapsed = (when - self.epoch).total_seconds()
        if self.fail_after_seconds is not None and elapsed > self.fail_after_seconds:
            return None
        if when in self.fail_at:
            return None
        lon = (elapsed * self.degrees_per_second + 180.0) % 360.0 - 180.0
        return (0.0, lon, 400.0)


class AlwaysFailingPropagator(Propagator):
    """Propagator for an orbit that has no solution anywhere."""

    def geodetic_position(self, element_set, when):
        return None


@pytest.fixture
def base_datetime() -> datetime:
    """Standard window start for tests (shortly after the sample TLE epoch)."""
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def two_hour_window(base_datetime: datetime) -> TimeWindow:
    """Two-hour window at the 10 second path stride."""
    return TimeWindow(base_datetime, base_datetime + timedelta(hours=2), 10.0)


@pytest.fixture
def sample_tle_lines() -> Tuple[str, str]:
    """Sample TLE lines for the ISS."""
    return (ISS_LINE1, ISS_LINE2)


@pytest.fixture
def iss_element_set() -> ElementSet:
    return ElementSet("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)


@pytest.fixture
def noaa_element_set() -> ElementSet:
    return ElementSet("NOAA 18", NOAA_LINE1, NOAA_LINE2)


@pytest.fixture
def mixed_tle_text() -> str:
    """A named set, a comment, blank lines and an unnamed set."""
    return (
        "# stations\n"
        "ISS (ZARYA)\n"
        f"{ISS_LINE1}\n"
        f"{ISS_LINE2}\n"
        "\n"
        "   \n"
        f"{NOAA_LINE1}\r\n"
        f"{NOAA_LINE2}\r\n"
    )


@pytest.fixture
def tle_file(tmp_path: Path, mixed_tle_text: str) -> Path:
    path = tmp_path / "TLE.txt"
    path.write_text(mixed_tle_text)
    return path


@pytest.fixture
def fake_propagator(base_datetime: datetime) -> FakePropagator:
    return FakePropagator(base_datetime)
