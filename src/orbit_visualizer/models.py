"""
Core data records for the orbit visualizer.

Element sets, time windows, position samples, trajectories and ground
tracks. All records are immutable; times are timezone-naive UTC datetimes,
matching what orbit-predictor expects.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterator, List, Tuple


@dataclass(frozen=True)
class ElementSet:
    """
    One satellite's Two-Line Element set.

    The two lines are kept as opaque strings; the 69-column layout is
    enforced by the propagator, not here.
    """
    name: str
    line1: str
    line2: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("ElementSet name must not be empty")
        if not self.line1.startswith("1"):
            raise ValueError(f"TLE line1 must start with '1': {self.line1!r}")
        if not self.line2.startswith("2"):
            raise ValueError(f"TLE line2 must start with '2': {self.line2!r}")

    @property
    def catalog_number(self) -> str:
        """NORAD catalog number taken from line 1 (columns 3-7)."""
        return self.line1[2:7].strip()

    def as_text(self) -> str:
        return f"{self.name}\n{self.line1}\n{self.line2}\n"


@dataclass(frozen=True)
class TimeWindow:
    """
    Absolute time window sampled at a fixed stride.

    Offsets run from 0 to the window duration inclusive.
    """
    start: datetime
    stop: datetime
    step_seconds: float

    def __post_init__(self):
        if self.stop <= self.start:
            raise ValueError(
                f"TimeWindow stop must be after start, got {self.start} -> {self.stop}"
            )
        if self.step_seconds <= 0:
            raise ValueError(f"step_seconds must be > 0, got {self.step_seconds}")

    @classmethod
    def from_hours(cls, start: datetime, hours: float, step_seconds: float) -> "TimeWindow":
        return cls(start, start + timedelta(hours=hours), step_seconds)

    @property
    def duration_seconds(self) -> float:
        return (self.stop - self.start).total_seconds()

    def offsets(self) -> Iterator[float]:
        """Yield offsets in seconds from start, 0..duration inclusive."""
        duration = self.duration_seconds
        k = 0
        # multiply instead of accumulating so long windows don't drift
        while k * self.step_seconds <= duration:
            yield k * self.step_seconds
            k += 1

    def times(self) -> Iterator[datetime]:
        for offset in self.offsets():
            yield self.start + timedelta(seconds=offset)

    def with_step(self, step_seconds: float) -> "TimeWindow":
        """Same bounds at a different stride."""
        return TimeWindow(self.start, self.stop, step_seconds)

    def contains(self, when: datetime) -> bool:
        return self.start <= when <= self.stop


@dataclass(frozen=True)
class PositionSample:
    """Geodetic position of a satellite at one instant."""
    time: datetime
    longitude_deg: float
    latitude_deg: float
    altitude_m: float


@dataclass(frozen=True)
class Trajectory:
    """
    Time-ordered position samples for one element set.

    Instants where propagation had no solution are absent, so the
    sequence may contain time gaps.
    """
    element_set: ElementSet
    samples: Tuple[PositionSample, ...] = field(default_factory=tuple)

    def __post_init__(self):
        for previous, current in zip(self.samples, self.samples[1:]):
            if current.time <= previous.time:
                raise ValueError(
                    f"Trajectory samples must be strictly increasing in time "
                    f"({previous.time} then {current.time})"
                )

    @property
    def name(self) -> str:
        return self.element_set.name

    @property
    def is_empty(self) -> bool:
        return not self.samples

    @property
    def times(self) -> List[datetime]:
        return [sample.time for sample in self.samples]

    @property
    def start(self) -> datetime:
        return self.samples[0].time

    @property
    def stop(self) -> datetime:
        return self.samples[-1].time

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[PositionSample]:
        return iter(self.samples)


@dataclass(frozen=True)
class GroundTrackPoint:
    time: datetime
    longitude_deg: float
    latitude_deg: float


@dataclass(frozen=True)
class GroundTrack:
    """Zero-altitude projection of a trajectory, sampled at a coarser stride."""
    name: str
    points: Tuple[GroundTrackPoint, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[GroundTrackPoint]:
        return iter(self.points)
