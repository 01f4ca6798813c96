"""Shared data models for the sky guide pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class CelestialObject:
    """A fixed catalog entry. Angles in radians."""
    object_id: int
    ra: float
    dec: float
    magnitude: float
    color_index: float        # B-V
    name: str = ""
    region: str = ""          # region code this object is listed under


@dataclass(frozen=True)
class Region:
    """A named sky figure with its equatorial centroid (radians)."""
    code: str
    name: str
    segments: tuple[tuple[int, int], ...] = ()
    centroid_ra: float = 0.0
    centroid_dec: float = 0.0

    @property
    def member_ids(self) -> list[int]:
        """Distinct object ids referenced by the segments, in first-seen order."""
        seen: dict[int, None] = {}
        for a, b in self.segments:
            seen.setdefault(a)
            seen.setdefault(b)
        return list(seen)


@dataclass
class ObserverState:
    latitude: float = 0.0     # radians
    longitude: float = 0.0    # radians, east positive
    heading: float = 0.0      # smoothed compass heading, degrees [0, 360)
    lst: float = 0.0          # local sidereal time, radians [0, 2pi)
    timestamp: float = 0.0    # unix seconds of the last update


@dataclass
class ComputedPosition:
    """Per-object output of one engine recompute."""
    object_id: int = 0
    x: float = 0.0
    y: float = 0.0            # vertical; negative means below the horizon
    z: float = 0.0
    magnitude: float = 0.0
    color_index: float = 0.0
    name: str = ""


@dataclass
class RegionPosition:
    """Region centroid in horizontal coordinates (radians)."""
    code: str = ""
    altitude: float = 0.0
    azimuth: float = 0.0


class GazeEventKind(str, Enum):
    CONFIRMED = "confirmed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class GazeEvent:
    kind: GazeEventKind
    code: str


@dataclass
class GazeState:
    matched: str = ""         # current candidate, empty when none
    dwell: float = 0.0        # seconds the candidate has been held
    confirmed: str = ""       # last confirmed region, empty when none
