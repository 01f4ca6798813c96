"""Observer state: GPS position, smoothed compass heading, local sidereal time."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import replace
from datetime import datetime, timezone

from skyguide.config import ObserverConfig
from skyguide.models import ObserverState
from skyguide.processing import astro

logger = logging.getLogger(__name__)


class ObserverTracker:
    """Owns the ObserverState and applies raw position/heading samples to it.

    Sample handlers may be called from feed threads; every field write and
    every ``snapshot()`` happens under one lock, so a tick never sees a
    half-applied sample.
    """

    def __init__(self, config: ObserverConfig):
        self._cfg = config
        self._state = ObserverState()
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        """True once a position fix (real or fallback) has been received."""
        return self._initialized

    def snapshot(self) -> ObserverState:
        """Return a consistent copy of the current state."""
        with self._lock:
            return replace(self._state)

    def update_position(self, latitude_deg: float, longitude_deg: float,
                        timestamp: float | None = None) -> None:
        """Store a raw GPS fix (degrees). Position is not smoothed."""
        lat = math.radians(latitude_deg)
        lon = math.radians(longitude_deg)
        ts = time.time() if timestamp is None else timestamp
        with self._lock:
            self._state.latitude = lat
            self._state.longitude = lon
            self._state.timestamp = ts
            first_fix = not self._initialized
            self._initialized = True
        if first_fix:
            logger.info("Position fix acquired: lat=%.4f lon=%.4f",
                        latitude_deg, longitude_deg)

    def update_heading(self, raw_heading_deg: float) -> float:
        """Blend a raw compass sample into the smoothed heading. Returns the new heading."""
        with self._lock:
            heading = astro.smooth_heading(
                self._state.heading, raw_heading_deg % 360.0,
                self._cfg.heading_smoothing,
            )
            self._state.heading = heading
        return heading

    def update_sidereal_time(self, now: datetime | None = None) -> float:
        """Recompute local sidereal time from ``now`` and the stored longitude."""
        return self.advance(now).lst

    def advance(self, now: datetime | None = None) -> ObserverState:
        """Refresh local sidereal time and return a copy, in one lock hold.

        The LST in the returned state always matches its longitude, even when
        a position sample lands concurrently.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        gmst_rad = astro.sidereal_time(now)
        with self._lock:
            self._state.lst = astro.local_sidereal_time(gmst_rad, self._state.longitude)
            return replace(self._state)

    def use_fallback(self, latitude_deg: float | None = None,
                     longitude_deg: float | None = None) -> None:
        """Seed a fixed location so the pipeline can run without a live fix."""
        if latitude_deg is None:
            latitude_deg = self._cfg.fallback_latitude
        if longitude_deg is None:
            longitude_deg = self._cfg.fallback_longitude
        logger.warning("No position feed, using fallback location lat=%.4f lon=%.4f",
                       latitude_deg, longitude_deg)
        with self._lock:
            self._state.latitude = math.radians(latitude_deg)
            self._state.longitude = math.radians(longitude_deg)
            self._state.heading = 0.0
            self._state.timestamp = time.time()
            self._initialized = True
