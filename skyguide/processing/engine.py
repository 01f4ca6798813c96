"""Catalog position engine: equatorial catalog -> horizontal -> Cartesian."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime

import numpy as np

from skyguide.catalog.builder import Catalog
from skyguide.config import EngineConfig
from skyguide.models import ComputedPosition, ObserverState, RegionPosition
from skyguide.processing import astro
from skyguide.processing.observer import ObserverTracker

logger = logging.getLogger(__name__)


class PositionEngine:
    """Recomputes every catalog object's position from the current observer state.

    Output buffers are allocated once and rewritten in place on every
    ``recompute``; index ``i`` always refers to ``catalog.objects[i]``.
    Objects below the horizon are kept (their ``y`` is negative).
    """

    def __init__(self, catalog: Catalog, tracker: ObserverTracker,
                 config: EngineConfig):
        self._catalog = catalog
        self._tracker = tracker
        self._radius = config.sphere_radius

        objects = catalog.objects
        self._ra = np.array([o.ra for o in objects], dtype=float)
        self._dec = np.array([o.dec for o in objects], dtype=float)
        self._altitude = np.zeros(len(objects))
        self._azimuth = np.zeros(len(objects))
        self._positions = [ComputedPosition(object_id=o.object_id) for o in objects]

        regions = catalog.matchable_regions
        self._region_ra = np.array([r.centroid_ra for r in regions], dtype=float)
        self._region_dec = np.array([r.centroid_dec for r in regions], dtype=float)
        self._region_positions = [RegionPosition(code=r.code) for r in regions]

        self._observer: ObserverState | None = None
        self._recompute_count = 0
        self._lock = threading.Lock()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def has_positions(self) -> bool:
        return self._observer is not None

    @property
    def observer(self) -> ObserverState | None:
        """Observer state used by the most recent recompute."""
        return self._observer

    @property
    def positions(self) -> tuple[ComputedPosition, ...]:
        """The live output buffer. Read it between ticks; do not mutate."""
        return tuple(self._positions)

    @property
    def region_positions(self) -> tuple[RegionPosition, ...]:
        """Horizontal centroids of ``catalog.matchable_regions``, same order."""
        return tuple(self._region_positions)

    @property
    def altitudes(self) -> np.ndarray:
        return self._altitude.copy()

    @property
    def azimuths(self) -> np.ndarray:
        return self._azimuth.copy()

    def index_of(self, object_id: int) -> int | None:
        return self._catalog.index_of(object_id)

    def snapshot(self) -> list[ComputedPosition]:
        """Copy of the output buffer, safe to hand to another thread."""
        with self._lock:
            return [replace(p) for p in self._positions]

    def region_snapshot(self) -> list[RegionPosition]:
        with self._lock:
            return [replace(r) for r in self._region_positions]

    def recompute(self, now: datetime | None = None) -> bool:
        """Recompute all positions for ``now`` (UTC, default: current time).

        Returns False without touching the buffers while the observer has no
        position fix.
        """
        if not self._tracker.initialized:
            return False

        observer = self._tracker.advance(now)

        alt, az = astro.equatorial_to_horizontal(
            self._ra, self._dec, observer.lst, observer.latitude)
        x, y, z = astro.horizontal_to_cartesian(alt, az, self._radius)
        region_alt, region_az = astro.equatorial_to_horizontal(
            self._region_ra, self._region_dec, observer.lst, observer.latitude)

        with self._lock:
            self._altitude[:] = alt
            self._azimuth[:] = az
            for i, obj in enumerate(self._catalog.objects):
                p = self._positions[i]
                p.object_id = obj.object_id
                p.x = float(x[i])
                p.y = float(y[i])
                p.z = float(z[i])
                p.magnitude = obj.magnitude
                p.color_index = obj.color_index
                p.name = obj.name
            for i, rp in enumerate(self._region_positions):
                rp.altitude = float(region_alt[i])
                rp.azimuth = float(region_az[i])
            self._observer = observer

        self._recompute_count += 1
        if self._recompute_count == 1:
            logger.info("First position recompute: %d objects, %d regions",
                        len(self._positions), len(self._region_positions))
        else:
            logger.debug("Recomputed positions (lst=%.4f rad)", observer.lst)
        return True
