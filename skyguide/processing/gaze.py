"""Gaze matching against region centroids with dwell-time confirmation."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

import numpy as np

from skyguide.config import GazeConfig
from skyguide.models import GazeEvent, GazeEventKind, GazeState, RegionPosition
from skyguide.processing import astro

logger = logging.getLogger(__name__)


class GazeMatcher:
    """Tracks which region the pointing direction rests on.

    Idle -> Candidate when the nearest above-horizon centroid is within the
    match threshold; Candidate -> Confirmed once it has been held for
    ``hold_seconds``. Losing the candidate, or switching to another one,
    starts over with zero dwell.
    """

    def __init__(self, config: GazeConfig):
        self._cfg = config
        self._state = GazeState()

    @property
    def state(self) -> GazeState:
        return replace(self._state)

    @property
    def matched(self) -> str:
        return self._state.matched

    @property
    def confirmed(self) -> str:
        return self._state.confirmed

    def reset(self) -> None:
        """Drop the current match without emitting an event."""
        self._state = GazeState()

    def update(self, direction: Sequence[float], elapsed: float,
               regions: Sequence[RegionPosition]) -> GazeEvent | None:
        """Advance one tick.

        ``direction`` is a pointing vector in the sky frame (see
        ``astro.to_sky_frame``); ``elapsed`` is seconds since the last tick.
        Returns the transition produced by this tick, if any.
        """
        horizontal = astro.cartesian_to_horizontal(*direction)
        if horizontal is None:
            return None
        candidate = self.find_candidate(*horizontal, regions)
        return self._advance(candidate, elapsed)

    def release(self, elapsed: float = 0.0) -> GazeEvent | None:
        """Advance one tick with no pointing input; a current match is cleared."""
        return self._advance("", elapsed)

    def find_candidate(self, altitude: float, azimuth: float,
                       regions: Sequence[RegionPosition]) -> str:
        """Code of the nearest region within the threshold, or '' for none."""
        if altitude < math.radians(self._cfg.horizon_margin_deg) or not regions:
            return ""

        alts = np.array([r.altitude for r in regions])
        azs = np.array([r.azimuth for r in regions])
        dist = astro.angular_distance_horizontal(altitude, azimuth, alts, azs)
        dist = np.where(alts >= 0.0, dist, np.inf)

        best = int(np.argmin(dist))
        if dist[best] < math.radians(self._cfg.match_threshold_deg):
            return regions[best].code
        return ""

    def _advance(self, candidate: str, elapsed: float) -> GazeEvent | None:
        state = self._state

        if not candidate:
            if not state.matched:
                return None
            previous = state.matched
            self._state = GazeState()
            logger.info("Gaze left region %s", previous)
            return GazeEvent(GazeEventKind.CLEARED, previous)

        if candidate != state.matched:
            previous_confirmed = state.confirmed
            self._state = GazeState(matched=candidate)
            logger.debug("Gaze candidate %s", candidate)
            if previous_confirmed:
                return GazeEvent(GazeEventKind.CLEARED, previous_confirmed)
            return None

        state.dwell += elapsed
        if not state.confirmed and state.dwell >= self._cfg.hold_seconds:
            state.confirmed = candidate
            logger.info("Gaze confirmed region %s after %.2fs", candidate, state.dwell)
            return GazeEvent(GazeEventKind.CONFIRMED, candidate)
        return None
