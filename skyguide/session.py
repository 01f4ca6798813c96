"""Session driver: observer feed -> position engine -> gaze matcher -> events."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Callable

import numpy as np

from skyguide.catalog.builder import Catalog
from skyguide.config import AppConfig
from skyguide.models import GazeEvent, GazeEventKind
from skyguide.processing import astro
from skyguide.processing.engine import PositionEngine
from skyguide.processing.gaze import GazeMatcher
from skyguide.processing.observer import ObserverTracker
from skyguide.rendering.overlay import describe_region

logger = logging.getLogger(__name__)


class SkyGuideSession:
    """Owns the tracker, engine and matcher and drives them from ticks.

    ``tick()`` can be called by an external frame loop, or ``start()`` runs
    it from a background thread at ``config.session.tick_rate``.
    """

    def __init__(self, config: AppConfig, catalog: Catalog):
        self._config = config
        self._catalog = catalog

        # Components
        self._tracker = ObserverTracker(config.observer)
        self._engine = PositionEngine(catalog, self._tracker, config.engine)
        self._matcher = GazeMatcher(config.gaze)

        self._running = False
        self._thread: threading.Thread | None = None

        # Event subscribers (for WebSocket push)
        self._event_callbacks: list[Callable] = []
        self._loop: asyncio.AbstractEventLoop | None = None

        # Latest pointing direction for the background loop
        self._pointing: np.ndarray | None = None
        self._pointing_lock = threading.Lock()
        self._gaze_horizontal: tuple[float, float] | None = None

        # Region currently shown on the info panel
        self._panel_code = ""

        # Stats
        self._tick_count = 0
        self._tick_rate_actual = 0.0

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def tracker(self) -> ObserverTracker:
        return self._tracker

    @property
    def engine(self) -> PositionEngine:
        return self._engine

    @property
    def matcher(self) -> GazeMatcher:
        return self._matcher

    @property
    def gaze_horizontal(self) -> tuple[float, float] | None:
        """(altitude, azimuth) of the last sky-frame pointing direction."""
        return self._gaze_horizontal

    @property
    def stats(self) -> dict[str, Any]:
        observer = self._tracker.snapshot()
        return {
            "ticks": self._tick_count,
            "tick_rate": round(self._tick_rate_actual, 1),
            "initialized": self._tracker.initialized,
            "heading": round(observer.heading, 2),
            "matched": self._matcher.matched,
            "confirmed": self._matcher.confirmed,
            "panel": self._panel_code,
        }

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the asyncio event loop for thread-safe callbacks."""
        self._loop = loop

    def add_event_callback(self, callback: Callable) -> None:
        """Register a callback for gaze and panel events."""
        self._event_callbacks.append(callback)

    def set_pointing(self, direction: Sequence[float] | None) -> None:
        """Store the latest device-world pointing vector for the background loop."""
        value = None if direction is None else np.asarray(direction, dtype=float)
        with self._pointing_lock:
            self._pointing = value

    def ensure_position(self) -> bool:
        """Seed the configured fallback location if no fix has arrived yet."""
        if self._tracker.initialized:
            return True
        if not self._config.observer.fallback_enabled:
            return False
        self._tracker.use_fallback()
        return True

    def update_gaze_config(self, **kwargs: Any) -> None:
        """Update gaze parameters at runtime (the matcher reads the config object)."""
        for key, value in kwargs.items():
            if hasattr(self._config.gaze, key):
                setattr(self._config.gaze, key, value)
        logger.info("Gaze config updated: %s", kwargs)

    def tick(self, elapsed: float, direction: Sequence[float] | None = None,
             now: datetime | None = None) -> GazeEvent | None:
        """Run one frame: throttled position recompute, then gaze matching.

        ``direction`` is the pointing vector in the device-world frame; the
        smoothed heading rotates it into the sky frame. ``None`` (no pointing input)
        counts as looking at no region.
        """
        interval = max(1, int(self._config.engine.update_interval))
        if self._tick_count % interval == 0:
            self._engine.recompute(now)
        self._tick_count += 1

        if not self._engine.has_positions:
            return None

        if direction is None:
            # Pointing lost: same as looking at no region
            self._gaze_horizontal = None
            event = self._matcher.release(elapsed)
        else:
            heading = self._tracker.snapshot().heading
            sky = astro.to_sky_frame(direction, heading)
            self._gaze_horizontal = astro.cartesian_to_horizontal(*sky)
            event = self._matcher.update(sky, elapsed, self._engine.region_positions)
        if event is not None:
            self._on_gaze_event(event)
        return event

    def select(self) -> str:
        """External confirm input: show info for the confirmed region.

        Returns the region code shown, or '' when nothing is confirmed.
        """
        code = self._matcher.confirmed
        if not code:
            return ""
        region = self._catalog.get_region(code)
        self._panel_code = code
        logger.info("Selected region %s", code)
        self._publish({
            "type": "panel",
            "action": "show",
            "code": code,
            "name": region.name if region else code,
            "text": describe_region(self._catalog, code),
        })
        return code

    def dismiss(self) -> None:
        """External dismiss input: hide the info panel."""
        self._panel_code = ""
        self._publish({"type": "panel", "action": "hide"})

    def start(self) -> None:
        """Start the background tick loop."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()
        logger.info("Session started")

    def stop(self) -> None:
        """Stop the background tick loop."""
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        logger.info("Session stopped")

    def _run_loop(self) -> None:
        """Fixed-rate tick loop running in a background thread."""
        period = 1.0 / max(1.0, self._config.session.tick_rate)
        last = time.monotonic()
        rate_timer = last
        rate_ticks = 0

        while self._running:
            now = time.monotonic()
            elapsed = now - last
            last = now

            with self._pointing_lock:
                direction = self._pointing

            try:
                self.tick(elapsed, direction)
            except Exception:
                logger.exception("Error in tick loop")

            rate_ticks += 1
            if now - rate_timer >= 1.0:
                self._tick_rate_actual = rate_ticks / (now - rate_timer)
                rate_ticks = 0
                rate_timer = now

            time.sleep(max(0.0, period - (time.monotonic() - now)))

    def _on_gaze_event(self, event: GazeEvent) -> None:
        region = self._catalog.get_region(event.code)
        self._publish({
            "type": "gaze",
            "kind": event.kind.value,
            "code": event.code,
            "name": region.name if region else event.code,
        })
        # Looking away from the region on the panel closes it
        if event.kind == GazeEventKind.CLEARED and self._panel_code == event.code:
            self.dismiss()

    def _publish(self, event_data: dict) -> None:
        for callback in self._event_callbacks:
            try:
                if self._loop is not None:
                    self._loop.call_soon_threadsafe(callback, event_data)
                else:
                    callback(event_data)
            except Exception:
                logger.exception("Error in event callback")


def pointing_from_angles(altitude_deg: float, azimuth_deg: float) -> np.ndarray:
    """Unit pointing vector for a world-frame (altitude, azimuth) pair in degrees."""
    x, y, z = astro.horizontal_to_cartesian(
        math.radians(altitude_deg), math.radians(azimuth_deg), 1.0)
    return np.array([x, y, z])
