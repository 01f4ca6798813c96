"""Diagnostic all-sky chart drawn with OpenCV (zenith at center, north up, east left)."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import cv2
import numpy as np

from skyguide.processing import astro
from skyguide.processing.engine import PositionEngine

BACKGROUND = (20, 10, 5)
HORIZON_COLOR = (90, 90, 90)
LINE_BGR = (204, 128, 77)
LINE_BGR_HIGHLIGHT = (255, 217, 102)
GAZE_BGR = (0, 0, 255)


def _project(alt: float, az: float, center: int, radius: float) -> tuple[int, int]:
    r = (math.pi / 2 - alt) / (math.pi / 2) * radius
    return (int(round(center - r * math.sin(az))),
            int(round(center - r * math.cos(az))))


def render_preview(engine: PositionEngine, highlighted: str = "",
                   gaze: tuple[float, float] | None = None,
                   size: int = 512) -> np.ndarray:
    """Render the sky above the horizon as a BGR image.

    ``gaze`` is an optional (altitude, azimuth) pair in radians to mark.
    """
    frame = np.full((size, size, 3), BACKGROUND, dtype=np.uint8)
    center = size // 2
    radius = size / 2 - 24

    cv2.circle(frame, (center, center), int(radius), HORIZON_COLOR, 1, cv2.LINE_AA)
    for label, az in (("N", 0.0), ("E", math.pi / 2), ("S", math.pi), ("W", 1.5 * math.pi)):
        x, y = _project(-0.12, az, center, radius)
        cv2.putText(frame, label, (x - 5, y + 5), cv2.FONT_HERSHEY_SIMPLEX,
                    0.45, HORIZON_COLOR, 1, cv2.LINE_AA)

    if not engine.has_positions:
        cv2.putText(frame, "Waiting for position fix...", (10, 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1, cv2.LINE_AA)
        return frame

    catalog = engine.catalog
    alts = engine.altitudes
    azs = engine.azimuths

    # Figure lines (both endpoints above the horizon)
    for region in catalog.regions:
        color = LINE_BGR_HIGHLIGHT if region.code == highlighted else LINE_BGR
        thickness = 2 if region.code == highlighted else 1
        for a, b in region.segments:
            ia = catalog.index_of(a)
            ib = catalog.index_of(b)
            if ia is None or ib is None or alts[ia] < 0 or alts[ib] < 0:
                continue
            cv2.line(frame, _project(alts[ia], azs[ia], center, radius),
                     _project(alts[ib], azs[ib], center, radius),
                     color, thickness, cv2.LINE_AA)

    # Stars
    for i, obj in enumerate(catalog.objects):
        if alts[i] < 0:
            continue
        r, g, b = astro.color_index_to_rgb(obj.color_index)
        alpha = astro.magnitude_to_alpha(obj.magnitude)
        bgr = (int(255 * b * alpha), int(255 * g * alpha), int(255 * r * alpha))
        dot = max(1, int(round(astro.magnitude_to_scale(obj.magnitude))))
        cv2.circle(frame, _project(alts[i], azs[i], center, radius), dot, bgr, -1,
                   cv2.LINE_AA)

    if gaze is not None and gaze[0] >= 0:
        cv2.drawMarker(frame, _project(gaze[0], gaze[1], center, radius),
                       GAZE_BGR, cv2.MARKER_CROSS, 15, 1)

    # HUD
    observer = engine.observer
    cv2.putText(frame, f"lat {math.degrees(observer.latitude):+.2f}  "
                f"lon {math.degrees(observer.longitude):+.2f}",
                (10, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (0, 255, 0), 1)
    if highlighted:
        region = catalog.get_region(highlighted)
        name = region.name if region else highlighted
        cv2.putText(frame, name, (10, 40), cv2.FONT_HERSHEY_SIMPLEX,
                    0.5, LINE_BGR_HIGHLIGHT, 1)
    ts = datetime.now(timezone.utc).strftime("%Y-%m-%d  %H:%M:%S UTC")
    cv2.putText(frame, ts, (10, size - 10), cv2.FONT_HERSHEY_SIMPLEX,
                0.45, (255, 255, 255), 1, cv2.LINE_AA)
    return frame
