"""Astronomy math: sidereal time, equatorial/horizontal transforms, visual mappings.

All functions are pure. The coordinate functions broadcast over NumPy arrays;
called with plain scalars they return plain floats.

Cartesian convention shared by every consumer of engine output:
    +X = geographic east
    +Y = zenith
    -Z = geographic north (so +Z points south)
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

import numpy as np
from scipy.spatial.transform import Rotation

TWO_PI = 2.0 * math.pi
UNIX_EPOCH_JD = 2440587.5
J2000_JD = 2451545.0

# Below this |cos(lat) * cos(alt)| the azimuth is undefined (zenith, nadir, pole).
_AZIMUTH_EPS = 1e-10

# B-V color ramp knots: blue-white -> white -> yellow -> orange-red
_BV_KNOTS = np.array([-0.4, 0.0, 0.4, 1.0, 2.0])
_BV_RED = np.array([0.6, 1.0, 1.0, 1.0, 1.0])
_BV_GREEN = np.array([0.7, 1.0, 0.8, 0.5, 0.2])
_BV_BLUE = np.array([1.0, 1.0, 0.6, 0.2, 0.05])


def _as_output(value):
    """Return a Python float for 0-d results, the array otherwise."""
    if np.ndim(value) == 0:
        return float(value)
    return value


def normalize_angle(angle):
    """Wrap radians into [0, 2pi), safe for negative input."""
    wrapped = np.mod(angle, TWO_PI)
    # np.mod(-1e-17, 2pi) rounds to exactly 2pi
    wrapped = np.where(wrapped >= TWO_PI, 0.0, wrapped)
    return _as_output(wrapped)


def julian_date(instant: datetime) -> float:
    """Julian Date of a UTC instant. Naive datetimes are taken as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.timestamp() / 86400.0 + UNIX_EPOCH_JD


def gmst(jd: float) -> float:
    """Greenwich mean sidereal time in radians, good to about an arc-minute."""
    t = jd - J2000_JD
    # Earth rotation angle: the integer part of t only adds whole turns
    theta = TWO_PI * ((t - math.floor(t)) + 0.7790572732640 + 0.00273781191135448 * t)
    return normalize_angle(theta)


def sidereal_time(instant: datetime) -> float:
    """Greenwich sidereal time (radians) for a UTC instant."""
    return gmst(julian_date(instant))


def local_sidereal_time(gmst_rad: float, longitude: float) -> float:
    """Local sidereal time; longitude in radians, east positive."""
    return normalize_angle(gmst_rad + longitude)


def equatorial_to_horizontal(ra, dec, lst, lat):
    """Convert (ra, dec) to (altitude, azimuth), all in radians.

    Azimuth is measured clockwise from north. Objects at the zenith or nadir
    get azimuth 0.
    """
    ha = np.asarray(lst - ra, dtype=float)
    dec = np.asarray(dec, dtype=float)

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    sin_dec = np.sin(dec)

    sin_alt = sin_lat * sin_dec + cos_lat * np.cos(dec) * np.cos(ha)
    alt = np.arcsin(np.clip(sin_alt, -1.0, 1.0))

    denom = np.asarray(cos_lat * np.cos(alt), dtype=float)
    defined = np.abs(denom) >= _AZIMUTH_EPS
    cos_az = np.divide(
        sin_dec - sin_lat * np.sin(alt), denom,
        out=np.ones_like(denom), where=defined,
    )
    az = np.arccos(np.clip(cos_az, -1.0, 1.0))

    # West of the meridian: mirror into (pi, 2pi)
    az = np.where(np.sin(ha) > 0, TWO_PI - az, az)
    az = np.where(defined, az, 0.0)
    return _as_output(alt), _as_output(normalize_angle(az))


def horizontal_to_cartesian(alt, az, radius: float = 1.0):
    """Project (alt, az) onto a sphere; returns (x, y, z) in the module convention."""
    cos_alt = np.cos(alt)
    x = radius * cos_alt * np.sin(az)
    y = radius * np.sin(alt)
    z = -radius * cos_alt * np.cos(az)
    return _as_output(x), _as_output(y), _as_output(z)


def cartesian_to_horizontal(x: float, y: float, z: float) -> tuple[float, float] | None:
    """Inverse of ``horizontal_to_cartesian``. Returns None for a near-zero vector."""
    length = math.sqrt(x * x + y * y + z * z)
    if length < 1e-3:
        return None
    alt = math.asin(max(-1.0, min(1.0, y / length)))
    az = math.atan2(x, -z)
    if az < 0:
        az += TWO_PI
    return alt, az


def to_sky_frame(direction, heading_deg: float) -> np.ndarray:
    """Rotate a device-world direction into the north-aligned sky frame.

    ``heading_deg`` is the compass heading of the world -Z axis, so
    ``to_sky_frame((0, 0, -1), h)`` points at azimuth ``h``.
    """
    return Rotation.from_euler("y", -heading_deg, degrees=True).apply(
        np.asarray(direction, dtype=float))


def to_world_frame(direction, heading_deg: float) -> np.ndarray:
    """Inverse of ``to_sky_frame``; the rotation a renderer applies to the sky root."""
    return Rotation.from_euler("y", heading_deg, degrees=True).apply(
        np.asarray(direction, dtype=float))


def color_index_to_rgb(bv):
    """Map a B-V color index to an approximate (r, g, b) in [0, 1]."""
    t = np.clip(bv, -0.4, 2.0)
    r = np.interp(t, _BV_KNOTS, _BV_RED)
    g = np.interp(t, _BV_KNOTS, _BV_GREEN)
    b = np.interp(t, _BV_KNOTS, _BV_BLUE)
    return _as_output(r), _as_output(g), _as_output(b)


def magnitude_to_alpha(mag):
    """Magnitude -1.5 (Sirius) maps to 1.0, magnitude 5 and dimmer to 0.15."""
    return _as_output(np.clip(1.0 - (mag + 1.5) / 7.5, 0.15, 1.0))


def magnitude_to_scale(mag):
    """Magnitude -1.5 maps to 3.0, dimmer objects shrink to a floor of 0.5."""
    return _as_output(np.clip(3.0 - (mag + 1.5) * 0.385, 0.5, 3.0))


def _haversine(lat1, lon1, lat2, lon2):
    a = (np.sin((lat2 - lat1) / 2.0) ** 2
         + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2.0) ** 2)
    return _as_output(2.0 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0))))


def angular_distance(ra1, dec1, ra2, dec2):
    """Great-circle separation of two equatorial positions, in radians."""
    return _haversine(dec1, ra1, dec2, ra2)


def angular_distance_horizontal(alt1, az1, alt2, az2):
    """Great-circle separation of two horizontal positions, in radians."""
    return _haversine(alt1, az1, alt2, az2)


def smooth_heading(current: float, target: float, alpha: float) -> float:
    """Exponential smoothing of a compass heading along the shortest arc.

    ``alpha`` is 0 for no change, 1 to snap to ``target``. Result in [0, 360).
    """
    diff = target - current
    if diff > 180.0:
        diff -= 360.0
    elif diff < -180.0:
        diff += 360.0
    result = (current + alpha * diff) % 360.0
    if result >= 360.0:
        result = 0.0
    return result
