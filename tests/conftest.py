"""Shared test fixtures: configs, a small synthetic catalog and fixed instants."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from skyguide.catalog.builder import Catalog, build_region
from skyguide.config import (
    AppConfig,
    EngineConfig,
    GazeConfig,
    ObserverConfig,
)
from skyguide.models import CelestialObject

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# Days after J2000 at which the linear sidereal-time formula gives GMST = 0
_GMST_ZERO_DAYS = (1.0 - 0.7790572732640) / 1.00273781191135448


@pytest.fixture
def observer_config() -> ObserverConfig:
    return ObserverConfig(
        heading_smoothing=0.15,
        fallback_enabled=True,
        fallback_latitude=48.8566,
        fallback_longitude=2.3522,
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(sphere_radius=500.0, update_interval=2)


@pytest.fixture
def gaze_config() -> GazeConfig:
    return GazeConfig(
        match_threshold_deg=8.0,
        horizon_margin_deg=-5.0,
        hold_seconds=0.5,
    )


@pytest.fixture
def app_config(observer_config, engine_config, gaze_config) -> AppConfig:
    config = AppConfig()
    config.observer = observer_config
    config.engine = engine_config
    config.gaze = gaze_config
    return config


@pytest.fixture
def gmst_zero_instant() -> datetime:
    """A UTC instant at which Greenwich sidereal time is ~0."""
    return J2000 + timedelta(days=_GMST_ZERO_DAYS)


def make_object(object_id: int, ra_deg: float, dec_deg: float,
                mag: float = 2.0, bv: float = 0.5, name: str = "",
                region: str = "") -> CelestialObject:
    return CelestialObject(
        object_id=object_id,
        ra=math.radians(ra_deg),
        dec=math.radians(dec_deg),
        magnitude=mag,
        color_index=bv,
        name=name,
        region=region,
    )


@pytest.fixture
def small_catalog() -> Catalog:
    """Two figures on the celestial equator, 30 degrees apart in RA, plus an
    empty figure whose members are all missing."""
    objects = [
        make_object(1, -2.0, -2.0, mag=0.5, name="Alpha", region="AAA"),
        make_object(2, 2.0, 2.0, mag=1.5, name="Beta", region="AAA"),
        make_object(3, 0.0, 4.0, mag=3.0, region="AAA"),
        make_object(4, 28.0, 0.0, mag=2.0, name="Gamma", region="BBB"),
        make_object(5, 32.0, 0.0, mag=4.5, region="BBB"),
        make_object(6, 180.0, -60.0, mag=1.0, name="Lonely"),
    ]
    by_id = {o.object_id: o for o in objects}
    regions = [
        build_region("AAA", "Region A", [[1, 2, 3, 1]], by_id),
        build_region("BBB", "Region B", [[4, 5], [5, 99]], by_id),
        build_region("ZZZ", "Region Z", [[97, 98]], by_id),
    ]
    return Catalog(objects, regions)
