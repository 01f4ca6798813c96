"""Tests for the catalog position engine."""

from __future__ import annotations

import math
from datetime import timedelta

import pytest

from skyguide.catalog.builder import Catalog
from skyguide.processing import astro
from skyguide.processing.engine import PositionEngine
from skyguide.processing.observer import ObserverTracker
from tests.conftest import make_object


def make_engine(catalog, observer_config, engine_config):
    tracker = ObserverTracker(observer_config)
    return PositionEngine(catalog, tracker, engine_config), tracker


@pytest.fixture
def equator_catalog() -> Catalog:
    """One object on the equinox, one opposite it, one at dec +40."""
    return Catalog([
        make_object(10, 0.0, 0.0, name="Equinox"),
        make_object(11, 180.0, 0.0),
        make_object(12, 0.0, 40.0),
    ])


class TestPositionEngine:
    def test_noop_before_first_fix(self, small_catalog, observer_config, engine_config):
        engine, _ = make_engine(small_catalog, observer_config, engine_config)
        assert engine.recompute() is False
        assert not engine.has_positions
        assert engine.observer is None
        assert all(p.x == p.y == p.z == 0.0 for p in engine.positions)

    def test_output_matches_catalog(self, small_catalog, observer_config, engine_config,
                                    gmst_zero_instant):
        engine, tracker = make_engine(small_catalog, observer_config, engine_config)
        tracker.update_position(20.0, 0.0)
        assert engine.recompute(gmst_zero_instant)

        positions = engine.positions
        assert len(positions) == len(small_catalog)
        for obj, pos in zip(small_catalog.objects, positions):
            assert pos.object_id == obj.object_id
            assert pos.magnitude == obj.magnitude
            assert pos.name == obj.name
            length = math.sqrt(pos.x ** 2 + pos.y ** 2 + pos.z ** 2)
            assert length == pytest.approx(engine.radius)

    def test_zenith_at_equator(self, equator_catalog, observer_config, engine_config,
                               gmst_zero_instant):
        """RA 0 / Dec 0 transits the zenith for an observer at 0N 0E when GMST is 0."""
        engine, tracker = make_engine(equator_catalog, observer_config, engine_config)
        tracker.update_position(0.0, 0.0)
        engine.recompute(gmst_zero_instant)

        pos = engine.positions[0]
        assert pos.y == pytest.approx(500.0, abs=1e-3)
        assert engine.altitudes[0] == pytest.approx(math.pi / 2, abs=1e-6)

    def test_meridian_at_mid_latitude(self, equator_catalog, observer_config, engine_config,
                                      gmst_zero_instant):
        """At 30N the same object culminates 60 degrees up, due south."""
        engine, tracker = make_engine(equator_catalog, observer_config, engine_config)
        tracker.update_position(30.0, 0.0)
        engine.recompute(gmst_zero_instant)

        assert engine.altitudes[0] == pytest.approx(math.radians(60.0), abs=1e-6)
        assert engine.azimuths[0] == pytest.approx(math.pi, abs=1e-6)
        pos = engine.positions[0]
        assert pos.x == pytest.approx(0.0, abs=1e-3)
        assert pos.y == pytest.approx(500.0 * math.sin(math.radians(60.0)))
        # +Z points south
        assert pos.z == pytest.approx(250.0)

    def test_below_horizon_kept(self, equator_catalog, observer_config, engine_config,
                                gmst_zero_instant):
        engine, tracker = make_engine(equator_catalog, observer_config, engine_config)
        tracker.update_position(30.0, 0.0)
        engine.recompute(gmst_zero_instant)

        below = engine.positions[1]
        assert below.object_id == 11
        assert below.y < 0
        assert engine.altitudes[1] == pytest.approx(math.radians(-60.0), abs=1e-6)

    def test_object_at_latitude_declination_hits_zenith(self, equator_catalog,
                                                        observer_config, engine_config,
                                                        gmst_zero_instant):
        engine, tracker = make_engine(equator_catalog, observer_config, engine_config)
        tracker.update_position(40.0, 0.0)
        engine.recompute(gmst_zero_instant)
        assert engine.positions[2].y == pytest.approx(500.0, abs=1e-2)

    def test_indices_stable_across_recomputes(self, small_catalog, observer_config,
                                              engine_config, gmst_zero_instant):
        """Buffers are rewritten in place; index i always means catalog.objects[i]."""
        engine, tracker = make_engine(small_catalog, observer_config, engine_config)
        tracker.update_position(45.0, 10.0)
        engine.recompute(gmst_zero_instant)
        first = engine.positions
        first_y = [p.y for p in first]

        engine.recompute(gmst_zero_instant + timedelta(hours=3))
        second = engine.positions
        assert all(a is b for a, b in zip(first, second))
        assert [p.object_id for p in second] == [o.object_id for o in small_catalog.objects]
        assert [p.y for p in second] != first_y
        assert engine.index_of(4) == 3

    def test_region_positions(self, small_catalog, observer_config, engine_config,
                              gmst_zero_instant):
        """Only matchable regions get horizontal centroids."""
        engine, tracker = make_engine(small_catalog, observer_config, engine_config)
        tracker.update_position(0.0, 0.0)
        engine.recompute(gmst_zero_instant)

        regions = engine.region_positions
        assert [r.code for r in regions] == ["AAA", "BBB"]
        # AAA's centroid sits just north of the zenith
        assert regions[0].altitude == pytest.approx(math.radians(90.0 - 4.0 / 3.0), abs=1e-6)
        # BBB is 30 degrees east of the meridian on the equator
        assert regions[1].altitude == pytest.approx(math.radians(60.0), abs=1e-6)
        assert regions[1].azimuth == pytest.approx(math.pi / 2, abs=1e-6)

    def test_snapshots_are_copies(self, small_catalog, observer_config, engine_config,
                                  gmst_zero_instant):
        engine, tracker = make_engine(small_catalog, observer_config, engine_config)
        tracker.update_position(0.0, 0.0)
        engine.recompute(gmst_zero_instant)

        snap = engine.snapshot()
        snap[0].y = -1.0
        assert engine.positions[0].y != -1.0

        regions = engine.region_snapshot()
        regions[0].altitude = 5.0
        assert engine.region_positions[0].altitude != 5.0

    def test_observer_recorded(self, small_catalog, observer_config, engine_config,
                               gmst_zero_instant):
        engine, tracker = make_engine(small_catalog, observer_config, engine_config)
        tracker.update_position(12.0, 0.0)
        engine.recompute(gmst_zero_instant)
        assert engine.has_positions
        assert engine.observer.latitude == pytest.approx(math.radians(12.0))

    def test_position_update_during_recompute(self, equator_catalog, observer_config,
                                              engine_config, gmst_zero_instant,
                                              monkeypatch):
        """A fix landing mid-recompute never pairs a new longitude with an old LST."""
        engine, tracker = make_engine(equator_catalog, observer_config, engine_config)
        tracker.update_position(0.0, 0.0)

        original = astro.sidereal_time

        def sidereal_then_move(instant):
            value = original(instant)
            tracker.update_position(0.0, 90.0)
            return value

        monkeypatch.setattr(astro, "sidereal_time", sidereal_then_move)
        engine.recompute(gmst_zero_instant)

        observer = engine.observer
        assert observer.longitude == pytest.approx(math.pi / 2)
        diff = abs(observer.lst - math.pi / 2) % astro.TWO_PI
        assert min(diff, astro.TWO_PI - diff) < 1e-6
        # RA 0 / Dec 0 is then six hours west of the meridian, on the horizon
        assert engine.altitudes[0] == pytest.approx(0.0, abs=1e-6)
        assert engine.azimuths[0] == pytest.approx(1.5 * math.pi, abs=1e-6)
