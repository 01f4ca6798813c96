"""Tests for catalog building, region centroids and the bundled star table."""

from __future__ import annotations

import math

import pytest

from skyguide.catalog.bright_stars import STARS, load_default_catalog
from skyguide.catalog.builder import (
    Catalog,
    CatalogError,
    build_region,
    chains_to_segments,
    compute_centroid,
)
from tests.conftest import make_object


class TestSegments:
    def test_chains_expand_to_pairs(self):
        assert chains_to_segments([[1, 2, 3], [4, 5]]) == [(1, 2), (2, 3), (4, 5)]

    def test_placeholder_ids_dropped(self):
        """Pairs touching a non-positive id are skipped."""
        assert chains_to_segments([[1, 0, 2]]) == []
        assert chains_to_segments([[1, 2, -1, 3, 4]]) == [(1, 2), (3, 4)]

    def test_single_point_chain(self):
        assert chains_to_segments([[7]]) == []


class TestCentroid:
    def test_dangling_reference_skipped(self):
        """Members missing from the catalog don't pull the centroid."""
        objects = {
            1: make_object(1, 10.0, 0.0),
            2: make_object(2, 20.0, 10.0),
        }
        ra, dec, count = compute_centroid([(1, 2), (2, 99)], objects)
        assert count == 2
        assert math.degrees(ra) == pytest.approx(15.0)
        assert math.degrees(dec) == pytest.approx(5.0)

    def test_shared_endpoint_counted_once(self):
        objects = {
            1: make_object(1, 0.0, 0.0),
            2: make_object(2, 30.0, 0.0),
            3: make_object(3, 60.0, 0.0),
        }
        # 2 appears in both segments
        ra, _, count = compute_centroid([(1, 2), (2, 3)], objects)
        assert count == 3
        assert math.degrees(ra) == pytest.approx(30.0)

    def test_no_members(self):
        assert compute_centroid([(97, 98)], {}) == (0.0, 0.0, 0)

    def test_region_member_ids_in_order(self):
        region = build_region("X", "", [[3, 1, 2, 3]], {})
        assert region.member_ids == [3, 1, 2]
        # Name falls back to the code
        assert region.name == "X"


class TestCatalog:
    def test_lookups(self, small_catalog):
        assert len(small_catalog) == 6
        assert small_catalog.index_of(4) == 3
        assert small_catalog.index_of(99) is None
        assert small_catalog.get_object(1).name == "Alpha"
        assert small_catalog.get_object(99) is None
        assert small_catalog.get_region("BBB").name == "Region B"
        assert small_catalog.get_region("NOPE") is None

    def test_objects_by_id(self, small_catalog):
        by_id = small_catalog.objects_by_id()
        assert list(by_id) == [1, 2, 3, 4, 5, 6]
        assert by_id[6].name == "Lonely"

    def test_centroids(self, small_catalog):
        aaa = small_catalog.get_region("AAA")
        assert math.degrees(aaa.centroid_ra) == pytest.approx(0.0, abs=1e-9)
        assert math.degrees(aaa.centroid_dec) == pytest.approx(4.0 / 3.0)

        bbb = small_catalog.get_region("BBB")
        assert math.degrees(bbb.centroid_ra) == pytest.approx(30.0)
        assert math.degrees(bbb.centroid_dec) == pytest.approx(0.0, abs=1e-9)

    def test_empty_region_not_matchable(self, small_catalog):
        """A region with no loaded members stays listed but is never matched."""
        assert [r.code for r in small_catalog.regions] == ["AAA", "BBB", "ZZZ"]
        assert [r.code for r in small_catalog.matchable_regions] == ["AAA", "BBB"]
        assert small_catalog.get_region("ZZZ") is not None

    def test_region_members(self, small_catalog):
        assert [o.object_id for o in small_catalog.region_members("BBB")] == [4, 5]
        assert small_catalog.region_members("ZZZ") == []
        assert small_catalog.region_members("NOPE") == []

    def test_duplicate_object_id(self):
        objects = [make_object(1, 0.0, 0.0), make_object(1, 5.0, 5.0)]
        with pytest.raises(CatalogError):
            Catalog(objects)

    def test_duplicate_region_code(self):
        objects = [make_object(1, 0.0, 0.0)]
        by_id = {1: objects[0]}
        regions = [
            build_region("AAA", "One", [[1, 1]], by_id),
            build_region("AAA", "Two", [[1, 1]], by_id),
        ]
        with pytest.raises(CatalogError):
            Catalog(objects, regions)

    def test_magnitude_limit(self, small_catalog):
        """Dropping dim members moves centroids onto the remaining stars."""
        bright = small_catalog.with_magnitude_limit(2.0)

        assert [o.object_id for o in bright.objects] == [1, 2, 4, 6]
        aaa = bright.get_region("AAA")
        assert math.degrees(aaa.centroid_dec) == pytest.approx(0.0, abs=1e-9)
        bbb = bright.get_region("BBB")
        assert math.degrees(bbb.centroid_ra) == pytest.approx(28.0)
        # Original untouched
        assert len(small_catalog) == 6

    def test_magnitude_limit_empties_regions(self, small_catalog):
        dark = small_catalog.with_magnitude_limit(-5.0)
        assert len(dark) == 0
        assert len(dark.regions) == 3
        assert dark.matchable_regions == ()


class TestDefaultCatalog:
    def test_brightest_first(self):
        catalog = load_default_catalog()
        mags = [o.magnitude for o in catalog.objects]
        assert mags == sorted(mags)
        assert catalog.objects[0].name == "Sirius"

    def test_magnitude_limit_applied(self):
        catalog = load_default_catalog(magnitude_limit=1.0)
        assert all(o.magnitude <= 1.0 for o in catalog.objects)
        assert len(catalog) == len([s for s in STARS if s[3] <= 1.0])

    def test_units_are_radians(self):
        catalog = load_default_catalog()
        vega = catalog.get_object(91262)
        assert vega.ra == pytest.approx(18.6156 * math.pi / 12.0)
        assert math.degrees(vega.dec) == pytest.approx(38.7837)

    def test_all_figures_matchable(self):
        catalog = load_default_catalog()
        codes = {r.code for r in catalog.matchable_regions}
        assert codes == {"ORI", "UMA", "CAS", "CYG", "LYR", "CRU"}

    def test_orion_centroid(self):
        orion = load_default_catalog().get_region("ORI")
        assert orion.centroid_ra * 12.0 / math.pi == pytest.approx(5.6, abs=0.1)
        assert math.degrees(orion.centroid_dec) == pytest.approx(0.3, abs=1.0)
        assert len(orion.member_ids) == 8
