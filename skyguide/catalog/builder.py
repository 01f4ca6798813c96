"""In-memory catalog table: objects, region figures and their centroids."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace

from skyguide.models import CelestialObject, Region

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised at load time for a catalog that cannot be indexed."""


def chains_to_segments(chains: Iterable[Sequence[int]]) -> list[tuple[int, int]]:
    """Expand polyline chains into line segments.

    ``[[a, b, c], [d, e]]`` becomes ``[(a, b), (b, c), (d, e)]``. Pairs with a
    non-positive id (placeholder entries) are dropped.
    """
    segments = []
    for chain in chains:
        for a, b in zip(chain, chain[1:]):
            if a > 0 and b > 0:
                segments.append((int(a), int(b)))
    return segments


def compute_centroid(segments: Iterable[tuple[int, int]],
                     objects_by_id: Mapping[int, CelestialObject]) -> tuple[float, float, int]:
    """Mean (ra, dec) of the distinct segment endpoints present in the catalog.

    Returns ``(ra, dec, count)``; ``(0.0, 0.0, 0)`` when no member is present.
    """
    seen: set[int] = set()
    sum_ra = sum_dec = 0.0
    count = 0
    for pair in segments:
        for oid in pair:
            if oid in seen:
                continue
            seen.add(oid)
            obj = objects_by_id.get(oid)
            if obj is None:
                continue
            sum_ra += obj.ra
            sum_dec += obj.dec
            count += 1
    if count == 0:
        return 0.0, 0.0, 0
    return sum_ra / count, sum_dec / count, count


def build_region(code: str, name: str, lines: Iterable[Sequence[int]],
                 objects_by_id: Mapping[int, CelestialObject]) -> Region:
    """Build a Region from polyline chains and precompute its centroid."""
    segments = chains_to_segments(lines)
    ra, dec, count = compute_centroid(segments, objects_by_id)
    if count == 0:
        logger.warning("Region %s has no member objects in the catalog", code)
    return Region(code=code, name=name or code, segments=tuple(segments),
                  centroid_ra=ra, centroid_dec=dec)


class Catalog:
    """Read-only object and region tables with id/code lookups."""

    def __init__(self, objects: Sequence[CelestialObject],
                 regions: Sequence[Region] = ()):
        self._objects = tuple(objects)
        self._regions = tuple(regions)

        self._index: dict[int, int] = {}
        for i, obj in enumerate(self._objects):
            if obj.object_id in self._index:
                raise CatalogError(f"Duplicate object id {obj.object_id}")
            self._index[obj.object_id] = i

        self._by_code: dict[str, Region] = {}
        for region in self._regions:
            if region.code in self._by_code:
                raise CatalogError(f"Duplicate region code {region.code!r}")
            self._by_code[region.code] = region

        # Regions whose figure references no loaded object are kept for
        # display lookups but never take part in gaze matching.
        self._matchable = tuple(
            r for r in self._regions
            if any(oid in self._index for oid in r.member_ids)
        )
        skipped = len(self._regions) - len(self._matchable)
        logger.info("Catalog loaded: %d objects, %d regions (%d without members)",
                    len(self._objects), len(self._regions), skipped)

    def __len__(self) -> int:
        return len(self._objects)

    @property
    def objects(self) -> tuple[CelestialObject, ...]:
        return self._objects

    @property
    def regions(self) -> tuple[Region, ...]:
        return self._regions

    @property
    def matchable_regions(self) -> tuple[Region, ...]:
        return self._matchable

    def index_of(self, object_id: int) -> int | None:
        return self._index.get(object_id)

    def get_object(self, object_id: int) -> CelestialObject | None:
        idx = self._index.get(object_id)
        return None if idx is None else self._objects[idx]

    def get_region(self, code: str) -> Region | None:
        return self._by_code.get(code)

    def objects_by_id(self) -> dict[int, CelestialObject]:
        return {obj.object_id: obj for obj in self._objects}

    def region_members(self, code: str) -> list[CelestialObject]:
        """Distinct member objects present in the catalog, in segment order."""
        region = self._by_code.get(code)
        if region is None:
            return []
        members = []
        for oid in region.member_ids:
            obj = self.get_object(oid)
            if obj is not None:
                members.append(obj)
        return members

    def with_magnitude_limit(self, limit: float) -> Catalog:
        """Return a catalog without objects dimmer than ``limit``.

        Region centroids are recomputed from the remaining members; references
        to dropped objects become dangling and are skipped by every consumer.
        """
        by_id = {oid: obj for oid, obj in self.objects_by_id().items()
                 if obj.magnitude <= limit}
        kept = list(by_id.values())
        regions = []
        for region in self._regions:
            ra, dec, _ = compute_centroid(region.segments, by_id)
            regions.append(replace(region, centroid_ra=ra, centroid_dec=dec))
        return Catalog(kept, regions)
