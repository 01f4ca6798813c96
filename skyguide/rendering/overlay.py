"""Vertex data for an external renderer: star points, figure lines, info text."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from skyguide.catalog.builder import Catalog
from skyguide.models import ComputedPosition
from skyguide.processing import astro

# x, y, z, r, g, b, a
VERTEX_SIZE = 7

LINE_COLOR = (0.3, 0.5, 0.8)
LINE_COLOR_HIGHLIGHT = (0.4, 0.85, 1.0)
LINE_ALPHA = 0.35
LINE_ALPHA_HIGHLIGHT = 0.9

MAX_NOTABLE_NAMES = 4


def build_star_buffer(positions: Sequence[ComputedPosition]) -> np.ndarray:
    """Interleaved star vertices; objects below the horizon get alpha 0."""
    buf = np.zeros((len(positions), VERTEX_SIZE), dtype=np.float32)
    if not positions:
        return buf

    buf[:, 0] = [p.x for p in positions]
    buf[:, 1] = [p.y for p in positions]
    buf[:, 2] = [p.z for p in positions]

    mags = np.array([p.magnitude for p in positions])
    bvs = np.array([p.color_index for p in positions])
    r, g, b = astro.color_index_to_rgb(bvs)
    buf[:, 3] = r
    buf[:, 4] = g
    buf[:, 5] = b
    buf[:, 6] = np.where(buf[:, 1] >= 0.0, astro.magnitude_to_alpha(mags), 0.0)
    return buf


def build_line_buffer(catalog: Catalog, positions: Sequence[ComputedPosition],
                      highlighted: str = "") -> np.ndarray:
    """Two vertices per figure segment, for every region in catalog order.

    A segment with an endpoint missing from the catalog is all zeros; one
    with an endpoint below the horizon keeps its geometry with alpha 0.
    """
    total = sum(len(r.segments) for r in catalog.regions)
    buf = np.zeros((2 * total, VERTEX_SIZE), dtype=np.float32)
    if not positions:
        return buf

    row = 0
    for region in catalog.regions:
        lit = region.code == highlighted
        color = LINE_COLOR_HIGHLIGHT if lit else LINE_COLOR
        for a, b in region.segments:
            ia = catalog.index_of(a)
            ib = catalog.index_of(b)
            if ia is not None and ib is not None:
                pa = positions[ia]
                pb = positions[ib]
                visible = pa.y >= 0.0 and pb.y >= 0.0
                alpha = (LINE_ALPHA_HIGHLIGHT if lit else LINE_ALPHA) if visible else 0.0
                buf[row] = (pa.x, pa.y, pa.z, *color, alpha)
                buf[row + 1] = (pb.x, pb.y, pb.z, *color, alpha)
            row += 2
    return buf


def describe_region(catalog: Catalog, code: str) -> str:
    """Info panel text for a region, or '' for an unknown code."""
    region = catalog.get_region(code)
    if region is None:
        return ""

    members = catalog.region_members(code)
    lines = [f"{region.name} ({region.code})", f"{len(members)} stars"]
    names = [obj.name for obj in members if obj.name]
    if names:
        lines.append("Notable: " + ", ".join(names[:MAX_NOTABLE_NAMES]))
    return "\n".join(lines)
