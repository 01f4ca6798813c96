"""Bundled catalog: bright stars and a handful of constellation figures.

Positions are J2000 (RA in hours, Dec in degrees), magnitudes are V and the
color index is B-V. Identifiers are Hipparcos numbers.
"""

from __future__ import annotations

import math

from skyguide.catalog.builder import Catalog, build_region
from skyguide.models import CelestialObject

# (hip, ra_hours, dec_deg, mag, bv, proper name, constellation)
STARS = [
    (32349, 6.7525, -16.7161, -1.46, 0.00, "Sirius", "CMA"),
    (30438, 6.3992, -52.6957, -0.74, 0.15, "Canopus", "CAR"),
    (69673, 14.2610, 19.1825, -0.05, 1.24, "Arcturus", "BOO"),
    (91262, 18.6156, 38.7837, 0.03, 0.00, "Vega", "LYR"),
    (24608, 5.2782, 45.9980, 0.08, 0.80, "Capella", "AUR"),
    (24436, 5.2423, -8.2016, 0.18, -0.03, "Rigel", "ORI"),
    (37279, 7.6550, 5.2250, 0.40, 0.42, "Procyon", "CMI"),
    (27989, 5.9195, 7.4071, 0.45, 1.85, "Betelgeuse", "ORI"),
    (97649, 19.8464, 8.8683, 0.76, 0.22, "Altair", "AQL"),
    (60718, 12.4433, -63.0991, 0.77, -0.24, "Acrux", "CRU"),
    (21421, 4.5987, 16.5093, 0.87, 1.54, "Aldebaran", "TAU"),
    (65474, 13.4199, -11.1613, 0.98, -0.23, "Spica", "VIR"),
    (80763, 16.4901, -26.4320, 1.06, 1.83, "Antares", "SCO"),
    (37826, 7.7553, 28.0262, 1.16, 1.00, "Pollux", "GEM"),
    (113368, 22.9608, -29.6222, 1.17, 0.15, "Fomalhaut", "PSA"),
    (102098, 20.6905, 45.2803, 1.25, 0.09, "Deneb", "CYG"),
    (62434, 12.7954, -59.6888, 1.25, -0.24, "Mimosa", "CRU"),
    (49669, 10.1395, 11.9672, 1.36, -0.09, "Regulus", "LEO"),
    (61084, 12.5194, -57.1132, 1.59, 1.60, "Gacrux", "CRU"),
    (25336, 5.4188, 6.3497, 1.64, -0.22, "Bellatrix", "ORI"),
    (26311, 5.6036, -1.2019, 1.69, -0.18, "Alnilam", "ORI"),
    (26727, 5.6793, -1.9426, 1.74, -0.20, "Alnitak", "ORI"),
    (62956, 12.9005, 55.9598, 1.77, -0.02, "Alioth", "UMA"),
    (54061, 11.0621, 61.7510, 1.79, 1.07, "Dubhe", "UMA"),
    (67301, 13.7923, 49.3133, 1.85, -0.10, "Alkaid", "UMA"),
    (11767, 2.5303, 89.2641, 1.97, 0.64, "Polaris", "UMI"),
    (27366, 5.7959, -9.6696, 2.07, -0.17, "Saiph", "ORI"),
    (4427, 0.9451, 60.7167, 2.15, -0.05, "Navi", "CAS"),
    (100453, 20.3705, 40.2567, 2.23, 0.67, "Sadr", "CYG"),
    (3179, 0.6751, 56.5373, 2.24, 1.17, "Schedar", "CAS"),
    (25930, 5.5334, -0.2991, 2.25, -0.18, "Mintaka", "ORI"),
    (65378, 13.3988, 54.9254, 2.27, 0.02, "Mizar", "UMA"),
    (746, 0.1529, 59.1498, 2.28, 0.38, "Caph", "CAS"),
    (53910, 11.0307, 56.3824, 2.37, -0.02, "Merak", "UMA"),
    (58001, 11.8972, 53.6948, 2.44, 0.04, "Phecda", "UMA"),
    (102488, 20.7702, 33.9703, 2.48, 1.03, "Aljanah", "CYG"),
    (6686, 1.4302, 60.2353, 2.66, 0.13, "Ruchbah", "CAS"),
    (59747, 12.2524, -58.7489, 2.79, -0.23, "Imai", "CRU"),
    (97165, 19.7496, 45.1308, 2.86, -0.03, "Fawaris", "CYG"),
    (95947, 19.5120, 27.9597, 3.05, 1.09, "Albireo", "CYG"),
    (93194, 18.9824, 32.6896, 3.25, -0.05, "Sulafat", "LYR"),
    (59774, 12.2571, 57.0326, 3.31, 0.08, "Megrez", "UMA"),
    (8886, 1.9066, 63.6701, 3.35, -0.15, "Segin", "CAS"),
    (26207, 5.5856, 9.9342, 3.39, -0.16, "Meissa", "ORI"),
    (92420, 18.8347, 33.3627, 3.52, 0.00, "Sheliak", "LYR"),
    (92791, 18.9084, 36.8986, 4.30, 1.68, "", "LYR"),
    (91971, 18.7462, 37.6051, 4.34, 0.19, "", "LYR"),
]

# (abbreviation, name, polyline chains of hip ids)
CONSTELLATIONS = [
    ("ORI", "Orion", [
        [27989, 26207, 25336],
        [27989, 26727, 26311, 25930, 25336],
        [26727, 27366],
        [25930, 24436],
    ]),
    ("UMA", "Ursa Major", [
        [67301, 65378, 62956, 59774, 54061, 53910, 58001, 59774],
    ]),
    ("CAS", "Cassiopeia", [
        [746, 3179, 4427, 6686, 8886],
    ]),
    ("CYG", "Cygnus", [
        [102098, 100453, 95947],
        [97165, 100453, 102488],
    ]),
    ("LYR", "Lyra", [
        [91262, 91971, 92420, 93194, 92791, 91971],
    ]),
    ("CRU", "Crux", [
        [61084, 60718],
        [59747, 62434],
    ]),
]


def load_default_catalog(magnitude_limit: float = 5.0) -> Catalog:
    """Build the bundled catalog, brightest objects first."""
    objects = [
        CelestialObject(
            object_id=hip,
            ra=ra_hours * (math.pi / 12.0),
            dec=math.radians(dec_deg),
            magnitude=mag,
            color_index=bv,
            name=name,
            region=con,
        )
        for hip, ra_hours, dec_deg, mag, bv, name, con in STARS
        if mag <= magnitude_limit
    ]
    objects.sort(key=lambda o: o.magnitude)

    by_id = {obj.object_id: obj for obj in objects}
    regions = [
        build_region(code, name, chains, by_id)
        for code, name, chains in CONSTELLATIONS
    ]
    return Catalog(objects, regions)
