"""
The Rotterdam – Santa Pola corridor.

Segments
--------
Nine named stretches, each with a bounding box used to query the POI
provider.  Boxes overlap slightly at segment borders; a point belongs to
the first segment (north to south) whose box contains it.

On-route tagging (H3 corridor buffer)
-------------------------------------
1. The corridor is a polyline of highway waypoints.
2. Each leg is sampled every half hexagon edge and every sample is mapped
   to an H3 cell, giving a contiguous chain of "corridor cells".
3. The chain is dilated with ``grid_disk``: ``on_route_rings`` rings make
   the *yes* buffer, ``nearby_rings`` rings make the *nearby* buffer.
4. A charger is tagged by a set lookup of its own cell.

At resolution 6 (edge ~3.7 km) the defaults give roughly a 7 km *yes*
band and a 25 km *nearby* band either side of the line.

Complexity: building the buffers is O(L x k²) for L corridor cells and k
rings and happens once per parameter set; tagging is O(1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

import h3

from .distance import haversine_km
from .entities import BoundingBox, ChargerRecord, Location
from .enums import ON_ROUTE_TAGS, OnRoute, RouteSegment


@dataclass(frozen=True)
class Segment:
    id: RouteSegment
    name: str
    highway: str
    country: str
    bbox: BoundingBox


SEGMENTS: tuple[Segment, ...] = (
    Segment(RouteSegment.NL_BE, "Rotterdam - Belgium", "A16 / E19", "NL",
            BoundingBox(51.4, 52.0, 4.0, 5.0)),
    Segment(RouteSegment.BE_FR, "Belgium - France", "E19 / A2", "BE",
            BoundingBox(49.5, 51.4, 3.0, 5.0)),
    Segment(RouteSegment.FR_PARIS, "France - Paris", "A1 / A104", "FR",
            BoundingBox(48.5, 49.5, 2.0, 4.5)),
    Segment(RouteSegment.PARIS_ORLEANS, "Paris - Orleans", "A10", "FR",
            BoundingBox(47.5, 48.5, 1.5, 3.0)),
    Segment(RouteSegment.ORLEANS_CLERMONT, "Orleans - Clermont", "A71", "FR",
            BoundingBox(46.0, 47.5, 2.0, 3.5)),
    Segment(RouteSegment.CLERMONT_MILLAU, "Clermont - Millau", "A75", "FR",
            BoundingBox(44.0, 46.0, 2.5, 3.5)),
    Segment(RouteSegment.MILLAU_ES, "Millau - Spain Border", "A75 / A9", "FR",
            BoundingBox(42.3, 44.0, 2.5, 3.5)),
    Segment(RouteSegment.ES_VALENCIA, "Spain Border - Valencia", "AP-7 / A-7", "ES",
            BoundingBox(39.0, 42.5, -0.5, 3.0)),
    Segment(RouteSegment.VALENCIA_SANTAPOLA, "Valencia - Santa Pola", "A-7", "ES",
            BoundingBox(38.0, 39.5, -1.0, 0.5)),
)

SEGMENTS_BY_ID: dict[RouteSegment, Segment] = {s.id: s for s in SEGMENTS}


# Quick-pick cities offered to clients, north to south.
PRESET_LOCATIONS: tuple[Location, ...] = (
    Location(51.9244, 4.4777, "Rotterdam"),
    Location(51.5719, 4.7683, "Breda"),
    Location(51.2194, 4.4025, "Antwerp"),
    Location(50.8503, 4.3517, "Brussels"),
    Location(48.8566, 2.3522, "Paris"),
    Location(47.9029, 1.9092, "Orleans"),
    Location(45.7772, 3.0870, "Clermont-Ferrand"),
    Location(44.0969, 3.0833, "Millau"),
    Location(43.6108, 3.8767, "Montpellier"),
    Location(42.6887, 2.8948, "Perpignan"),
    Location(41.3851, 2.1734, "Barcelona"),
    Location(39.4699, -0.3763, "Valencia"),
    Location(38.3452, -0.4815, "Alicante"),
    Location(38.1911, -0.5566, "Santa Pola"),
)

# Highway waypoints: A16/E19 → A2/A1 → A10 → A71 → A75 → A9 → AP-7 → A-7
CORRIDOR_WAYPOINTS: tuple[tuple[float, float], ...] = (
    (51.9244, 4.4777),   # Rotterdam
    (51.5719, 4.7683),   # Breda
    (51.2194, 4.4025),   # Antwerp
    (50.8503, 4.3517),   # Brussels
    (50.4542, 3.9523),   # Mons
    (50.3570, 3.5235),   # Valenciennes
    (50.1760, 3.2356),   # Cambrai
    (49.9320, 2.9363),   # Péronne
    (49.2069, 2.5866),   # Senlis
    (48.8566, 2.3522),   # Paris
    (48.4347, 2.1617),   # Étampes
    (47.9029, 1.9092),   # Orléans
    (47.2220, 2.0685),   # Vierzon
    (47.0810, 2.3988),   # Bourges
    (46.3401, 2.6025),   # Montluçon
    (45.7772, 3.0870),   # Clermont-Ferrand
    (45.5441, 3.2490),   # Issoire
    (45.0340, 3.0930),   # Saint-Flour
    (44.0969, 3.0833),   # Millau
    (43.7317, 3.3194),   # Lodève
    (43.3442, 3.2158),   # Béziers
    (43.1843, 3.0040),   # Narbonne
    (42.6887, 2.8948),   # Perpignan
    (42.4194, 2.8756),   # La Jonquera
    (41.9794, 2.8214),   # Girona
    (41.3851, 2.1734),   # Barcelona
    (41.1189, 1.2445),   # Tarragona
    (39.9864, -0.0513),  # Castellón
    (39.4699, -0.3763),  # Valencia
    (38.3452, -0.4815),  # Alicante
    (38.1911, -0.5566),  # Santa Pola
)


# ── Segments ──────────────────────────────────────────────────────────


def segment_for_point(lat: float, lng: float) -> RouteSegment:
    for segment in SEGMENTS:
        if segment.bbox.contains(lat, lng):
            return segment.id
    return RouteSegment.UNKNOWN


# ── On-route tagging ──────────────────────────────────────────────────


def _corridor_cells(
    waypoints: Sequence[tuple[float, float]], resolution: int
) -> set[str]:
    step_km = h3.average_hexagon_edge_length(resolution, unit="km") / 2
    cells: set[str] = set()
    for (lat1, lng1), (lat2, lng2) in zip(waypoints, waypoints[1:]):
        steps = max(1, math.ceil(haversine_km(lat1, lng1, lat2, lng2) / step_km))
        for i in range(steps + 1):
            t = i / steps
            cells.add(
                h3.latlng_to_cell(
                    lat1 + (lat2 - lat1) * t, lng1 + (lng2 - lng1) * t, resolution
                )
            )
    return cells


def _dilate(cells: Iterable[str], rings: int) -> frozenset[str]:
    buffered: set[str] = set()
    for cell in cells:
        buffered.update(h3.grid_disk(cell, rings))
    return frozenset(buffered)


@lru_cache(maxsize=8)
def corridor_buffers(
    resolution: int = 6, on_route_rings: int = 1, nearby_rings: int = 3
) -> tuple[frozenset[str], frozenset[str]]:
    """Return ``(on_route_cells, nearby_cells)`` for the corridor."""
    line = _corridor_cells(CORRIDOR_WAYPOINTS, resolution)
    return _dilate(line, on_route_rings), _dilate(line, nearby_rings)


def classify_on_route(
    lat: float,
    lng: float,
    resolution: int = 6,
    on_route_rings: int = 1,
    nearby_rings: int = 3,
) -> OnRoute:
    """Tag a point as on the corridor, near it, or off it."""
    on_route, nearby = corridor_buffers(resolution, on_route_rings, nearby_rings)
    cell = h3.latlng_to_cell(lat, lng, resolution)
    if cell in on_route:
        return OnRoute.YES
    if cell in nearby:
        return OnRoute.NEARBY
    return OnRoute.NO


def filter_on_route(chargers: Iterable[ChargerRecord]) -> list[ChargerRecord]:
    """Keep chargers tagged ``yes`` or ``nearby``."""
    return [c for c in chargers if c.on_route in ON_ROUTE_TAGS]
