"""
Reachable-Charger Ranking
=========================

Given the charger catalog, the driver's position and declared remaining
range, return the closest chargers that can be reached with a safety
buffer to spare.

Admission rule (per charger)
----------------------------
  distance  <=  remaining_range - SAFETY_MARGIN_KM      and
  remaining_range - distance  >=  0

The margin compensates for straight-line distance understating the real
driving distance; without it a driver could be sent to a charger that is
out of reach by road.

Numeric contract
----------------
Admission and ordering use the **unrounded** haversine distance.  Only
the returned ``distance_km`` / ``range_after_km`` are rounded, to one
decimal with round-half-up, so a charger can never flip in or out of the
result because of rounding.

Ordering is ascending by distance; ``sorted`` is stable, so equal
distances keep input order.  Duplicate positions are all retained.

"No reachable charger" is a normal, empty result; nothing here raises.

Complexity: O(N log N) for N chargers.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .corridor import filter_on_route
from .distance import haversine_km
from .entities import ChargerRecord, ChargerWithDistance, Location

SAFETY_MARGIN_KM = 10.0
DEFAULT_RESULT_LIMIT = 3

_ONE_DECIMAL = Decimal("0.1")


def round_km(value: float) -> float:
    """Round to one decimal, halves away from zero (``2.25 -> 2.3``)."""
    return float(Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def rank_reachable(
    chargers: Sequence[ChargerRecord],
    location: Location,
    remaining_range_km: float,
    result_limit: int = DEFAULT_RESULT_LIMIT,
    *,
    on_route_only: bool = False,
    safety_margin_km: float = SAFETY_MARGIN_KM,
) -> list[ChargerWithDistance]:
    """Return up to *result_limit* reachable chargers, closest first."""
    if result_limit <= 0 or remaining_range_km <= safety_margin_km:
        return []

    pool = filter_on_route(chargers) if on_route_only else chargers
    max_distance = remaining_range_km - safety_margin_km

    admitted: list[tuple[float, float, ChargerRecord]] = []
    for charger in pool:
        distance = haversine_km(
            location.latitude, location.longitude,
            charger.latitude, charger.longitude,
        )
        range_after = remaining_range_km - distance
        if distance <= max_distance and range_after >= 0:
            admitted.append((distance, range_after, charger))

    admitted.sort(key=lambda item: item[0])

    return [
        ChargerWithDistance(
            charger=charger,
            distance_km=round_km(distance),
            range_after_km=round_km(range_after),
        )
        for distance, range_after, charger in admitted[:result_limit]
    ]
