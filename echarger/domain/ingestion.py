"""
POI Ingestion Rules
===================

Turns raw OpenChargeMap POIs into ``ChargerCandidate`` proposals and
decides which of them are new.

Mapping
-------
* Connector codes 33 / 32 -> CCS, 2 -> CHAdeMO; a site with neither is
  assumed CCS (the corridor is HPC-only).
* Site power = max ``PowerKW`` across its connections.
* Only sites rated >= ``FAST_CHARGE_THRESHOLD_KW`` are proposed.
* POIs without a title or either coordinate are unusable and dropped here,
  so they never reach the store or the ranking engine.
* Titles and operator names are cut to the store's column widths.

Duplicate heuristic
-------------------
A candidate duplicates a known charger if EITHER
  * both coordinates differ by less than ``COORDINATE_TOLERANCE_DEG``, OR
  * one lowercased name contains the first ``NAME_PREFIX_LENGTH``
    characters of the other.
Providers round coordinates differently and names drift
("Fastned Breda A16" vs "Fastned Breda"), so neither check alone is
enough.  False positives and negatives are accepted.

Complexity: ``is_duplicate`` is O(E) for E known chargers and stops at the
first match; ``select_new_chargers`` is O(P x (E + P)) for P POIs.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Sequence

from .corridor import Segment
from .entities import ChargerCandidate, ChargerFootprint
from .enums import ConnectorType, OnRoute

FAST_CHARGE_THRESHOLD_KW = 150
COORDINATE_TOLERANCE_DEG = 0.005
NAME_PREFIX_LENGTH = 15

# Widths of the name / network columns; provider titles are unbounded
NAME_MAX_LENGTH = 200
NETWORK_MAX_LENGTH = 120

CONNECTOR_CODES: dict[int, ConnectorType] = {
    33: ConnectorType.CCS,  # CCS (Type 2)
    32: ConnectorType.CCS,  # CCS (Type 1)
    2: ConnectorType.CHADEMO,
}


class _Named(Protocol):
    name: str
    latitude: float
    longitude: float


# ── Duplicate detection ───────────────────────────────────────────────


def _names_overlap(a: str, b: str, prefix_length: int) -> bool:
    a, b = a.lower(), b.lower()
    if not a or not b:
        return False
    return a[:prefix_length] in b or b[:prefix_length] in a


def is_duplicate(
    candidate: _Named,
    existing: Iterable[_Named],
    *,
    tolerance_deg: float = COORDINATE_TOLERANCE_DEG,
    prefix_length: int = NAME_PREFIX_LENGTH,
) -> bool:
    for known in existing:
        if (
            abs(known.latitude - candidate.latitude) < tolerance_deg
            and abs(known.longitude - candidate.longitude) < tolerance_deg
        ):
            return True
        if _names_overlap(candidate.name, known.name, prefix_length):
            return True
    return False


# ── POI mapping ───────────────────────────────────────────────────────


def max_power_kw(connections: Sequence[Mapping[str, Any]]) -> int:
    return int(max((c.get("PowerKW") or 0 for c in connections), default=0))


def connector_types(
    connections: Sequence[Mapping[str, Any]],
) -> frozenset[ConnectorType]:
    found = {
        CONNECTOR_CODES[c["ConnectionTypeID"]]
        for c in connections
        if c.get("ConnectionTypeID") in CONNECTOR_CODES
    }
    return frozenset(found) or frozenset({ConnectorType.CCS})


def candidate_from_poi(
    poi: Mapping[str, Any],
    segment: Segment,
    on_route: OnRoute = OnRoute.UNKNOWN,
) -> Optional[ChargerCandidate]:
    """Map one POI; ``None`` when it lacks a title or coordinates."""
    address = poi.get("AddressInfo") or {}
    title = address.get("Title")
    lat, lng = address.get("Latitude"), address.get("Longitude")
    if not title or lat is None or lng is None:
        return None

    connections = poi.get("Connections") or []
    operator = poi.get("OperatorInfo") or {}
    return ChargerCandidate(
        name=title[:NAME_MAX_LENGTH],
        latitude=float(lat),
        longitude=float(lng),
        network=(operator.get("Title") or "Unknown")[:NETWORK_MAX_LENGTH],
        power_kw=max_power_kw(connections),
        connector_types=connector_types(connections),
        num_chargers=poi.get("NumberOfPoints") or 1,
        ocm_id=poi.get("ID"),
        country=segment.country,
        route_segment=segment.id,
        on_route=on_route,
    )


def select_new_chargers(
    pois: Iterable[Mapping[str, Any]],
    segment: Segment,
    known: Sequence[ChargerFootprint],
    *,
    min_power_kw: int = FAST_CHARGE_THRESHOLD_KW,
    classify: Callable[[float, float], OnRoute] | None = None,
    tolerance_deg: float = COORDINATE_TOLERANCE_DEG,
    prefix_length: int = NAME_PREFIX_LENGTH,
) -> list[ChargerCandidate]:
    """
    Return the fast, non-duplicate candidates among *pois*.

    Accepted candidates join the comparison set immediately, so the same
    site listed twice in one response is only proposed once.  *known* is
    not modified.
    """
    seen: list[_Named] = list(known)
    accepted: list[ChargerCandidate] = []
    for poi in pois:
        candidate = candidate_from_poi(poi, segment)
        if candidate is None or candidate.power_kw < min_power_kw:
            continue
        if is_duplicate(
            candidate, seen, tolerance_deg=tolerance_deg, prefix_length=prefix_length
        ):
            continue
        if classify is not None:
            candidate = replace(
                candidate, on_route=classify(candidate.latitude, candidate.longitude)
            )
        accepted.append(candidate)
        seen.append(candidate)
    return accepted
