"""
Domain value objects.

All of them are frozen dataclasses: a ``ChargerRecord`` is an immutable
fact about a site, and collections of them are passed around as plain
sequences.  The ranking engine never mutates its input; it builds new
``ChargerWithDistance`` wrappers per request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import (
    Amenity,
    ConnectorType,
    HighwayProximity,
    OnRoute,
    RouteSegment,
)


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    label: Optional[str] = None


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


@dataclass(frozen=True)
class ChargerFootprint:
    """Name and position of a stored charger; all the dedup check needs."""

    name: str
    latitude: float
    longitude: float


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ChargerRecord:
    id: str
    name: str
    latitude: float
    longitude: float
    network: str = "Unknown"
    power_kw: int = 0
    connector_types: frozenset[ConnectorType] = frozenset({ConnectorType.CCS})
    num_chargers: int = 1
    highway_proximity: HighwayProximity = HighwayProximity.UNKNOWN
    route_segment: RouteSegment = RouteSegment.UNKNOWN
    on_route: OnRoute = OnRoute.UNKNOWN
    amenities: frozenset[Amenity] = field(default_factory=frozenset)
    country: str = ""
    ocm_id: Optional[int] = None
    notes: Optional[str] = None
    reliability: Optional[float] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class ChargerWithDistance:
    """A charger annotated for one search; never persisted."""

    charger: ChargerRecord
    distance_km: float
    range_after_km: float


@dataclass(frozen=True)
class ChargerCandidate:
    """A charger proposed by ingestion, not yet stored."""

    name: str
    latitude: float
    longitude: float
    network: str
    power_kw: int
    connector_types: frozenset[ConnectorType]
    num_chargers: int
    ocm_id: Optional[int]
    country: str
    route_segment: RouteSegment
    on_route: OnRoute = OnRoute.UNKNOWN

    def footprint(self) -> ChargerFootprint:
        return ChargerFootprint(self.name, self.latitude, self.longitude)
