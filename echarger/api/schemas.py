"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from echarger.config import settings
from echarger.domain.corridor import Segment
from echarger.domain.entities import (
    ChargerCandidate,
    ChargerRecord,
    ChargerWithDistance,
    Location,
)
from echarger.domain.enums import (
    Amenity,
    ConnectorType,
    HighwayProximity,
    OnRoute,
    RouteSegment,
)


# ── Requests ──────────────────────────────────────────────────────────


class SearchRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    label: Optional[str] = Field(None, max_length=120)
    range_km: float = Field(
        ..., ge=0, le=1500, description="Remaining range declared by the driver."
    )
    limit: int = Field(
        settings.default_result_limit, ge=0, le=settings.max_result_limit
    )
    on_route_only: bool = Field(
        False, description="Only consider chargers tagged on-route or nearby."
    )

    def location(self) -> Location:
        return Location(self.latitude, self.longitude, self.label)


class IngestRequest(BaseModel):
    segment: Optional[RouteSegment] = None
    dry_run: bool = True


# ── Responses ─────────────────────────────────────────────────────────


class ChargerResponse(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float
    network: str
    power_kw: int
    connector_types: list[ConnectorType]
    num_chargers: int
    highway_proximity: HighwayProximity
    route_segment: RouteSegment
    on_route: OnRoute
    amenities: list[Amenity] = []
    country: str = ""
    ocm_id: Optional[int] = None
    notes: Optional[str] = None
    reliability: Optional[float] = None
    status: Optional[str] = None

    @classmethod
    def from_record(cls, record: ChargerRecord) -> "ChargerResponse":
        return cls(
            id=record.id,
            name=record.name,
            latitude=record.latitude,
            longitude=record.longitude,
            network=record.network,
            power_kw=record.power_kw,
            connector_types=sorted(record.connector_types),
            num_chargers=record.num_chargers,
            highway_proximity=record.highway_proximity,
            route_segment=record.route_segment,
            on_route=record.on_route,
            amenities=sorted(record.amenities),
            country=record.country,
            ocm_id=record.ocm_id,
            notes=record.notes,
            reliability=record.reliability,
            status=record.status,
        )


class RankedChargerResponse(ChargerResponse):
    distance_km: float
    range_after_km: float

    @classmethod
    def from_ranked(cls, ranked: ChargerWithDistance) -> "RankedChargerResponse":
        return cls(
            **ChargerResponse.from_record(ranked.charger).model_dump(),
            distance_km=ranked.distance_km,
            range_after_km=ranked.range_after_km,
        )


class ChargerListResponse(BaseModel):
    chargers: list[ChargerResponse]
    count: int
    stale: bool = False


class LocationResponse(BaseModel):
    latitude: float
    longitude: float
    label: Optional[str] = None


class SearchResponse(BaseModel):
    location: LocationResponse
    range_km: float
    safety_margin_km: float
    candidates: int
    stale: bool = False
    results: list[RankedChargerResponse]


class BoundingBoxResponse(BaseModel):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


class SegmentResponse(BaseModel):
    id: RouteSegment
    name: str
    highway: str
    country: str
    bbox: BoundingBoxResponse

    @classmethod
    def from_segment(cls, segment: Segment) -> "SegmentResponse":
        box = segment.bbox
        return cls(
            id=segment.id,
            name=segment.name,
            highway=segment.highway,
            country=segment.country,
            bbox=BoundingBoxResponse(
                min_lat=box.min_lat,
                max_lat=box.max_lat,
                min_lng=box.min_lng,
                max_lng=box.max_lng,
            ),
        )


class CandidateResponse(BaseModel):
    name: str
    latitude: float
    longitude: float
    network: str
    power_kw: int
    route_segment: RouteSegment
    on_route: OnRoute
    ocm_id: Optional[int] = None

    @classmethod
    def from_candidate(cls, c: ChargerCandidate) -> "CandidateResponse":
        return cls(
            name=c.name,
            latitude=c.latitude,
            longitude=c.longitude,
            network=c.network,
            power_kw=c.power_kw,
            route_segment=c.route_segment,
            on_route=c.on_route,
            ocm_id=c.ocm_id,
        )


class IngestReportResponse(BaseModel):
    dry_run: bool
    segments: list[str]
    failed_segments: list[str]
    fetched: int
    inserted: int
    new: list[CandidateResponse]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
