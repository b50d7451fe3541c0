"""
Repository Pattern -- abstracts the charger table so domain logic stays
DB-agnostic.

The repository receives an ``AsyncSession`` (unit-of-work) and hands out
immutable ``ChargerRecord`` values, never ORM rows.  Rows without a name or
either coordinate are skipped on read; the ranking engine must never see
them.

The mapped class is injectable so the same queries run against the
SQLite mirror model used by the tests.
"""

from __future__ import annotations

from typing import AsyncIterator, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ChargerModel
from echarger.domain.entities import ChargerCandidate, ChargerFootprint, ChargerRecord
from echarger.domain.enums import (
    Amenity,
    ConnectorType,
    HighwayProximity,
    OnRoute,
    RouteSegment,
    join_set,
)

IMPORT_NOTE = "Auto-imported from OpenChargeMap. Needs verification."
IMPORT_STATUS = "untested"


def record_from_row(row) -> Optional[ChargerRecord]:
    """Map a row to a record, or ``None`` if it is unusable."""
    if not row.name or row.latitude is None or row.longitude is None:
        return None
    return ChargerRecord(
        id=str(row.id),
        name=row.name,
        latitude=float(row.latitude),
        longitude=float(row.longitude),
        network=row.network or "Unknown",
        power_kw=row.power_kw or 0,
        connector_types=(
            ConnectorType.parse_set(row.connector_types)
            or frozenset({ConnectorType.CCS})
        ),
        num_chargers=row.num_chargers or 1,
        highway_proximity=HighwayProximity(row.highway_proximity),
        route_segment=RouteSegment(row.route_segment),
        on_route=OnRoute(row.on_route),
        amenities=Amenity.parse_set(row.amenities),
        country=row.country or "",
        ocm_id=row.ocm_id,
        notes=row.notes,
        reliability=row.reliability,
        status=row.status,
    )


def ewkt_point(lat: float, lng: float) -> str:
    return f"SRID=4326;POINT({lng} {lat})"


class ChargerRepository:
    def __init__(self, session: AsyncSession, model=ChargerModel):
        self.session = session
        self.model = model

    async def iter_pages(self, page_size: int = 100) -> AsyncIterator[list]:
        """Yield rows in id order, *page_size* at a time (keyset paging)."""
        last_id = 0
        while True:
            result = await self.session.execute(
                select(self.model)
                .where(self.model.id > last_id)
                .order_by(self.model.id)
                .limit(page_size)
            )
            page = list(result.scalars().all())
            if not page:
                return
            yield page
            if len(page) < page_size:
                return
            last_id = page[-1].id

    async def fetch_all(self, page_size: int = 100) -> list[ChargerRecord]:
        records: list[ChargerRecord] = []
        async for page in self.iter_pages(page_size):
            for row in page:
                record = record_from_row(row)
                if record is not None:
                    records.append(record)
        return records

    async def get_by_id(self, charger_id: int) -> Optional[ChargerRecord]:
        row = await self.session.get(self.model, charger_id)
        return record_from_row(row) if row is not None else None

    async def fetch_footprints(self) -> list[ChargerFootprint]:
        """Name and position of every positioned row (unnamed rows too)."""
        result = await self.session.execute(
            select(self.model.name, self.model.latitude, self.model.longitude)
            .where(self.model.latitude.is_not(None))
            .where(self.model.longitude.is_not(None))
        )
        return [
            ChargerFootprint(name or "", lat, lng) for name, lat, lng in result.all()
        ]

    async def existing_ocm_ids(self) -> set[int]:
        result = await self.session.execute(
            select(self.model.ocm_id).where(self.model.ocm_id.is_not(None))
        )
        return set(result.scalars().all())

    async def add_candidates(
        self, candidates: Iterable[ChargerCandidate], batch_size: int = 10
    ) -> int:
        """Insert candidates in batches with import defaults.  Returns the count."""
        known_ids = await self.existing_ocm_ids()
        pending = []
        for c in candidates:
            if c.ocm_id is not None:
                if c.ocm_id in known_ids:
                    continue
                known_ids.add(c.ocm_id)
            pending.append(c)

        for start in range(0, len(pending), batch_size):
            self.session.add_all(
                self.model(
                    name=c.name,
                    latitude=c.latitude,
                    longitude=c.longitude,
                    location=ewkt_point(c.latitude, c.longitude),
                    network=c.network,
                    power_kw=c.power_kw,
                    connector_types=join_set(c.connector_types),
                    num_chargers=c.num_chargers,
                    highway_proximity=HighwayProximity.NEAR_EXIT.value,
                    route_segment=c.route_segment.value,
                    on_route=c.on_route.value,
                    country=c.country,
                    amenities="",
                    ocm_id=c.ocm_id,
                    status=IMPORT_STATUS,
                    notes=IMPORT_NOTE,
                )
                for c in pending[start:start + batch_size]
            )
            await self.session.flush()
        return len(pending)

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model)
        )
        return result.scalar() or 0
