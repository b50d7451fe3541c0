"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The PostGIS ``location`` column is mirrored
as a plain String column, which happily stores the EWKT the repository
writes.  Redis is replaced by a small in-memory double.
"""

import math
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy import Column, DateTime, Float, Integer, String, Text, func
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from echarger.domain.distance import EARTH_RADIUS_KM
from echarger.domain.entities import ChargerRecord, Location
from echarger.domain.enums import OnRoute


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class SqliteBase(DeclarativeBase):
    pass


# Mirror of ``ChargerModel`` without the PostGIS Geometry column
# (SQLite doesn't support it).

class SqliteChargerModel(SqliteBase):
    __tablename__ = "chargers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location = Column(String, nullable=True)  # stub for Geometry
    network = Column(String(120), default="Unknown")
    power_kw = Column(Integer, default=0, nullable=False)
    connector_types = Column(String(64), default="CCS")
    num_chargers = Column(Integer, default=1, nullable=False)
    highway_proximity = Column(String(20), nullable=True)
    route_segment = Column(String(32), nullable=True)
    on_route = Column(String(16), nullable=True)
    country = Column(String(2), default="")
    amenities = Column(String(255), default="")
    notes = Column(Text, nullable=True)
    reliability = Column(Float, nullable=True)
    status = Column(String(32), nullable=True)
    ocm_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


# ── Redis double ──────────────────────────────────────────────────────


class InMemoryRedis:
    """Implements the handful of commands the cache and lock use."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        else:
            self.ttls.pop(key, None)
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def eval(self, script, numkeys, key, token, *args):
        if self.data.get(key) != token:
            return 0
        if "expire" in script:
            self.ttls[key] = int(args[0])
            return 1
        return await self.delete(key)


# ── Geometry helpers ──────────────────────────────────────────────────

KM_PER_DEGREE_LAT = math.radians(1) * EARTH_RADIUS_KM

ROTTERDAM = Location(51.9244, 4.4777, "Rotterdam")
BREDA = (51.5719, 4.7683)
BRUSSELS = (50.8503, 4.3517)


def north_of(origin: Location, km: float) -> tuple[float, float]:
    """A point *km* due north of *origin* (exact along a meridian)."""
    return origin.latitude + km / KM_PER_DEGREE_LAT, origin.longitude


def make_charger(
    charger_id: str, lat: float, lng: float, **fields
) -> ChargerRecord:
    fields.setdefault("name", f"Charger {charger_id}")
    fields.setdefault("power_kw", 300)
    fields.setdefault("on_route", OnRoute.YES)
    return ChargerRecord(id=charger_id, latitude=lat, longitude=lng, **fields)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(SqliteBase.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(SqliteBase.metadata.drop_all)
