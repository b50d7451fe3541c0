"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``chargers`` -- one row per charging site on the corridor

The table is curated by hand as well as filled by ingestion, so it mirrors
a spreadsheet more than a strict schema: name and coordinates are nullable,
enumerations and sets are stored as plain strings, and the repository
decides what is usable when reading.

Indexes
-------
* **GIST** on ``location`` for spatial queries.
* **B-Tree** on ``route_segment`` (segment listing) and a unique index on
  ``ocm_id`` (provenance of imported rows).
"""

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)
from geoalchemy2 import Geometry

from .database import Base


class ChargerModel(Base):
    __tablename__ = "chargers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=True)

    # Plain floats for fast reads; ``location`` duplicates them for PostGIS
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location = Column(
        Geometry("POINT", srid=4326, spatial_index=False), nullable=True
    )

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

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_chargers_location", "location", postgresql_using="gist"),
        Index("idx_chargers_segment", "route_segment"),
        Index("idx_chargers_ocm_id", "ocm_id", unique=True),
    )
