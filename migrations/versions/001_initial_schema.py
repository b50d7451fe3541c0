"""Initial schema with PostGIS extension and the chargers table.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── chargers ──────────────────────────────────────────────────────
    op.create_table(
        "chargers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column(
            "location",
            Geometry("POINT", srid=4326, spatial_index=False),
            nullable=True,
        ),
        sa.Column("network", sa.String(120), default="Unknown"),
        sa.Column("power_kw", sa.Integer, default=0, nullable=False),
        sa.Column("connector_types", sa.String(64), default="CCS"),
        sa.Column("num_chargers", sa.Integer, default=1, nullable=False),
        sa.Column("highway_proximity", sa.String(20), nullable=True),
        sa.Column("route_segment", sa.String(32), nullable=True),
        sa.Column("on_route", sa.String(16), nullable=True),
        sa.Column("country", sa.String(2), default=""),
        sa.Column("amenities", sa.String(255), default=""),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("reliability", sa.Float, nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        sa.Column("ocm_id", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_chargers_location",
        "chargers",
        ["location"],
        postgresql_using="gist",
    )
    op.create_index("idx_chargers_segment", "chargers", ["route_segment"])
    op.create_index("idx_chargers_ocm_id", "chargers", ["ocm_id"], unique=True)


def downgrade() -> None:
    op.drop_table("chargers")
