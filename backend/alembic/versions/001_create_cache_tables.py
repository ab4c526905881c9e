"""Create cache tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates `locations`, `weathers` and `restaurants`.
How:   Portable column types only (no PostgreSQL extensions), so the same
       migration runs against SQLite for local development.

    locations    one row per normalized search string (UNIQUE)
    weathers     forecast days, FK location_id
    restaurants  Yelp businesses, FK location_id

All created_at columns hold epoch milliseconds (BIGINT).

Rollback: downgrade() drops all three tables (cached data only, refetched on demand).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "search_query",
            sa.String(255),
            nullable=False,
            comment="Normalized search string; the cache key for this identity",
        ),
        sa.Column(
            "formatted_query",
            sa.String(255),
            nullable=True,
            comment="Geocoder's formatted address",
        ),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.BigInteger(),
            nullable=False,
            comment="Epoch milliseconds when the geocoder was queried",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("search_query"),
    )

    op.create_table(
        "weathers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("forecast", sa.Text(), nullable=True),
        sa.Column("time", sa.String(15), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    # Every lookup and purge filters on location_id
    op.create_index("idx_weathers_location_id", "weathers", ["location_id"])

    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("price", sa.String(8), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_restaurants_location_id", "restaurants", ["location_id"])


def downgrade() -> None:
    op.drop_index("idx_restaurants_location_id", table_name="restaurants")
    op.drop_table("restaurants")
    op.drop_index("idx_weathers_location_id", table_name="weathers")
    op.drop_table("weathers")
    op.drop_table("locations")
