"""
City Explorer Backend — Location SQLAlchemy Model
===================================================

What:  ORM model for the `locations` table: one row per resolved place.
Why:   A location identity is the join key for every other cached kind.
       Weather and restaurant rows reference it through `location_id`.

Table Design Rationale:
    - Integer primary key: generated by the database on insert and handed back
      to the browser, which sends it with every follow-up request
    - search_query UNIQUE: the cache key for the geocoder lookup; the unique
      constraint turns a concurrent duplicate insert into a no-op
    - created_at: epoch milliseconds, the same unit as every cached kind
    - No staleness: an identity is created once and never refreshed
"""

from sqlalchemy import BigInteger, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.database import Base


class Location(Base):
    """A geocoded place, keyed by the normalized search string that produced it."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    search_query: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Normalized search string; the cache key for this identity",
    )

    formatted_query: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Geocoder's formatted address",
    )

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Epoch milliseconds when the geocoder was queried",
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, search_query='{self.search_query}')>"
