"""
City Explorer Backend — Weather SQLAlchemy Model
==================================================

What:  ORM model for the `weathers` table: one row per forecast day.
How:   A forecast refresh inserts one row per day, all sharing the same
       `created_at`. The whole set for a location is purged together when
       its oldest row passes the weather staleness threshold.
"""

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.database import Base


class Weather(Base):
    """A single day's forecast summary cached for a location."""

    __tablename__ = "weathers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    forecast: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Display date, e.g. "Mon Jan 15 2024"
    time: Mapped[str] = mapped_column(String(15), nullable=False)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("locations.id"),
        nullable=False,
    )

    # Every cache lookup and purge filters on location_id
    __table_args__ = (
        Index("idx_weathers_location_id", "location_id"),
    )

    def __repr__(self) -> str:
        return f"<Weather(location_id={self.location_id}, time='{self.time}')>"
