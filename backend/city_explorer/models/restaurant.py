"""
City Explorer Backend — Restaurant SQLAlchemy Model
=====================================================

What:  ORM model for the `restaurants` table: Yelp businesses near a location.
Why:   Yelp search results change slowly; caching them per location keeps
       repeat visits off the Yelp quota.
"""

from sqlalchemy import BigInteger, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.database import Base


class Restaurant(Base):
    """A restaurant listing cached for a location."""

    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Yelp price tier: "$" through "$$$$"; absent for many listings
    price: Mapped[str | None] = mapped_column(String(8), nullable=True)

    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("locations.id"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_restaurants_location_id", "location_id"),
    )

    def __repr__(self) -> str:
        return f"<Restaurant(location_id={self.location_id}, name='{self.name}')>"
