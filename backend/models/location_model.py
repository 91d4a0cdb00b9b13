"""Persistence model for the location reference catalog."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from database import Base

REMOTE_CITY = "Remote"


def location_label(city: str, country: str) -> str:
	"""Render a location the way rankings and search results display it."""
	if city == REMOTE_CITY:
		return REMOTE_CITY
	return f"{city}, {country}"


class Location(Base):
	"""City/country pair, or the Remote sentinel for location-agnostic work."""

	__tablename__ = "locations"
	__table_args__ = (UniqueConstraint("city", "country", name="uq_locations_city_country"),)

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
	country: Mapped[str] = mapped_column(String(100), nullable=False)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

	@property
	def is_remote(self) -> bool:
		return self.city == REMOTE_CITY

	@property
	def display_name(self) -> str:
		return location_label(self.city, self.country)
