"""Read-only lookups over the skill and location reference catalogs."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models.location_model import REMOTE_CITY, Location
from models.skill_model import Skill
from services.rate_repository import storage_guard


def normalize_name(value: str) -> str:
	"""Collapse whitespace and casefold a reference name for comparison."""
	return " ".join(value.strip().split()).casefold()


class ReferenceCatalog(Protocol):
	"""Reference-data contract consumed by the validator and read routes."""

	def get_skill(self, skill_id: int) -> Skill | None:
		...

	def find_skill(self, name: str) -> Skill | None:
		...

	def search_skills(self, term: str, limit: int = 5) -> list[Skill]:
		...

	def list_skills(self) -> list[Skill]:
		...

	def get_location(self, location_id: int) -> Location | None:
		...

	def find_locations(self, city: str, country: str | None = None) -> list[Location]:
		...

	def remote_location(self) -> Location | None:
		...

	def list_locations(self) -> list[Location]:
		...


class SqlReferenceCatalog:
	"""SQLAlchemy-backed reference catalog bound to one request session."""

	def __init__(self, db: Session) -> None:
		self.db = db

	def get_skill(self, skill_id: int) -> Skill | None:
		with storage_guard(self.db, "get_skill"):
			return self.db.get(Skill, skill_id)

	def find_skill(self, name: str) -> Skill | None:
		stmt = select(Skill).where(func.lower(Skill.name) == normalize_name(name))
		with storage_guard(self.db, "find_skill"):
			return self.db.execute(stmt).scalars().first()

	def search_skills(self, term: str, limit: int = 5) -> list[Skill]:
		stmt = select(Skill).order_by(Skill.name.asc()).limit(limit)
		cleaned = normalize_name(term)
		if cleaned:
			stmt = stmt.where(Skill.name.icontains(cleaned, autoescape=True))
		with storage_guard(self.db, "search_skills"):
			return list(self.db.execute(stmt).scalars().all())

	def list_skills(self) -> list[Skill]:
		stmt = select(Skill).order_by(Skill.category.asc(), Skill.name.asc())
		with storage_guard(self.db, "list_skills"):
			return list(self.db.execute(stmt).scalars().all())

	def get_location(self, location_id: int) -> Location | None:
		with storage_guard(self.db, "get_location"):
			return self.db.get(Location, location_id)

	def find_locations(self, city: str, country: str | None = None) -> list[Location]:
		stmt = select(Location).where(func.lower(Location.city) == normalize_name(city)).order_by(Location.id.asc())
		if country is not None:
			stmt = stmt.where(func.lower(Location.country) == normalize_name(country))
		with storage_guard(self.db, "find_locations"):
			return list(self.db.execute(stmt).scalars().all())

	def remote_location(self) -> Location | None:
		stmt = select(Location).where(Location.city == REMOTE_CITY).order_by(Location.id.asc())
		with storage_guard(self.db, "remote_location"):
			return self.db.execute(stmt).scalars().first()

	def list_locations(self) -> list[Location]:
		stmt = select(Location).order_by(Location.country.asc(), Location.city.asc())
		with storage_guard(self.db, "list_locations"):
			return list(self.db.execute(stmt).scalars().all())
