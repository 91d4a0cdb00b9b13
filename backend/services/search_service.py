"""Service boundary for the explore-page market rate search."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from models.location_model import Location
from services.market_rates_service import compute_market_rates
from services.rate_repository import SubmissionReader
from services.reference_repository import ReferenceCatalog

MAX_SEARCH_SKILLS = 5


def search_market_rates(
	store: SubmissionReader,
	catalog: ReferenceCatalog,
	term: str,
	location: Location | None = None,
	seniority: str | None = None,
	max_skills: int = MAX_SEARCH_SKILLS,
) -> list[dict[str, Any]]:
	"""Return market rates for up to ``max_skills`` skills whose name contains ``term``.

	Skills without approved samples in the requested slice are left out, so an
	empty list means no data rather than an error.
	"""
	results: list[dict[str, Any]] = []
	for skill in catalog.search_skills(term, limit=max_skills):
		rates = compute_market_rates(
			store,
			skill_id=skill.id,
			location_id=location.id if location else None,
			seniority=seniority,
		)
		if not rates.has_data:
			continue

		results.append(
			{
				"id": f"{skill.id}-{location.id if location else 'global'}",
				"skill_id": skill.id,
				"skill": skill.name,
				"category": skill.category,
				"location": location.display_name if location else "Global",
				"seniority": seniority or "all",
				**asdict(rates),
			}
		)
	return results
