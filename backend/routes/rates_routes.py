"""Market statistics API route declarations: percentiles, distribution, trend, geo, search."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from config import Settings, get_settings
from dependencies import get_reference_catalog, get_submission_store
from models.location_model import Location
from models.rate_submission_model import Seniority
from models.skill_model import Skill
from services.distribution_service import compute_distribution
from services.errors import NotFoundError
from services.geo_service import compute_geo_ranking
from services.market_rates_service import compute_market_rates
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog
from services.search_service import search_market_rates
from services.trend_service import compute_trend, is_trend_displayable

router = APIRouter(prefix="/rates", tags=["rates"])

MAX_GEO_LOCATIONS = 50


def _require_skill(catalog: SqlReferenceCatalog, skill_id: int) -> Skill:
	skill = catalog.get_skill(skill_id)
	if skill is None:
		raise NotFoundError(f"Skill with id={skill_id} not found.")
	return skill


def _optional_location(catalog: SqlReferenceCatalog, location_id: int | None) -> Location | None:
	if location_id is None:
		return None
	location = catalog.get_location(location_id)
	if location is None:
		raise NotFoundError(f"Location with id={location_id} not found.")
	return location


def _scope(skill: Skill, location: Location | None) -> dict[str, Any]:
	return {
		"skill_id": skill.id,
		"skill": skill.name,
		"location_id": location.id if location else None,
		"location": location.display_name if location else "Global",
	}


@router.get("/search", summary="Search market rates by skill name")
def search_rates(
	q: str = Query("", max_length=160),
	location_id: int | None = Query(None, ge=1),
	seniority: Seniority | None = Query(None),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
) -> dict[str, Any]:
	"""Return market rates for up to five matching skills that have approved data."""
	location = _optional_location(catalog, location_id)
	results = search_market_rates(
		store,
		catalog,
		term=q,
		location=location,
		seniority=seniority.value if seniority else None,
	)
	return {"query": q, "results": results, "count": len(results)}


@router.get("/{skill_id}", summary="Percentile market rates for a skill")
def market_rates(
	skill_id: int,
	location_id: int | None = Query(None, ge=1),
	seniority: Seniority | None = Query(None),
	since: datetime | None = Query(None),
	until: datetime | None = Query(None),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
) -> dict[str, Any]:
	"""Return P25/P50/P75/P90 and sample count; sample_count 0 means no data."""
	skill = _require_skill(catalog, skill_id)
	location = _optional_location(catalog, location_id)
	rates = compute_market_rates(
		store,
		skill_id=skill.id,
		location_id=location.id if location else None,
		seniority=seniority.value if seniority else None,
		since=since,
		until=until,
	)
	return {**_scope(skill, location), **asdict(rates)}


@router.get("/{skill_id}/distribution", summary="Rate histogram for a skill")
def rate_distribution(
	skill_id: int,
	location_id: int | None = Query(None, ge=1),
	bucket_width: float | None = Query(None, ge=0.01, le=500),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
	settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
	"""Return gap-free fixed-width buckets in ascending order."""
	skill = _require_skill(catalog, skill_id)
	location = _optional_location(catalog, location_id)
	width = bucket_width or settings.BUCKET_WIDTH
	buckets = compute_distribution(
		store,
		skill_id=skill.id,
		location_id=location.id if location else None,
		bucket_width=width,
	)
	return {**_scope(skill, location), "bucket_width": width, "buckets": [asdict(bucket) for bucket in buckets]}


@router.get("/{skill_id}/trend", summary="Monthly average rate trend for a skill")
def rate_trend(
	skill_id: int,
	location_id: int | None = Query(None, ge=1),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
) -> dict[str, Any]:
	"""Return one point per month with data; ``displayable`` is false below two points."""
	skill = _require_skill(catalog, skill_id)
	location = _optional_location(catalog, location_id)
	points = compute_trend(store, skill_id=skill.id, location_id=location.id if location else None)
	return {
		**_scope(skill, location),
		"points": [asdict(point) for point in points],
		"displayable": is_trend_displayable(points),
	}


@router.get("/{skill_id}/geo", summary="Top locations by average rate for a skill")
def geo_ranking(
	skill_id: int,
	top_n: int | None = Query(None, ge=1, le=MAX_GEO_LOCATIONS),
	min_samples: int = Query(1, ge=1),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
	settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
	"""Return locations ranked by average rate, optionally hiding thin samples."""
	skill = _require_skill(catalog, skill_id)
	limit = top_n or settings.GEO_TOP_N
	points = compute_geo_ranking(store, skill_id=skill.id, top_n=limit, min_samples=min_samples)
	return {
		"skill_id": skill.id,
		"skill": skill.name,
		"top_n": limit,
		"min_samples": min_samples,
		"locations": [asdict(point) for point in points],
	}
