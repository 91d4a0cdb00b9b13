"""Service boundary for normalizing and sanity-checking incoming rate submissions."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from config import Settings
from models.location_model import Location
from models.rate_submission_model import ProjectType, Seniority
from models.skill_model import Skill
from services.errors import InvalidEnumError, OutOfRangeError, ReferenceNotFoundError
from services.reference_repository import ReferenceCatalog, normalize_name


@dataclass(frozen=True)
class ValidationLimits:
	"""Plausibility bounds applied to every candidate submission."""

	min_rate: float = 5.0
	max_rate: float = 500.0
	max_years_experience: int = 60

	@classmethod
	def from_settings(cls, settings: Settings) -> "ValidationLimits":
		return cls(
			min_rate=settings.MIN_RATE,
			max_rate=settings.MAX_RATE,
			max_years_experience=settings.MAX_YEARS_EXPERIENCE,
		)


@dataclass(frozen=True)
class RateCandidate:
	"""Raw, untrusted submission exactly as received from a form or ingestion job."""

	hourly_rate: Any
	seniority_level: Any
	project_type: Any
	skill_id: int | None = None
	skill_name: str | None = None
	location_id: int | None = None
	location_name: str | None = None
	years_experience: Any = None
	user_id: uuid.UUID | None = None
	honeypot: str | None = None


@dataclass(frozen=True)
class ValidatedSubmission:
	"""Normalized submission ready for fraud scoring and persistence."""

	skill_id: int
	skill_name: str
	location_id: int
	location_name: str
	hourly_rate: float
	seniority_level: str
	project_type: str
	years_experience: int | None
	user_id: uuid.UUID | None
	honeypot_tripped: bool = False


def _resolve_skill(candidate: RateCandidate, catalog: ReferenceCatalog) -> Skill:
	"""Resolve the candidate skill by explicit id first, then by case-insensitive name."""
	skill: Skill | None = None
	if candidate.skill_id is not None:
		skill = catalog.get_skill(candidate.skill_id)
	elif candidate.skill_name and candidate.skill_name.strip():
		skill = catalog.find_skill(candidate.skill_name)

	if skill is None:
		label = candidate.skill_name if candidate.skill_id is None else f"id={candidate.skill_id}"
		raise ReferenceNotFoundError("skill", f"Skill '{label}' not found. Please select from the list.")
	return skill


def _match_location_name(name: str, catalog: ReferenceCatalog) -> Location | None:
	"""Match 'City, Country', a bare unambiguous city, or any mention of remote work."""
	cleaned = normalize_name(name)
	if not cleaned:
		return None
	if "remote" in cleaned:
		return catalog.remote_location()

	if "," in cleaned:
		city, _, country = cleaned.rpartition(",")
		matches = catalog.find_locations(city.strip(), country.strip())
	else:
		matches = catalog.find_locations(cleaned)
	return matches[0] if len(matches) == 1 else None


def _resolve_location(candidate: RateCandidate, catalog: ReferenceCatalog) -> Location:
	location: Location | None = None
	if candidate.location_id is not None:
		location = catalog.get_location(candidate.location_id)
	elif candidate.location_name:
		location = _match_location_name(candidate.location_name, catalog)

	if location is None:
		label = candidate.location_name if candidate.location_id is None else f"id={candidate.location_id}"
		raise ReferenceNotFoundError("location", f"Location '{label}' not found. Please select from the list.")
	return location


def _validate_hourly_rate(value: Any, limits: ValidationLimits) -> float:
	"""Coerce the rate to a finite number within the plausible window, rounded to cents."""
	if isinstance(value, bool) or value is None:
		raise OutOfRangeError("hourly_rate", "Hourly rate must be a number.")
	try:
		rate = float(Decimal(str(value).strip()))
	except (InvalidOperation, ValueError):
		raise OutOfRangeError("hourly_rate", "Hourly rate must be a number.") from None

	if not math.isfinite(rate):
		raise OutOfRangeError("hourly_rate", "Hourly rate must be a finite number.")
	if rate < limits.min_rate or rate > limits.max_rate:
		raise OutOfRangeError(
			"hourly_rate",
			f"Hourly rate must be between {limits.min_rate:g} and {limits.max_rate:g}.",
		)
	return round(rate, 2)


def _validate_years_experience(value: Any, limits: ValidationLimits) -> int | None:
	if value is None or (isinstance(value, str) and not value.strip()):
		return None
	if isinstance(value, bool):
		raise OutOfRangeError("years_experience", "Years of experience must be a whole number.")
	try:
		years = Decimal(str(value).strip())
	except InvalidOperation:
		raise OutOfRangeError("years_experience", "Years of experience must be a whole number.") from None

	if not years.is_finite() or years != years.to_integral_value():
		raise OutOfRangeError("years_experience", "Years of experience must be a whole number.")
	if years < 0 or years > limits.max_years_experience:
		raise OutOfRangeError(
			"years_experience",
			f"Years of experience must be between 0 and {limits.max_years_experience}.",
		)
	return int(years)


def _validate_enum(value: Any, field: str, enum_type: type[Seniority] | type[ProjectType]) -> str:
	cleaned = str(value).strip().lower() if value is not None else ""
	allowed = [member.value for member in enum_type]
	if cleaned not in allowed:
		raise InvalidEnumError(field, f"{field} must be one of: {', '.join(allowed)}.")
	return cleaned


def validate_submission(
	candidate: RateCandidate,
	catalog: ReferenceCatalog,
	limits: ValidationLimits | None = None,
) -> ValidatedSubmission:
	"""Run the ordered validation checks and return a normalized submission.

	Checks run in order: reference resolution, rate bounds, experience bounds,
	enum membership, honeypot. A populated honeypot does not raise; the result is
	flagged so the caller can answer exactly as for an accepted submission while
	never persisting it.
	"""
	active_limits = limits or ValidationLimits()

	skill = _resolve_skill(candidate, catalog)
	location = _resolve_location(candidate, catalog)
	hourly_rate = _validate_hourly_rate(candidate.hourly_rate, active_limits)
	years_experience = _validate_years_experience(candidate.years_experience, active_limits)
	seniority_level = _validate_enum(candidate.seniority_level, "seniority_level", Seniority)
	project_type = _validate_enum(candidate.project_type, "project_type", ProjectType)
	honeypot_tripped = bool(candidate.honeypot and candidate.honeypot.strip())

	return ValidatedSubmission(
		skill_id=skill.id,
		skill_name=skill.name,
		location_id=location.id,
		location_name=location.display_name,
		hourly_rate=hourly_rate,
		seniority_level=seniority_level,
		project_type=project_type,
		years_experience=years_experience,
		user_id=candidate.user_id,
		honeypot_tripped=honeypot_tripped,
	)
