"""Turns hourly rates quoted in job posting text into unapproved rate submissions."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from models.rate_submission_model import ProjectType, Seniority
from models.skill_model import Skill
from services.errors import SubmissionValidationError
from services.fraud_service import FraudPolicy
from services.rate_repository import SubmissionStore
from services.reference_repository import ReferenceCatalog, normalize_name
from services.submission_service import submit_rate
from services.validation_service import RateCandidate, ValidationLimits

logger = logging.getLogger(__name__)

# "$60/hr", "$60 - $80 / hr", "$45.50 to $55 per hour"
HOURLY_RATE_PATTERN = re.compile(
	r"\$\s*(\d+(?:\.\d+)?)"
	r"(?:\s*(?:-|–|to)\s*\$?\s*(\d+(?:\.\d+)?))?"
	r"\s*(?:/\s*h(?:ou)?r\b|per\s+hour\b|an\s+hour\b)",
	re.IGNORECASE,
)

_SENIORITY_KEYWORDS: tuple[tuple[Seniority, tuple[str, ...]], ...] = (
	(Seniority.EXPERT, ("principal", "staff", "lead", "expert", "architect")),
	(Seniority.SENIOR, ("senior", "sr")),
	(Seniority.JUNIOR, ("junior", "jr", "entry", "intern")),
)


@dataclass(frozen=True)
class JobPosting:
	"""Posting scraped or pasted from an external job board."""

	title: str
	location: str
	text: str


@dataclass(frozen=True)
class RateMention:
	"""Hourly rate or rate range found in free text."""

	rate_min: float
	rate_max: float

	@property
	def midpoint(self) -> float:
		return round((self.rate_min + self.rate_max) / 2.0, 2)


@dataclass
class IngestionReport:
	"""Summary of one posting ingestion batch."""

	postings: int = 0
	extracted: int = 0
	stored: int = 0
	skipped: list[dict[str, Any]] = field(default_factory=list)

	def to_dict(self) -> dict[str, Any]:
		return {
			"postings": self.postings,
			"extracted": self.extracted,
			"stored": self.stored,
			"skipped": self.skipped,
		}


def extract_hourly_rates(text: str) -> list[RateMention]:
	"""Find every hourly rate quote in the text; annual salaries are ignored."""
	mentions: list[RateMention] = []
	for match in HOURLY_RATE_PATTERN.finditer(text or ""):
		low = float(match.group(1))
		high = float(match.group(2)) if match.group(2) else low
		mentions.append(RateMention(rate_min=min(low, high), rate_max=max(low, high)))
	return mentions


def _title_tokens(title: str) -> set[str]:
	cleaned = "".join(ch if ch.isalnum() else " " for ch in title.lower())
	return {part for part in cleaned.split() if part}


def infer_seniority(title: str) -> Seniority:
	"""Map seniority keywords in a posting title to a band; defaults to mid."""
	tokens = _title_tokens(title)
	for seniority, keywords in _SENIORITY_KEYWORDS:
		if tokens.intersection(keywords):
			return seniority
	return Seniority.MID


def classify_skill(title: str, skills: Sequence[Skill]) -> Skill | None:
	"""Pick the catalog skill named in the title, preferring the longest name."""
	lowered = normalize_name(title)
	matches = [
		skill
		for skill in skills
		if re.search(rf"(?<!\w){re.escape(normalize_name(skill.name))}(?!\w)", lowered)
	]
	if not matches:
		return None
	return max(matches, key=lambda skill: len(skill.name))


def ingest_postings(
	store: SubmissionStore,
	catalog: ReferenceCatalog,
	postings: Sequence[JobPosting],
	limits: ValidationLimits | None = None,
	policy: FraudPolicy | None = None,
) -> IngestionReport:
	"""Feed every rate quoted in the postings through the regular submission path.

	Each posting contributes at most one submission, at the midpoint of its first
	quoted range. Submissions carry no origin, so origin heuristics do not apply.
	"""
	report = IngestionReport(postings=len(postings))
	skills = catalog.list_skills()

	for posting in postings:
		mentions = extract_hourly_rates(posting.text)
		if not mentions:
			report.skipped.append({"title": posting.title, "reason": "no_hourly_rate"})
			continue
		report.extracted += 1

		skill = classify_skill(posting.title, skills)
		if skill is None:
			report.skipped.append({"title": posting.title, "reason": "unknown_skill"})
			continue

		candidate = RateCandidate(
			skill_id=skill.id,
			location_name=posting.location,
			hourly_rate=mentions[0].midpoint,
			seniority_level=infer_seniority(posting.title).value,
			project_type=ProjectType.HOURLY.value,
		)
		try:
			outcome = submit_rate(store, catalog, candidate, origin=None, limits=limits, policy=policy)
		except SubmissionValidationError as exc:
			logger.info("posting_skipped | title=%s | field=%s | reason=%s", posting.title, exc.field, exc)
			report.skipped.append({"title": posting.title, "reason": exc.error_type, "field": exc.field})
			continue

		if outcome.accepted:
			report.stored += 1
		else:
			report.skipped.append({"title": posting.title, "reason": "flagged"})

	logger.info(
		"postings_ingested | postings=%s | extracted=%s | stored=%s | skipped=%s",
		report.postings,
		report.extracted,
		report.stored,
		len(report.skipped),
	)
	return report
