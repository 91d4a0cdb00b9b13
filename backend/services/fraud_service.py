"""Fraud and outlier scoring for incoming rate submissions.

Each heuristic inspects the validated submission plus a context snapshot and
returns a weighted contribution. Contributions are summed and clamped to
``[0.0, 1.0]``. The score is advisory: it is stored for moderators and only an
explicit auto-reject threshold can turn it into a refusal.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np

from config import Settings
from services.rate_repository import RateQuery, SubmissionStore
from services.validation_service import ValidatedSubmission


@dataclass(frozen=True)
class FraudPolicy:
	"""Weights and thresholds for the fraud heuristics."""

	max_submissions_per_window: int = 3
	window_hours: int = 24
	rate_limit_weight: float = 0.5
	outlier_min_samples: int = 10
	outlier_lower_percentile: float = 5.0
	outlier_upper_percentile: float = 95.0
	outlier_weight: float = 0.3
	contradiction_weight: float = 0.15
	missing_field_weight: float = 0.05
	auto_reject_threshold: float | None = 1.0

	@classmethod
	def from_settings(cls, settings: Settings) -> "FraudPolicy":
		return cls(
			max_submissions_per_window=settings.RATE_LIMIT_MAX_SUBMISSIONS,
			window_hours=settings.RATE_LIMIT_WINDOW_HOURS,
			outlier_min_samples=settings.OUTLIER_MIN_SAMPLES,
			auto_reject_threshold=settings.FRAUD_AUTO_REJECT_THRESHOLD,
		)


@dataclass(frozen=True)
class FraudContext:
	"""Signals gathered from persisted data before scoring one submission."""

	origin: str | None = None
	recent_origin_count: int = 0
	skill_rates: Sequence[float] = ()


@dataclass(frozen=True)
class HeuristicResult:
	"""Contribution of a single heuristic to the running suspicion total."""

	name: str
	weight: float
	detail: str


@dataclass(frozen=True)
class FraudAssessment:
	"""Clamped fraud score plus the labels of every heuristic that fired."""

	score: float
	reasons: tuple[str, ...] = ()
	checks: tuple[HeuristicResult, ...] = ()

	def should_auto_reject(self, policy: FraudPolicy) -> bool:
		threshold = policy.auto_reject_threshold
		return threshold is not None and self.score >= threshold


Heuristic = Callable[[ValidatedSubmission, FraudContext, FraudPolicy], HeuristicResult | None]

# Seniority bands that contradict the reported years of experience.
_MIN_YEARS_BY_SENIORITY = {"expert": 2, "senior": 1}
_MAX_YEARS_BY_SENIORITY = {"junior": 15}


def is_unspecified_origin(origin: str | None) -> bool:
	"""Return whether the origin is a wildcard address such as 0.0.0.0 or ::."""
	if not origin:
		return False
	try:
		return ipaddress.ip_address(origin.strip()).is_unspecified
	except ValueError:
		return False


def check_origin_rate_limit(
	validated: ValidatedSubmission,
	context: FraudContext,
	policy: FraudPolicy,
) -> HeuristicResult | None:
	"""Flag origins that already used their submission allowance inside the window."""
	if is_unspecified_origin(context.origin):
		return HeuristicResult("blocked_origin", 1.0, f"Submission from unspecified origin {context.origin}")
	if context.origin is None:
		return None
	if context.recent_origin_count >= policy.max_submissions_per_window:
		return HeuristicResult(
			"rate_limit",
			policy.rate_limit_weight,
			f"{context.recent_origin_count + 1} submissions from origin in {policy.window_hours}h",
		)
	return None


def check_statistical_outlier(
	validated: ValidatedSubmission,
	context: FraudContext,
	policy: FraudPolicy,
) -> HeuristicResult | None:
	"""Flag rates outside the robust [P5, P95] band of the skill's approved distribution."""
	if len(context.skill_rates) < policy.outlier_min_samples:
		return None

	series = np.asarray(context.skill_rates, dtype=np.float64)
	lower, upper = np.percentile(series, [policy.outlier_lower_percentile, policy.outlier_upper_percentile])
	if lower <= validated.hourly_rate <= upper:
		return None
	return HeuristicResult(
		"statistical_outlier",
		policy.outlier_weight,
		f"Rate {validated.hourly_rate:g} outside [{float(lower):.2f}, {float(upper):.2f}]",
	)


def check_field_consistency(
	validated: ValidatedSubmission,
	context: FraudContext,
	policy: FraudPolicy,
) -> HeuristicResult | None:
	"""Penalize contradictory seniority/experience pairs and, more lightly, missing experience."""
	years = validated.years_experience
	if years is None:
		return HeuristicResult("missing_experience", policy.missing_field_weight, "Years of experience not provided")

	minimum = _MIN_YEARS_BY_SENIORITY.get(validated.seniority_level)
	maximum = _MAX_YEARS_BY_SENIORITY.get(validated.seniority_level)
	if (minimum is not None and years < minimum) or (maximum is not None and years > maximum):
		return HeuristicResult(
			"contradictory_fields",
			policy.contradiction_weight,
			f"Seniority '{validated.seniority_level}' with {years} years of experience",
		)
	return None


DEFAULT_HEURISTICS: tuple[Heuristic, ...] = (
	check_origin_rate_limit,
	check_statistical_outlier,
	check_field_consistency,
)


def score_submission(
	validated: ValidatedSubmission,
	context: FraudContext,
	policy: FraudPolicy | None = None,
	heuristics: Sequence[Heuristic] = DEFAULT_HEURISTICS,
) -> FraudAssessment:
	"""Accumulate heuristic contributions into a clamped 0.0-1.0 suspicion score."""
	active_policy = policy or FraudPolicy()

	checks: list[HeuristicResult] = []
	for heuristic in heuristics:
		result = heuristic(validated, context, active_policy)
		if result is not None:
			checks.append(result)

	total = sum(check.weight for check in checks)
	score = round(float(max(0.0, min(1.0, total))), 4)
	return FraudAssessment(
		score=score,
		reasons=tuple(check.name for check in checks),
		checks=tuple(checks),
	)


def build_fraud_context(
	store: SubmissionStore,
	validated: ValidatedSubmission,
	origin: str | None,
	policy: FraudPolicy | None = None,
	now: datetime | None = None,
) -> FraudContext:
	"""Gather the windowed origin count and the skill's approved rates from storage."""
	active_policy = policy or FraudPolicy()
	current = now or datetime.now(timezone.utc)

	recent_count = 0
	if origin:
		since = current - timedelta(hours=active_policy.window_hours)
		recent_count = store.count_recent_from_origin(origin, since)

	observations = store.fetch_approved(RateQuery(skill_id=validated.skill_id))
	return FraudContext(
		origin=origin,
		recent_origin_count=recent_count,
		skill_rates=tuple(item.hourly_rate for item in observations),
	)
