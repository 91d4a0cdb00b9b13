"""Service boundary for monthly average rate trend series."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from services.rate_repository import RateObservation, RateQuery, SubmissionReader

MIN_TREND_POINTS = 2


@dataclass(frozen=True)
class TrendPoint:
	"""Average approved rate for one calendar month (``YYYY-MM``, UTC)."""

	period: str
	avg_rate: float
	sample_count: int


def _month_key(created_at: datetime) -> tuple[int, int]:
	"""Return the UTC (year, month) of a timestamp; naive values are taken as UTC."""
	if created_at.tzinfo is not None:
		created_at = created_at.astimezone(timezone.utc)
	return created_at.year, created_at.month


def build_monthly_trend(observations: Sequence[RateObservation]) -> list[TrendPoint]:
	"""Average rates per calendar month in chronological order, omitting empty months."""
	grouped: dict[tuple[int, int], list[float]] = defaultdict(list)
	for item in observations:
		grouped[_month_key(item.created_at)].append(item.hourly_rate)

	points: list[TrendPoint] = []
	for year, month in sorted(grouped):
		rates = grouped[(year, month)]
		points.append(
			TrendPoint(
				period=f"{year:04d}-{month:02d}",
				avg_rate=round(float(np.mean(rates)), 2),
				sample_count=len(rates),
			)
		)
	return points


def is_trend_displayable(points: Sequence[TrendPoint]) -> bool:
	"""Caller-side policy: a trend needs at least two months to be worth charting."""
	return len(points) >= MIN_TREND_POINTS


def compute_trend(
	store: SubmissionReader,
	skill_id: int,
	location_id: int | None = None,
) -> list[TrendPoint]:
	"""Return the sparse monthly trend for a skill, optionally in one location."""
	observations = store.fetch_approved(RateQuery(skill_id=skill_id, location_id=location_id))
	return build_monthly_trend(observations)
