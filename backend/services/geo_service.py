"""Service boundary for ranking locations by average rate for a skill."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from services.rate_repository import RateObservation, RateQuery, SubmissionReader


@dataclass(frozen=True)
class GeoRatePoint:
	"""Average approved rate and sample size for one location."""

	location_id: int
	location_name: str
	avg_rate: float
	sample_count: int


def rank_locations(
	observations: Sequence[RateObservation],
	top_n: int = 5,
	min_samples: int = 1,
) -> list[GeoRatePoint]:
	"""Rank locations by mean rate, highest first, truncated to ``top_n``.

	Ties are broken by larger sample, then by location name. Locations with
	fewer than ``min_samples`` rates are dropped before truncation; the default
	keeps every location.
	"""
	if top_n < 1:
		raise ValueError("top_n must be at least 1.")
	if min_samples < 1:
		raise ValueError("min_samples must be at least 1.")

	grouped: dict[int, tuple[str, list[float]]] = {}
	for item in observations:
		grouped.setdefault(item.location_id, (item.location_name, []))[1].append(item.hourly_rate)

	points = [
		GeoRatePoint(
			location_id=location_id,
			location_name=name,
			avg_rate=round(float(np.mean(rates)), 2),
			sample_count=len(rates),
		)
		for location_id, (name, rates) in grouped.items()
		if len(rates) >= min_samples
	]
	points.sort(key=lambda point: (-point.avg_rate, -point.sample_count, point.location_name))
	return points[:top_n]


def compute_geo_ranking(
	store: SubmissionReader,
	skill_id: int,
	top_n: int = 5,
	min_samples: int = 1,
) -> list[GeoRatePoint]:
	"""Return the top locations by average approved rate for a skill."""
	observations = store.fetch_approved(RateQuery(skill_id=skill_id))
	return rank_locations(observations, top_n=top_n, min_samples=min_samples)
