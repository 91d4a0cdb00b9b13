"""Service boundary for fixed-width rate histogram buckets."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from services.rate_repository import RateQuery, SubmissionReader

CENTS = 100


@dataclass(frozen=True)
class DistributionBucket:
	"""Half-open rate interval [floor, ceiling) and its submission count."""

	floor: float
	ceiling: float
	frequency: int


def bucketize_rates(rates: Sequence[float], bucket_width: float = 10.0) -> list[DistributionBucket]:
	"""Group rates into gap-free fixed-width buckets anchored at the minimum rate.

	Every rate lands in bucket ``floor((rate - min) / width)``; buckets between
	the first and last index are emitted even when empty. Rates and width are
	compared in whole cents so a rate on a boundary opens the next bucket.
	"""
	if bucket_width <= 0:
		raise ValueError("bucket_width must be greater than zero.")
	width_cents = int(round(bucket_width * CENTS))
	if width_cents < 1:
		raise ValueError("bucket_width must be at least one cent.")
	if len(rates) == 0:
		return []

	cents = np.rint(np.asarray(rates, dtype=np.float64) * CENTS).astype(np.int64)
	minimum_cents = int(cents.min())
	indices = np.floor_divide(cents - minimum_cents, width_cents)
	frequencies = np.bincount(indices)

	buckets: list[DistributionBucket] = []
	for index, frequency in enumerate(frequencies):
		floor_cents = minimum_cents + index * width_cents
		buckets.append(
			DistributionBucket(
				floor=floor_cents / CENTS,
				ceiling=(floor_cents + width_cents) / CENTS,
				frequency=int(frequency),
			)
		)
	return buckets


def compute_distribution(
	store: SubmissionReader,
	skill_id: int,
	location_id: int | None = None,
	bucket_width: float = 10.0,
) -> list[DistributionBucket]:
	"""Return the histogram of approved rates for a skill, optionally in one location."""
	if not math.isfinite(bucket_width) or bucket_width <= 0:
		raise ValueError("bucket_width must be a positive finite number.")
	observations = store.fetch_approved(RateQuery(skill_id=skill_id, location_id=location_id))
	return bucketize_rates([item.hourly_rate for item in observations], bucket_width=bucket_width)
