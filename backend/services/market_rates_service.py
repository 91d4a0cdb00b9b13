"""Service boundary for percentile market rate statistics over approved submissions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from services.rate_repository import RateQuery, SubmissionReader

MARKET_PERCENTILES: tuple[int, ...] = (25, 50, 75, 90)


@dataclass(frozen=True)
class MarketRates:
	"""Percentile summary; sample_count 0 means no data, not a zero rate."""

	p25: float
	p50: float
	p75: float
	p90: float
	sample_count: int

	@property
	def has_data(self) -> bool:
		return self.sample_count > 0


EMPTY_MARKET_RATES = MarketRates(p25=0.0, p50=0.0, p75=0.0, p90=0.0, sample_count=0)


def summarize_rates(rates: Sequence[float]) -> MarketRates:
	"""Compute P25/P50/P75/P90 using linear interpolation between order statistics.

	Equal rates are kept with their multiplicity. A single sample yields that
	rate for all four percentiles; an empty sample yields EMPTY_MARKET_RATES.
	"""
	if len(rates) == 0:
		return EMPTY_MARKET_RATES

	series = np.sort(np.asarray(rates, dtype=np.float64), kind="stable")
	p25, p50, p75, p90 = np.percentile(series, MARKET_PERCENTILES, method="linear")
	return MarketRates(
		p25=round(float(p25), 2),
		p50=round(float(p50), 2),
		p75=round(float(p75), 2),
		p90=round(float(p90), 2),
		sample_count=int(series.size),
	)


def compute_market_rates(
	store: SubmissionReader,
	skill_id: int,
	location_id: int | None = None,
	seniority: str | None = None,
	since: datetime | None = None,
	until: datetime | None = None,
) -> MarketRates:
	"""Return market percentiles for a skill, globally or for one location."""
	observations = store.fetch_approved(
		RateQuery(
			skill_id=skill_id,
			location_id=location_id,
			seniority=seniority,
			since=since,
			until=until,
		)
	)
	return summarize_rates([item.hourly_rate for item in observations])
