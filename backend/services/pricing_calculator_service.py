"""Service boundary for the freelance profitability calculator."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from services.market_rates_service import MarketRates

WEEKS_PER_YEAR = 52


@dataclass(frozen=True)
class PlatformFee:
	"""Payment or marketplace fee as a percentage plus a fixed per-hour charge."""

	name: str
	percent: float
	fixed: float = 0.0


DEFAULT_PLATFORMS: tuple[PlatformFee, ...] = (
	PlatformFee("Direct / Invoice", 0.0),
	PlatformFee("Upwork", 10.0),
	PlatformFee("Fiverr", 20.0),
	PlatformFee("Stripe", 2.9, 0.30),
	PlatformFee("PayPal", 3.49, 0.49),
)


class PricingCalculatorError(ValueError):
	"""Raised when calculator inputs cannot produce a billable rate."""


@dataclass(frozen=True)
class PricingInputs:
	"""Income goal and working pattern used to reverse-engineer a minimum rate."""

	income_goal: float = 100000.0
	days_per_week: int = 5
	hours_per_day: int = 6
	vacation_weeks: int = 4
	non_billable_percent: float = 25.0
	expenses: float = 5000.0
	tax_rate: float = 25.0


def _validate_inputs(inputs: PricingInputs) -> None:
	"""Validate calculator inputs fall inside the ranges the calculator supports."""
	if inputs.income_goal <= 0:
		raise PricingCalculatorError("income_goal must be greater than zero.")
	if not 1 <= inputs.days_per_week <= 7:
		raise PricingCalculatorError("days_per_week must be between 1 and 7.")
	if not 1 <= inputs.hours_per_day <= 24:
		raise PricingCalculatorError("hours_per_day must be between 1 and 24.")
	if not 0 <= inputs.vacation_weeks < WEEKS_PER_YEAR:
		raise PricingCalculatorError(f"vacation_weeks must be between 0 and {WEEKS_PER_YEAR - 1}.")
	if not 0 <= inputs.non_billable_percent < 100:
		raise PricingCalculatorError("non_billable_percent must be at least 0 and below 100.")
	if inputs.expenses < 0:
		raise PricingCalculatorError("expenses cannot be negative.")
	if not 0 <= inputs.tax_rate < 100:
		raise PricingCalculatorError("tax_rate must be at least 0 and below 100.")


def _market_position(hourly_rate: float, market: MarketRates) -> str:
	"""Place a rate against the market percentile bands."""
	if hourly_rate < market.p25:
		return "below_p25"
	if hourly_rate < market.p50:
		return "p25_p50"
	if hourly_rate < market.p75:
		return "p50_p75"
	if hourly_rate < market.p90:
		return "p75_p90"
	return "above_p90"


def calculate_required_rate(
	inputs: PricingInputs,
	platforms: tuple[PlatformFee, ...] = DEFAULT_PLATFORMS,
	market: MarketRates | None = None,
) -> dict[str, Any]:
	"""Compute the minimum hourly rate that meets an after-tax income goal.

	Tax is applied to earnings before expenses, which is the conservative
	reading: revenue = income_goal / (1 - tax) + expenses.
	"""
	_validate_inputs(inputs)

	working_weeks = WEEKS_PER_YEAR - inputs.vacation_weeks
	total_hours = working_weeks * inputs.days_per_week * inputs.hours_per_day
	billable_hours = total_hours * ((100.0 - inputs.non_billable_percent) / 100.0)

	earnings_before_tax = inputs.income_goal / (1.0 - inputs.tax_rate / 100.0)
	required_revenue = earnings_before_tax + inputs.expenses
	hourly_minimum = required_revenue / billable_hours
	hourly_rate = math.ceil(hourly_minimum)

	platform_impact = []
	for platform in platforms:
		fee_per_hour = hourly_rate * (platform.percent / 100.0) + platform.fixed
		platform_impact.append(
			{
				"platform": platform.name,
				"fee_per_hour": round(fee_per_hour, 2),
				"net_rate": round(hourly_rate - fee_per_hour, 2),
				"annual_loss": round(fee_per_hour * math.floor(billable_hours), 2),
			}
		)

	result: dict[str, Any] = {
		"hourly_rate": hourly_rate,
		"daily_rate": math.ceil(hourly_minimum * inputs.hours_per_day),
		"monthly_rate": math.ceil(required_revenue / 12),
		"annual_revenue": math.ceil(required_revenue),
		"billable_hours": math.floor(billable_hours),
		"net_income": inputs.income_goal,
		"platforms": platform_impact,
		"market": None,
	}
	if market is not None and market.has_data:
		result["market"] = {
			"p25": market.p25,
			"p50": market.p50,
			"p75": market.p75,
			"p90": market.p90,
			"sample_count": market.sample_count,
			"position": _market_position(hourly_rate, market),
		}
	return result
