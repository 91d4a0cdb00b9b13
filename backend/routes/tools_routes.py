"""Freelancer tooling API route declarations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from dependencies import get_reference_catalog, get_submission_store
from services.errors import NotFoundError
from services.market_rates_service import compute_market_rates
from services.pricing_calculator_service import PricingCalculatorError, PricingInputs, calculate_required_rate
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog

router = APIRouter(prefix="/tools", tags=["tools"])


class RateCalculatorRequest(BaseModel):
	income_goal: float = Field(default=100000.0, gt=0)
	days_per_week: int = Field(default=5, ge=1, le=7)
	hours_per_day: int = Field(default=6, ge=1, le=24)
	vacation_weeks: int = Field(default=4, ge=0, le=51)
	non_billable_percent: float = Field(default=25.0, ge=0, lt=100)
	expenses: float = Field(default=5000.0, ge=0)
	tax_rate: float = Field(default=25.0, ge=0, lt=100)
	skill_id: int | None = Field(default=None, ge=1)
	location_id: int | None = Field(default=None, ge=1)


@router.post("/rate-calculator", summary="Minimum hourly rate for an income goal")
def rate_calculator(
	payload: RateCalculatorRequest,
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
) -> dict:
	"""Return required rates, platform fee impact, and a market benchmark when a skill is given."""
	market = None
	if payload.skill_id is not None:
		if catalog.get_skill(payload.skill_id) is None:
			raise NotFoundError(f"Skill with id={payload.skill_id} not found.")
		if payload.location_id is not None and catalog.get_location(payload.location_id) is None:
			raise NotFoundError(f"Location with id={payload.location_id} not found.")
		market = compute_market_rates(store, skill_id=payload.skill_id, location_id=payload.location_id)

	inputs = PricingInputs(**payload.model_dump(exclude={"skill_id", "location_id"}))
	try:
		return calculate_required_rate(inputs, market=market)
	except PricingCalculatorError as exc:
		raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
