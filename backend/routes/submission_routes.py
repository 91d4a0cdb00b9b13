"""Rate submission API route declarations."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from config import Settings, get_settings
from dependencies import get_reference_catalog, get_request_origin, get_submission_store
from services.fraud_service import FraudPolicy
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog
from services.submission_service import submit_rate
from services.validation_service import RateCandidate, ValidationLimits

router = APIRouter(prefix="/submissions", tags=["submissions"])


class RateSubmissionRequest(BaseModel):
	"""Loosely typed form payload; field checks happen in the validation service."""

	skill_id: int | None = Field(default=None, ge=1)
	skill_name: str | None = Field(default=None, max_length=160)
	location_id: int | None = Field(default=None, ge=1)
	location_name: str | None = Field(default=None, max_length=240)
	hourly_rate: float | str | None = None
	seniority_level: str | None = Field(default=None, max_length=32)
	project_type: str | None = Field(default="hourly", max_length=32)
	years_experience: int | float | str | None = None
	user_id: uuid.UUID | None = None
	website_url_hp: str | None = Field(default=None, max_length=500)

	def to_candidate(self) -> RateCandidate:
		return RateCandidate(
			hourly_rate=self.hourly_rate,
			seniority_level=self.seniority_level,
			project_type=self.project_type,
			skill_id=self.skill_id,
			skill_name=self.skill_name,
			location_id=self.location_id,
			location_name=self.location_name,
			years_experience=self.years_experience,
			user_id=self.user_id,
			honeypot=self.website_url_hp,
		)


@router.post("", status_code=status.HTTP_202_ACCEPTED, summary="Submit an hourly rate for review")
def create_submission(
	payload: RateSubmissionRequest,
	response: Response,
	origin: str = Depends(get_request_origin),
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
	settings: Settings = Depends(get_settings),
) -> dict[str, object]:
	"""Queue a rate for moderation; flagged submissions are refused with accepted=false."""
	outcome = submit_rate(
		store,
		catalog,
		payload.to_candidate(),
		origin=origin,
		limits=ValidationLimits.from_settings(settings),
		policy=FraudPolicy.from_settings(settings),
		hard_cap=settings.RATE_LIMIT_HARD_CAP,
	)
	if not outcome.accepted:
		response.status_code = status.HTTP_200_OK
	return outcome.public_payload()
