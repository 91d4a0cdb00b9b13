"""Job posting ingestion API route declarations."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from config import Settings, get_settings
from dependencies import get_reference_catalog, get_submission_store
from services.fraud_service import FraudPolicy
from services.posting_ingestion_service import JobPosting, ingest_postings
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog
from services.validation_service import ValidationLimits

router = APIRouter(prefix="/ingestion", tags=["ingestion"])


class JobPostingPayload(BaseModel):
	title: str = Field(..., min_length=1, max_length=240)
	location: str = Field(default="Remote", max_length=240)
	text: str = Field(..., min_length=1, max_length=20000)


class PostingBatchRequest(BaseModel):
	postings: list[JobPostingPayload] = Field(..., min_length=1, max_length=100)


@router.post("/postings", summary="Extract hourly rates from job postings")
def ingest_job_postings(
	payload: PostingBatchRequest,
	store: SqlSubmissionStore = Depends(get_submission_store),
	catalog: SqlReferenceCatalog = Depends(get_reference_catalog),
	settings: Settings = Depends(get_settings),
) -> dict:
	"""Store one unapproved submission per posting that quotes an hourly rate for a known skill."""
	postings = [JobPosting(title=item.title, location=item.location, text=item.text) for item in payload.postings]
	report = ingest_postings(
		store,
		catalog,
		postings,
		limits=ValidationLimits.from_settings(settings),
		policy=FraudPolicy.from_settings(settings),
	)
	return report.to_dict()
