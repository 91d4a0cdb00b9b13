"""Moderation API route declarations for the review queue and approve/reject decisions."""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from dependencies import get_submission_store
from services.errors import NotFoundError
from services.moderation_service import ModerationDecision, list_review_queue, moderate_submission
from services.rate_repository import SqlSubmissionStore

router = APIRouter(prefix="/moderation", tags=["moderation"])


class ModerationDecisionRequest(BaseModel):
	decision: ModerationDecision
	moderator: str | None = Field(default=None, max_length=120)


@router.get("/submissions", summary="Moderation review queue")
def review_queue(
	status: Literal["pending", "all"] = Query("pending"),
	limit: int = Query(100, ge=1, le=500),
	store: SqlSubmissionStore = Depends(get_submission_store),
) -> dict:
	"""Return submissions newest first with their fraud scores and reasons."""
	submissions = list_review_queue(store, pending_only=status == "pending", limit=limit)
	return {
		"status": status,
		"submissions": [submission.to_review_dict() for submission in submissions],
		"count": len(submissions),
	}


@router.post("/submissions/{submission_id}/decision", summary="Approve or reject a submission")
def decide_submission(
	submission_id: uuid.UUID,
	payload: ModerationDecisionRequest,
	store: SqlSubmissionStore = Depends(get_submission_store),
) -> dict:
	"""Apply a moderation decision; approving twice reports already_approved."""
	result = moderate_submission(store, submission_id, payload.decision, moderator=payload.moderator)
	if not result.found:
		raise NotFoundError(f"Submission {submission_id} not found.")
	return {
		"submission_id": str(result.submission_id),
		"outcome": result.outcome.value,
		"approved_at": result.approved_at.isoformat() if result.approved_at else None,
	}
