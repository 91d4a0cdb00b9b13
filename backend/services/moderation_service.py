"""Moderation gateway: the only path that makes a submission visible to statistics."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from models.rate_submission_model import RateSubmission
from services.rate_repository import SubmissionStore

logger = logging.getLogger(__name__)


class ModerationDecision(str, Enum):
	APPROVE = "approve"
	REJECT = "reject"


class ModerationOutcome(str, Enum):
	APPROVED = "approved"
	ALREADY_APPROVED = "already_approved"
	REJECTED = "rejected"
	NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ModerationResult:
	"""Outcome of one moderation call; NOT_FOUND is a value, never an exception."""

	submission_id: uuid.UUID
	outcome: ModerationOutcome
	approved_at: datetime | None = None

	@property
	def found(self) -> bool:
		return self.outcome is not ModerationOutcome.NOT_FOUND


def approve_submission(
	store: SubmissionStore,
	submission_id: uuid.UUID,
	approved_by: str | None = None,
	now: datetime | None = None,
) -> ModerationResult:
	"""Mark a submission approved and verified; approving twice leaves the first stamp intact."""
	submission = store.get(submission_id)
	if submission is None:
		logger.info("moderation_target_missing | action=approve | submission_id=%s", submission_id)
		return ModerationResult(submission_id=submission_id, outcome=ModerationOutcome.NOT_FOUND)

	if submission.is_approved:
		return ModerationResult(
			submission_id=submission_id,
			outcome=ModerationOutcome.ALREADY_APPROVED,
			approved_at=submission.approved_at,
		)

	approved_at = now or datetime.now(timezone.utc)
	store.mark_approved(submission, approved_at=approved_at, approved_by=approved_by)
	logger.info(
		"submission_approved | submission_id=%s | fraud_score=%s | approved_by=%s",
		submission_id,
		submission.fraud_score,
		approved_by or "unknown",
	)
	return ModerationResult(submission_id=submission_id, outcome=ModerationOutcome.APPROVED, approved_at=approved_at)


def reject_submission(store: SubmissionStore, submission_id: uuid.UUID) -> ModerationResult:
	"""Hard-delete a submission; a missing row reports NOT_FOUND so retries stay safe."""
	deleted = store.delete(submission_id)
	if not deleted:
		logger.info("moderation_target_missing | action=reject | submission_id=%s", submission_id)
		return ModerationResult(submission_id=submission_id, outcome=ModerationOutcome.NOT_FOUND)

	logger.info("submission_rejected | submission_id=%s", submission_id)
	return ModerationResult(submission_id=submission_id, outcome=ModerationOutcome.REJECTED)


def moderate_submission(
	store: SubmissionStore,
	submission_id: uuid.UUID,
	decision: ModerationDecision,
	moderator: str | None = None,
) -> ModerationResult:
	"""Dispatch an approve/reject decision to the matching gateway operation."""
	if decision is ModerationDecision.APPROVE:
		return approve_submission(store, submission_id, approved_by=moderator)
	return reject_submission(store, submission_id)


def list_review_queue(store: SubmissionStore, pending_only: bool = True, limit: int = 100) -> list[RateSubmission]:
	"""Return submissions newest first for the moderation review screen."""
	if limit < 1:
		raise ValueError("limit must be at least 1.")
	return store.list_submissions(pending_only=pending_only, limit=limit)
