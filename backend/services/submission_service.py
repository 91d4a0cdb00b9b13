"""Orchestrates rate submission intake: validation, fraud scoring, and persistence."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from services.errors import RateLimitedError
from services.fraud_service import FraudPolicy, build_fraud_context, score_submission
from services.rate_repository import SubmissionStore
from services.reference_repository import ReferenceCatalog
from services.validation_service import RateCandidate, ValidationLimits, validate_submission

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "Rate submitted successfully. It will be counted once reviewed."
FLAGGED_MESSAGE = "Submission flagged for suspicious activity."


@dataclass(frozen=True)
class SubmissionOutcome:
	"""Caller-facing result; honeypot rejections are indistinguishable from acceptance."""

	accepted: bool
	message: str
	submission_id: uuid.UUID | None = None
	fraud_score: float | None = None

	def public_payload(self) -> dict[str, object]:
		"""Response body shared by accepted and honeypot-discarded submissions."""
		return {"accepted": self.accepted, "message": self.message}


def submit_rate(
	store: SubmissionStore,
	catalog: ReferenceCatalog,
	candidate: RateCandidate,
	origin: str | None,
	limits: ValidationLimits | None = None,
	policy: FraudPolicy | None = None,
	hard_cap: int | None = None,
	now: datetime | None = None,
) -> SubmissionOutcome:
	"""Validate, score, and store one candidate as an unapproved submission.

	Raises the validation errors of :func:`validate_submission`, and
	``RateLimitedError`` once an origin reaches ``hard_cap`` submissions inside
	the scoring window. Below the cap, frequent submitters are stored with a
	higher fraud score rather than refused.
	"""
	active_policy = policy or FraudPolicy()
	current = now or datetime.now(timezone.utc)

	validated = validate_submission(candidate, catalog, limits)
	if validated.honeypot_tripped:
		logger.info("submission_discarded | reason=honeypot | origin=%s", origin)
		return SubmissionOutcome(accepted=True, message=ACCEPTED_MESSAGE)

	context = build_fraud_context(store, validated, origin, policy=active_policy, now=current)
	if hard_cap is not None and origin and context.recent_origin_count >= hard_cap:
		logger.warning("submission_throttled | origin=%s | recent_count=%s", origin, context.recent_origin_count)
		raise RateLimitedError("Too many submissions from your network. Please try again later.")

	assessment = score_submission(validated, context, active_policy)
	if assessment.should_auto_reject(active_policy):
		logger.warning(
			"submission_auto_rejected | origin=%s | fraud_score=%s | reasons=%s",
			origin,
			assessment.score,
			",".join(assessment.reasons),
		)
		return SubmissionOutcome(accepted=False, message=FLAGGED_MESSAGE, fraud_score=assessment.score)

	submission = store.insert(validated, assessment, origin)
	logger.info(
		"submission_stored | submission_id=%s | skill_id=%s | location_id=%s | fraud_score=%s | reasons=%s",
		submission.id,
		validated.skill_id,
		validated.location_id,
		assessment.score,
		",".join(assessment.reasons) or "none",
	)
	return SubmissionOutcome(
		accepted=True,
		message=ACCEPTED_MESSAGE,
		submission_id=submission.id,
		fraud_score=assessment.score,
	)
