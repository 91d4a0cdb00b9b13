"""Persistence boundary for rate submissions used by ingestion, moderation, and statistics."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.location_model import Location, location_label
from models.rate_submission_model import RateSubmission
from services.errors import StorageUnavailableError

if TYPE_CHECKING:
	from services.fraud_service import FraudAssessment
	from services.validation_service import ValidatedSubmission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateQuery:
	"""Filter applied to the approved-submission set before any aggregation."""

	skill_id: int
	location_id: int | None = None
	seniority: str | None = None
	since: datetime | None = None
	until: datetime | None = None


@dataclass(frozen=True)
class RateObservation:
	"""Approved rate as seen by the statistics engines."""

	hourly_rate: float
	location_id: int
	location_name: str
	created_at: datetime
	seniority_level: str


class SubmissionReader(Protocol):
	"""Read-side contract needed by the aggregation, bucket, trend, and geo builders."""

	def fetch_approved(self, query: RateQuery) -> list[RateObservation]:
		...


class SubmissionStore(SubmissionReader, Protocol):
	"""Full persistence contract used by ingestion and moderation."""

	def count_recent_from_origin(self, origin: str, since: datetime) -> int:
		...

	def insert(
		self,
		validated: "ValidatedSubmission",
		assessment: "FraudAssessment",
		origin: str | None,
	) -> RateSubmission:
		...

	def get(self, submission_id: uuid.UUID) -> RateSubmission | None:
		...

	def mark_approved(self, submission: RateSubmission, approved_at: datetime, approved_by: str | None) -> RateSubmission:
		...

	def delete(self, submission_id: uuid.UUID) -> bool:
		...

	def list_submissions(self, pending_only: bool = False, limit: int = 100) -> list[RateSubmission]:
		...


@contextmanager
def storage_guard(db: Session, operation: str) -> Iterator[None]:
	"""Translate driver failures into StorageUnavailableError after rolling back."""
	try:
		yield
	except SQLAlchemyError as exc:
		db.rollback()
		logger.error("storage_failure | operation=%s | error=%s", operation, exc.__class__.__name__)
		raise StorageUnavailableError(f"Storage unavailable during {operation}.") from exc


class SqlSubmissionStore:
	"""SQLAlchemy-backed submission store bound to one request session."""

	def __init__(self, db: Session) -> None:
		self.db = db

	def fetch_approved(self, query: RateQuery) -> list[RateObservation]:
		stmt = (
			select(
				RateSubmission.hourly_rate,
				RateSubmission.location_id,
				RateSubmission.created_at,
				RateSubmission.seniority_level,
				Location.city,
				Location.country,
			)
			.join(Location, Location.id == RateSubmission.location_id)
			.where(RateSubmission.is_approved.is_(True))
			.where(RateSubmission.skill_id == query.skill_id)
		)
		if query.location_id is not None:
			stmt = stmt.where(RateSubmission.location_id == query.location_id)
		if query.seniority is not None:
			stmt = stmt.where(RateSubmission.seniority_level == query.seniority)
		if query.since is not None:
			stmt = stmt.where(RateSubmission.created_at >= query.since)
		if query.until is not None:
			stmt = stmt.where(RateSubmission.created_at < query.until)
		stmt = stmt.order_by(RateSubmission.created_at.asc())

		with storage_guard(self.db, "fetch_approved"):
			rows = self.db.execute(stmt).all()

		return [
			RateObservation(
				hourly_rate=float(row.hourly_rate),
				location_id=int(row.location_id),
				location_name=location_label(row.city, row.country),
				created_at=row.created_at,
				seniority_level=row.seniority_level,
			)
			for row in rows
		]

	def count_recent_from_origin(self, origin: str, since: datetime) -> int:
		stmt = (
			select(func.count())
			.select_from(RateSubmission)
			.where(RateSubmission.origin == origin)
			.where(RateSubmission.created_at >= since)
		)
		with storage_guard(self.db, "count_recent_from_origin"):
			return int(self.db.execute(stmt).scalar_one())

	def insert(
		self,
		validated: "ValidatedSubmission",
		assessment: "FraudAssessment",
		origin: str | None,
	) -> RateSubmission:
		submission = RateSubmission(
			user_id=validated.user_id,
			skill_id=validated.skill_id,
			location_id=validated.location_id,
			hourly_rate=validated.hourly_rate,
			seniority_level=validated.seniority_level,
			project_type=validated.project_type,
			years_experience=validated.years_experience,
			is_approved=False,
			is_verified=False,
			fraud_score=assessment.score,
			fraud_reasons=list(assessment.reasons),
			origin=origin,
		)
		with storage_guard(self.db, "insert"):
			self.db.add(submission)
			self.db.commit()
			self.db.refresh(submission)
		return submission

	def get(self, submission_id: uuid.UUID) -> RateSubmission | None:
		with storage_guard(self.db, "get"):
			return self.db.get(RateSubmission, submission_id)

	def mark_approved(self, submission: RateSubmission, approved_at: datetime, approved_by: str | None) -> RateSubmission:
		submission.is_approved = True
		submission.is_verified = True
		submission.approved_at = approved_at
		submission.approved_by = approved_by
		with storage_guard(self.db, "mark_approved"):
			self.db.commit()
			self.db.refresh(submission)
		return submission

	def delete(self, submission_id: uuid.UUID) -> bool:
		with storage_guard(self.db, "delete"):
			result = self.db.execute(delete(RateSubmission).where(RateSubmission.id == submission_id))
			self.db.commit()
		return bool(result.rowcount)

	def list_submissions(self, pending_only: bool = False, limit: int = 100) -> list[RateSubmission]:
		stmt = select(RateSubmission).order_by(RateSubmission.created_at.desc()).limit(limit)
		if pending_only:
			stmt = stmt.where(RateSubmission.is_approved.is_(False))
		with storage_guard(self.db, "list_submissions"):
			return list(self.db.execute(stmt).scalars().unique().all())
