"""Persistence model for community-submitted hourly rate observations."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base

if TYPE_CHECKING:
	from models.location_model import Location
	from models.skill_model import Skill


class Seniority(str, Enum):
	"""Self-reported seniority band of the submitter."""

	JUNIOR = "junior"
	MID = "mid"
	SENIOR = "senior"
	EXPERT = "expert"


class ProjectType(str, Enum):
	"""Engagement model the rate was charged under."""

	HOURLY = "hourly"
	FIXED = "fixed"


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class RateSubmission(Base):
	"""Single hourly rate data point; counted by aggregates only once approved."""

	__tablename__ = "rate_submissions"
	__table_args__ = (
		CheckConstraint("hourly_rate > 0", name="ck_rate_submissions_positive_rate"),
		CheckConstraint("fraud_score >= 0 AND fraud_score <= 1", name="ck_rate_submissions_fraud_score_range"),
		CheckConstraint("years_experience IS NULL OR years_experience >= 0", name="ck_rate_submissions_years"),
		Index("ix_rate_submissions_skill_approved", "skill_id", "is_approved"),
		Index("ix_rate_submissions_origin_created", "origin", "created_at"),
	)

	id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
	user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)
	skill_id: Mapped[int] = mapped_column(Integer, ForeignKey("skills.id", ondelete="RESTRICT"), nullable=False)
	location_id: Mapped[int] = mapped_column(
		Integer,
		ForeignKey("locations.id", ondelete="RESTRICT"),
		nullable=False,
		index=True,
	)
	hourly_rate: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
	seniority_level: Mapped[str] = mapped_column(String(16), nullable=False)
	project_type: Mapped[str] = mapped_column(String(16), nullable=False)
	years_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
	is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
	is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
	fraud_score: Mapped[float] = mapped_column(Numeric(5, 4), nullable=False, default=0, server_default="0")
	fraud_reasons: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
	origin: Mapped[str | None] = mapped_column(String(64), nullable=True)
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True),
		nullable=False,
		default=_utcnow,
		server_default=func.now(),
	)
	approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
	approved_by: Mapped[str | None] = mapped_column(String(120), nullable=True)

	skill: Mapped["Skill"] = relationship("Skill", lazy="joined")
	location: Mapped["Location"] = relationship("Location", lazy="joined")

	def to_review_dict(self) -> dict[str, Any]:
		"""Flatten the row for the moderation review queue."""
		return {
			"id": str(self.id),
			"skill": self.skill.name if self.skill else None,
			"location": self.location.display_name if self.location else None,
			"hourly_rate": float(self.hourly_rate),
			"seniority_level": self.seniority_level,
			"project_type": self.project_type,
			"years_experience": self.years_experience,
			"is_approved": self.is_approved,
			"is_verified": self.is_verified,
			"fraud_score": float(self.fraud_score),
			"fraud_reasons": list(self.fraud_reasons or []),
			"created_at": self.created_at.isoformat() if self.created_at else None,
			"approved_at": self.approved_at.isoformat() if self.approved_at else None,
		}
