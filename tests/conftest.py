"""
Pytest configuration for the rate aggregation service.

Provides fixtures for:
- In-memory SQLite schema per test
- Seeded skill and location reference data
- Repository handles and an approved-submission factory
- A FastAPI test client bound to the test session
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_REFERENCE_DATA"] = "false"
os.environ["SEED_DEMO_SUBMISSIONS"] = "0"

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy.orm import Session

from data_store import seed_reference_data
from database import SessionLocal, drop_db, init_db
from models.location_model import Location
from models.rate_submission_model import RateSubmission
from models.skill_model import Skill
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh schema and session for every test."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_db()


@pytest.fixture
def reference_data(db_session: Session) -> dict[str, dict[str, Any]]:
    """Seed the skill/location catalogs and index them by name."""
    seed_reference_data(db_session)
    skills = {skill.name: skill for skill in db_session.query(Skill).all()}
    locations = {location.city: location for location in db_session.query(Location).all()}
    return {"skills": skills, "locations": locations}


@pytest.fixture
def store(db_session: Session) -> SqlSubmissionStore:
    return SqlSubmissionStore(db_session)


@pytest.fixture
def catalog(db_session: Session, reference_data: dict[str, dict[str, Any]]) -> SqlReferenceCatalog:
    return SqlReferenceCatalog(db_session)


@pytest.fixture
def add_approved(db_session: Session, reference_data: dict[str, dict[str, Any]]) -> Callable[..., RateSubmission]:
    """
    Factory inserting approved submissions directly, bypassing intake.

    Skills and locations are given by name (location by city).
    """

    def _add(
        rate: float,
        skill: str = "React",
        city: str = "Remote",
        seniority: str = "mid",
        created_at: datetime | None = None,
        approved: bool = True,
    ) -> RateSubmission:
        submission = RateSubmission(
            skill_id=reference_data["skills"][skill].id,
            location_id=reference_data["locations"][city].id,
            hourly_rate=rate,
            seniority_level=seniority,
            project_type="hourly",
            years_experience=5,
            is_approved=approved,
            is_verified=approved,
            fraud_score=0,
            fraud_reasons=[],
            created_at=created_at or datetime.now(timezone.utc),
        )
        db_session.add(submission)
        db_session.commit()
        return submission

    return _add


@pytest.fixture
def client(db_session: Session, reference_data: dict[str, dict[str, Any]]):
    """TestClient whose requests share the test session."""
    from fastapi.testclient import TestClient

    from dependencies import get_db
    from main import app

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
