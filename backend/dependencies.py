"""Shared dependency providers and injectable backend application dependencies."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from database import get_db as database_get_db
from services.rate_repository import SqlSubmissionStore
from services.reference_repository import SqlReferenceCatalog


def get_db() -> Generator[Session, None, None]:
	"""Expose database session dependency for FastAPI route handlers."""
	yield from database_get_db()


def get_submission_store(db: Session = Depends(get_db)) -> SqlSubmissionStore:
	"""Bind the submission store to the request session."""
	return SqlSubmissionStore(db)


def get_reference_catalog(db: Session = Depends(get_db)) -> SqlReferenceCatalog:
	"""Bind the reference catalog to the request session."""
	return SqlReferenceCatalog(db)


def get_request_origin(request: Request) -> str:
	"""Return the originating address, preferring the first X-Forwarded-For hop."""
	forwarded = request.headers.get("x-forwarded-for", "")
	first_hop = forwarded.split(",")[0].strip()
	if first_hop:
		return first_hop[:64]
	if request.client and request.client.host:
		return request.client.host
	return "127.0.0.1"
