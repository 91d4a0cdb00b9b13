"""SQLAlchemy engine, session factory, and schema bootstrap for the rate store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings


settings = get_settings()

Base = declarative_base()

POSTGRES_POOL_OPTIONS: dict[str, Any] = {
	"pool_size": 20,
	"max_overflow": 40,
	"pool_timeout": 30,
	"pool_use_lifo": True,
}


def _is_in_memory_sqlite(database_url: str) -> bool:
	return database_url.startswith("sqlite") and (":memory:" in database_url or database_url.rstrip("/").endswith(":"))


def build_engine(database_url: str) -> Engine:
	"""Create the engine for the configured backend.

	SQLite connections are shared across the request threadpool; an in-memory
	SQLite database is pinned to a single connection so every session sees the
	same schema. Server databases get pre-ping and recycling, and PostgreSQL
	additionally gets a sized LIFO pool.
	"""
	if database_url.startswith("sqlite"):
		sqlite_options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
		if _is_in_memory_sqlite(database_url):
			sqlite_options["poolclass"] = StaticPool
		return create_engine(database_url, **sqlite_options)

	server_options: dict[str, Any] = {"pool_pre_ping": True, "pool_recycle": 1800}
	if database_url.startswith("postgresql"):
		server_options.update(POSTGRES_POOL_OPTIONS)
	return create_engine(database_url, **server_options)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
	"""Yield one session per request and close it once the response is sent."""
	with SessionLocal() as session:
		yield session


def init_db() -> None:
	"""Register the rate store models and create any missing tables."""
	from models import location_model, rate_submission_model, skill_model  # noqa: F401

	Base.metadata.create_all(bind=engine)


def drop_db() -> None:
	"""Drop every rate store table; used to reset throwaway databases."""
	Base.metadata.drop_all(bind=engine)


def check_database_connection() -> bool:
	"""Return whether a trivial query round-trips to the configured database."""
	try:
		with engine.connect() as connection:
			connection.execute(text("SELECT 1"))
	except SQLAlchemyError:
		return False
	return True
