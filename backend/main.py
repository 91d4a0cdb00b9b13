"""Backend API application entrypoint for the PriceIQ freelance rate aggregation service."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from data_store import seed_demo_submissions, seed_reference_data
from database import SessionLocal, check_database_connection, init_db
from dependencies import get_db
from routes import (
	ingestion_routes,
	moderation_routes,
	rates_routes,
	reference_routes,
	submission_routes,
	tools_routes,
)
from services.errors import (
	NotFoundError,
	RateLimitedError,
	RateServiceError,
	StorageUnavailableError,
	SubmissionValidationError,
)

ERROR_STATUS_CODES: dict[type[RateServiceError], int] = {
	SubmissionValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
	RateLimitedError: status.HTTP_429_TOO_MANY_REQUESTS,
	NotFoundError: status.HTTP_404_NOT_FOUND,
	StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

RATE_LIMIT_RETRY_AFTER_SECONDS = 3600


def configure_logging(app_settings: Settings) -> logging.Logger:
	"""Install the pipe-delimited log format and return the service logger."""
	level = getattr(logging, app_settings.log_level.upper(), logging.INFO)
	logging.basicConfig(level=level, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
	service_logger = logging.getLogger("rate-aggregator")
	service_logger.setLevel(level)
	return service_logger


settings = get_settings()
logger = configure_logging(settings)


def seed_startup_data(app_settings: Settings) -> None:
	"""Load reference catalogs, then optional demo submissions, into the database."""
	if not app_settings.SEED_REFERENCE_DATA:
		logger.info("startup_seed_skipped | reason=disabled")
		return
	with SessionLocal() as db:
		seed_reference_data(db)
		if app_settings.SEED_DEMO_SUBMISSIONS > 0:
			seed_demo_submissions(db, count=app_settings.SEED_DEMO_SUBMISSIONS)


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Create the schema and seed reference data before serving requests."""
	logger.info("service_starting | app=%s | version=%s | environment=%s", settings.app_name, settings.app_version, settings.environment)
	init_db()
	seed_startup_data(settings)
	app.state.started_at = time.time()
	app.state.instance_id = str(uuid.uuid4())
	app.state.environment = settings.environment
	yield
	logger.info("service_stopping | app=%s", settings.app_name)


def add_request_context_middleware(app: FastAPI) -> None:
	"""Tag every request with an id and log its outcome and latency."""

	@app.middleware("http")
	async def request_context(request: Request, call_next: Callable):
		request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
		request.state.request_id = request_id
		started = time.perf_counter()

		response = await call_next(request)

		latency_ms = round((time.perf_counter() - started) * 1000, 2)
		response.headers["X-Request-ID"] = request_id
		response.headers["X-Response-Time-ms"] = str(latency_ms)
		logger.info(
			"request_complete | request_id=%s | method=%s | path=%s | status=%s | latency_ms=%s",
			request_id,
			request.method,
			request.url.path,
			response.status_code,
			latency_ms,
		)
		return response


def status_code_for(exc: RateServiceError) -> int:
	"""Map a service error onto its HTTP status, walking the class hierarchy."""
	for error_class in type(exc).__mro__:
		if error_class in ERROR_STATUS_CODES:
			return ERROR_STATUS_CODES[error_class]
	return status.HTTP_400_BAD_REQUEST


def error_response(
	request: Request,
	status_code: int,
	error_type: str,
	message: Any,
	headers: dict[str, str] | None = None,
	**extra: Any,
) -> JSONResponse:
	"""Render the shared ``{"error": {...}}`` envelope carrying the request id."""
	error = {"type": error_type, "message": message, **extra}
	error["request_id"] = getattr(request.state, "request_id", "unknown")
	return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
	"""Render every error, expected or not, in the shared envelope."""
	@app.exception_handler(StarletteHTTPException)
	async def handle_http_exception(request: Request, exc: StarletteHTTPException):
		return error_response(request, exc.status_code, "http_error", exc.detail)

	@app.exception_handler(RequestValidationError)
	async def handle_request_validation(request: Request, exc: RequestValidationError):
		details = [
			{"loc": list(item.get("loc", ())), "msg": item.get("msg", ""), "type": item.get("type", "")}
			for item in exc.errors()
		]
		return error_response(
			request,
			status.HTTP_422_UNPROCESSABLE_ENTITY,
			"validation_error",
			"Request payload validation failed.",
			details=details,
		)

	@app.exception_handler(RateServiceError)
	async def handle_rate_service_error(request: Request, exc: RateServiceError):
		if isinstance(exc, StorageUnavailableError):
			logger.error("storage_unavailable | request_id=%s | message=%s", getattr(request.state, "request_id", "unknown"), exc)
		extra: dict[str, Any] = {}
		if isinstance(exc, SubmissionValidationError):
			extra["field"] = exc.field
		headers = None
		if isinstance(exc, RateLimitedError):
			headers = {"Retry-After": str(RATE_LIMIT_RETRY_AFTER_SECONDS)}
		return error_response(request, status_code_for(exc), exc.error_type, str(exc), headers=headers, **extra)

	@app.exception_handler(Exception)
	async def handle_unexpected(request: Request, exc: Exception):
		logger.exception("unhandled_exception | request_id=%s", getattr(request.state, "request_id", "unknown"))
		return error_response(
			request,
			status.HTTP_500_INTERNAL_SERVER_ERROR,
			"internal_server_error",
			"An unexpected error occurred.",
		)


def register_routes(app: FastAPI, app_settings: Settings) -> None:
	"""Mount each API router under the configured prefix."""
	for router in (
		reference_routes,
		rates_routes,
		submission_routes,
		moderation_routes,
		tools_routes,
		ingestion_routes,
	):
		app.include_router(router, prefix=app_settings.api_prefix)


def create_app() -> FastAPI:
	"""Build the FastAPI application with middleware, error handlers, and routers."""
	app = FastAPI(
		title=settings.app_name,
		version=settings.app_version,
		description=settings.app_description,
		debug=settings.debug,
		lifespan=lifespan,
		docs_url="/docs",
		redoc_url="/redoc",
		openapi_url=f"{settings.api_prefix}/openapi.json",
	)

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.allowed_cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	add_request_context_middleware(app)
	register_exception_handlers(app)
	register_routes(app, settings)

	@app.get("/", tags=["system"], summary="Root endpoint")
	def root() -> dict[str, str]:
		return {"service": settings.app_name, "version": settings.app_version, "status": "running"}

	@app.get("/health", tags=["system"], summary="Service health check")
	def health_check(db: Session = Depends(get_db)) -> dict[str, object]:
		"""Report database reachability, uptime, and instance identity."""
		_ = db
		db_ok = check_database_connection()
		return {
			"status": "healthy" if db_ok else "degraded",
			"code": "ok" if db_ok else "db_unreachable",
			"environment": app.state.environment,
			"version": settings.app_version,
			"instance_id": app.state.instance_id,
			"database": {"connected": db_ok},
			"uptime_seconds": int(time.time() - app.state.started_at),
		}

	return app


app = create_app()
