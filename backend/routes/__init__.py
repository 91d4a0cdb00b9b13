from .reference_routes import router as reference_routes
from .rates_routes import router as rates_routes
from .submission_routes import router as submission_routes
from .moderation_routes import router as moderation_routes
from .tools_routes import router as tools_routes
from .ingestion_routes import router as ingestion_routes

__all__ = [
    "reference_routes",
    "rates_routes",
    "submission_routes",
    "moderation_routes",
    "tools_routes",
    "ingestion_routes",
]
