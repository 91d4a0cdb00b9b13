"""Error taxonomy shared by the rate ingestion, moderation, and statistics services."""

from __future__ import annotations


class RateServiceError(ValueError):
	"""Base class for recoverable rate service failures surfaced to callers."""

	error_type = "rate_service_error"


class SubmissionValidationError(RateServiceError):
	"""Raised when a candidate submission fails a validation check."""

	error_type = "validation_error"

	def __init__(self, field: str, message: str) -> None:
		super().__init__(message)
		self.field = field


class ReferenceNotFoundError(SubmissionValidationError):
	"""Raised when a skill or location cannot be resolved to a reference row."""

	error_type = "reference_not_found"


class OutOfRangeError(SubmissionValidationError):
	"""Raised when a numeric field lies outside its plausible bounds."""

	error_type = "out_of_range"


class InvalidEnumError(SubmissionValidationError):
	"""Raised when an enumerated field is not one of its allowed members."""

	error_type = "invalid_enum"


class RateLimitedError(RateServiceError):
	"""Raised when one origin exceeds the hard submission cap for the window."""

	error_type = "rate_limited"


class NotFoundError(RateServiceError):
	"""Raised when a referenced skill, location, or submission does not exist."""

	error_type = "not_found"


class StorageUnavailableError(RateServiceError):
	"""Raised when the persistence layer fails; callers decide whether to retry."""

	error_type = "storage_unavailable"
