"""
Custom exceptions for the sync and aggregation pipeline with structured error context.

Each exception carries a human-readable message plus a context dict so that
failures can be logged and stored on the sync run without losing detail.

Exception Hierarchy:
    PipelineException (base)
    ├── ConfigurationError
    ├── SourceError
    │   ├── NetworkError
    │   ├── RateLimitError
    │   ├── AuthenticationError
    │   ├── ResourceNotFoundError
    │   ├── SourceResponseError
    │   └── PaginationLimitError
    ├── TransformationError
    │   └── NormalizationError
    ├── LoadError
    │   ├── UpsertError
    │   └── DuplicateRecordError
    ├── FilterValidationError
    └── RetryableError / NonRetryableError (mixins)

Fatal vs non-fatal:
    ConfigurationError and every SourceError abort a sync run.
    NormalizationError and UpsertError only skip the offending record.
"""

from typing import Optional, Dict, Any
from datetime import datetime


class PipelineException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (source, record id, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(PipelineException):
    """
    Mixin for errors that should trigger request-level retry logic.

    Use this for transient errors like:
    - Network timeouts
    - Rate limiting (HTTP 429)
    - Service unavailable (HTTP 5xx)

    Retry counts and delays belong to the client that raises these.
    """
    pass


class NonRetryableError(PipelineException):
    """
    Mixin for errors that should NOT trigger retry logic.

    Use this for permanent errors like:
    - Missing credentials
    - Authentication failures (HTTP 401, 403)
    - Resource not found (HTTP 404)
    - Invalid filter input
    """
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(NonRetryableError):
    """
    Raised when required configuration is missing or invalid.

    Context should include:
        - missing: Names of the missing settings
    """
    pass


# ============================================================================
# Source Errors
# ============================================================================

class SourceError(PipelineException):
    """
    Base exception for failures while reading the external task source.

    Context should include:
        - api_url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
        - page: Page number being fetched
    """
    pass


class NetworkError(RetryableError, SourceError):
    """Timeouts, connection failures and 5xx responses that survived retries."""
    pass


class RateLimitError(RetryableError, SourceError):
    """Rate limiting errors (HTTP 429) that should be retried with backoff."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class AuthenticationError(NonRetryableError, SourceError):
    """Authentication failures (HTTP 401, 403) that should not be retried."""
    pass


class ResourceNotFoundError(NonRetryableError, SourceError):
    """Resource not found errors (HTTP 404) that should not be retried."""
    pass


class SourceResponseError(NonRetryableError, SourceError):
    """Any other non-success response, or a body that cannot be parsed."""
    pass


class PaginationLimitError(NonRetryableError, SourceError):
    """
    Raised when the source keeps returning continuation tokens past the
    configured page or wall-clock bound.

    Context should include:
        - pages_fetched: Pages read before giving up
        - max_pages / max_duration_seconds: The bound that tripped
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(PipelineException):
    """Base exception for record transformation failures."""
    pass


class NormalizationError(TransformationError):
    """
    Raised when a raw task cannot be normalized at all (e.g. no external id).

    Context should include:
        - field_name: The field that made the record unusable
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(PipelineException):
    """Base exception for persistence failures."""
    pass


class UpsertError(LoadError):
    """
    Raised when a single task upsert fails.

    Context should include:
        - external_id: ID of the record being upserted
        - operation: UPSERT
    """
    pass


class DuplicateRecordError(LoadError):
    """
    Raised when an insert collides with a unique key (e.g. a second day off
    for the same member and date).
    """
    pass


# ============================================================================
# Aggregation Errors
# ============================================================================

class FilterValidationError(NonRetryableError):
    """
    Raised when aggregation filter criteria are malformed.

    Context should include:
        - field_name: The offending filter field
        - field_value: The rejected value
    """
    pass
