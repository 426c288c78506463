"""
Custom exceptions for the vendor sync pipeline with structured error context.

Each exception carries a context dictionary for debugging and for the
failure message recorded on the sync run.

Exception Hierarchy:
    SyncException (base)
    ├── RetryableError
    │   └── FetchError
    ├── ExhaustedRetriesError
    ├── NonRetryableError
    │   └── ParseError
    ├── PersistenceError
    └── ConfigurationError

Per-record defects (missing id, bad coordinates) are not exceptions: adapters
log and skip them.
"""

from typing import Optional, Dict, Any
from core.clock import utcnow


class SyncException(Exception):
    """
    Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (vendor, url, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = utcnow()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {self.original_exception}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
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

class RetryableError(SyncException):
    """
    Errors that the retry fetcher may retry.

    Only transport-level failures belong here: a structurally broken payload
    will not fix itself on the next attempt.
    """
    pass


class NonRetryableError(SyncException):
    """Errors that must not be retried."""
    pass


# ============================================================================
# Fetch Errors
# ============================================================================

class FetchError(RetryableError):
    """
    Raised by an adapter when a single fetch fails.

    Covers non-2xx responses, transport errors and timeouts.

    Context should include:
        - url: The feed URL
        - status_code: HTTP status code (if a response was received)
        - vendor: Adapter label
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        if status_code is not None:
            self.context["status_code"] = status_code


class ExhaustedRetriesError(SyncException):
    """
    Raised when every fetch attempt failed.

    Wraps the last FetchError, which is also chained as __cause__.
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Optional[FetchError] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, context, original_exception=last_error)
        self.attempts = attempts
        self.last_error = last_error
        self.context["attempts"] = attempts


# ============================================================================
# Parse Errors
# ============================================================================

class ParseError(NonRetryableError):
    """
    Raised when a payload is structurally malformed.

    Only for top-level decode failures or an unexpected root shape, never for
    individual bad records.
    """
    pass


# ============================================================================
# Persistence / Configuration Errors
# ============================================================================

class PersistenceError(SyncException):
    """
    Raised when a store operation fails.

    Context should include:
        - operation: INSERT, UPSERT, UPDATE, DELETE
        - table_name: Name of the table
        - vendor_id: Vendor the operation was for
    """
    pass


class ConfigurationError(SyncException):
    """Vendor cannot be synced as configured (no adapter, no feed URL)."""
    pass
