"""
Custom exceptions for the address eligibility service with structured error context.

Every exception carries a context dictionary for logging and for the error
body returned by the API. Only connection-level failures cross the boundary
of an eligibility check; lookup and normalization failures are folded into
the check trace by the pipeline.

Exception Hierarchy:
    EligibilityException (base)
    ├── TrackedDatabaseNotFoundError
    ├── TrackedDatabaseConnectionError
    ├── ListLookupError
    ├── NormalizationError
    └── ListMutationError
        ├── DuplicateEntryError
        └── EntryNotFoundError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class EligibilityException(Exception):
    """
    Base exception for all eligibility service errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (database, list, row id, etc.)
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

        # Add timestamp to context
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
        """Convert exception to dictionary for logging/responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Tracked Database Errors
# ============================================================================

class TrackedDatabaseNotFoundError(EligibilityException):
    """
    Raised when a database reference does not resolve to a registered
    tracked database.

    Context should include:
        - database_ref: The reference that was looked up
    """
    pass


class TrackedDatabaseConnectionError(EligibilityException):
    """
    Raised when a connection to a tracked database cannot be opened.

    This is the only error that aborts an eligibility check; it is raised
    before any step of the trace is produced.

    Context should include:
        - database_ref: The tracked database reference
        - database_name: Name of the target database
    """
    pass


# ============================================================================
# Check-time Errors (absorbed into the trace)
# ============================================================================

class ListLookupError(EligibilityException):
    """
    Raised when a single blacklist, whitelist or status-list query fails.

    Context should include:
        - list_name: blacklist, whitelist or statuslist
    """
    pass


class NormalizationError(EligibilityException):
    """
    Raised when the canonicalization functions are unavailable or fail.

    Context should include:
        - field: The address field being canonicalized
    """
    pass


# ============================================================================
# List Mutation Errors
# ============================================================================

class ListMutationError(EligibilityException):
    """Base exception for blacklist/whitelist create, update and delete failures."""
    pass


class DuplicateEntryError(ListMutationError):
    """
    Raised when another row of the same list already has the key tuple
    (address1_upd, address2_upd, city_upd, state, zip).

    Context should include:
        - list_name: blacklist or whitelist
        - key: The conflicting key tuple
    """
    pass


class EntryNotFoundError(ListMutationError):
    """
    Raised when an update or delete targets a row id that does not exist.

    Context should include:
        - list_name: blacklist or whitelist
        - row_id: The missing row id
    """
    pass
