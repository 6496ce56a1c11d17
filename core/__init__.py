"""
Core utilities and configuration for the address eligibility service.

This package provides foundational components used throughout the service:

Modules:
    config: Application configuration and environment variable management
    database: Registry session management and scoped tracked-database connections
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import get_session, TrackedDatabaseConnector
    from core.exceptions import TrackedDatabaseConnectionError, DuplicateEntryError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Open a scoped connection to a tracked database
    connector = TrackedDatabaseConnector()
    async with connector.connect(database_ref, session) as connection:
        # Perform lookups
        pass
"""

__all__ = [
    "settings",
    "get_session",
    "TrackedDatabaseConnector",
    "setup_logging",
    # Exceptions
    "EligibilityException",
    "TrackedDatabaseNotFoundError",
    "TrackedDatabaseConnectionError",
    "ListLookupError",
    "NormalizationError",
    "ListMutationError",
    "DuplicateEntryError",
    "EntryNotFoundError",
]
