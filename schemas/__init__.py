"""
Pydantic schemas for data validation and serialization.

Schemas:
    check: Eligibility check request, step trace, result and audit report
    lists: Blacklist, whitelist and status list rows and pages
    api: Health, tracked database registry and error responses

Features:
    - Automatic request validation (required, trimmed, two-letter state)
    - camelCase JSON for the check contract (stepName, stopProcess, finalMessage)
    - OpenAPI schema generation for FastAPI

Usage:
    from schemas.check import CheckAddressRequest, CheckResult, CheckStep
    from schemas.lists import WhitelistEntryCreate, WhitelistPage

Example:
    request = CheckAddressRequest(
        address1="123 Main St",
        city="Springfield",
        state="il",
        zip="62701",
        programType="LL"
    )
    assert request.state == "IL"
"""

__all__ = [
    "CheckAddressRequest",
    "CheckStep",
    "CheckResult",
    "CheckReport",
    "ReportLine",
    "BlacklistEntryCreate",
    "WhitelistEntryCreate",
    "BlacklistEntryResponse",
    "WhitelistEntryResponse",
    "StatusListRecordResponse",
    "HealthCheckResponse",
    "TrackedDatabaseCreate",
    "TrackedDatabaseResponse",
    "ErrorResponse",
]
