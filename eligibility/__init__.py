"""
Address eligibility check components.

Modules:
    normalizer: Canonicalization of address1/address2/city into the NormalizedKey
    program_types: Program type tag to occupancy category mapping
    lookups: Blacklist, whitelist and status list queries
    pipeline: The ordered blacklist -> whitelist -> status list check
    presenter: Human-readable audit view of a check trace
    service: Check entry point bound to a tracked database connection
    lists: Blacklist and whitelist administration

Architecture:
    A check runs four stages in a fixed order:

    1. Normalize - canonical key, falling back to raw values on failure
    2. Blacklist - presence blocks the address
    3. Whitelist - presence passes while capacity exceeds occupancy
    4. Status list - occupancy against the default limit

    The first stage to reach a verdict ends the run; the trace records one
    step per stage that ran.

Usage:
    from eligibility.service import AddressCheckService
    from eligibility.presenter import ResultPresenter

Example:
    service = AddressCheckService(TrackedDatabaseConnector())
    result = await service.check_address(
        database_ref, session,
        "123 Main St", "", "Springfield", "IL", "62701", "LL+ACP"
    )
    report = ResultPresenter().render(result)
    print(report.verdict, report.final_message)
"""

__all__ = [
    "AddressNormalizer",
    "SqlCanonicalizer",
    "ListLookup",
    "PostgresListLookup",
    "EligibilityPipeline",
    "ResultPresenter",
    "AddressCheckService",
    "AddressListService",
    "normalize_program_type",
]
