"""
Entry point for eligibility checks against a registered tracked database
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import TrackedDatabaseConnector
from eligibility.lookups import PostgresListLookup
from eligibility.normalizer import AddressNormalizer, SqlCanonicalizer
from eligibility.pipeline import EligibilityPipeline
from schemas.check import CheckResult
import logging

logger = logging.getLogger(__name__)


class AddressCheckService:
    """
    Wires a scoped tracked-database connection to the eligibility pipeline.

    Connection acquisition is the only failure that escapes check_address;
    everything after it is reported inside the returned CheckResult.
    """

    def __init__(
        self,
        connector: TrackedDatabaseConnector,
        occupancy_limit: Optional[int] = None,
        failure_policy: Optional[str] = None
    ):
        self.connector = connector
        self.occupancy_limit = occupancy_limit
        self.failure_policy = failure_policy

    async def check_address(
        self,
        database_ref: str,
        session: AsyncSession,
        address1: str,
        address2: str,
        city: str,
        state: str,
        zip_code: str,
        program_type: str
    ) -> CheckResult:
        """
        Check one address against the lists of a tracked database.

        Raises:
            TrackedDatabaseNotFoundError: If database_ref is not registered
            TrackedDatabaseConnectionError: If the tracked database is unreachable
        """
        async with self.connector.connect(database_ref, session) as connection:
            pipeline = EligibilityPipeline(
                normalizer=AddressNormalizer(SqlCanonicalizer(connection)),
                lookup=PostgresListLookup(connection),
                occupancy_limit=self.occupancy_limit,
                failure_policy=self.failure_policy,
            )
            return await pipeline.run(address1, address2, city, state, zip_code, program_type)
