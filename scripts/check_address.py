"""
Script to run one address eligibility check from the command line

Usage:
    python scripts/check_address.py <database_id> --address1 "123 Main St" \
        --city Springfield --state IL --zip 62701 --program-type LL+ACP

Exit status: 0 when the check passes, 1 when it fails, 2 on infrastructure errors.
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.database import TrackedDatabaseConnector
from core.exceptions import EligibilityException
from eligibility.presenter import ResultPresenter
from eligibility.service import AddressCheckService
from schemas.check import CheckAddressRequest

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ICONS = {"success": "[ OK ]", "error": "[FAIL]", "skipped": "[ -- ]"}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Check address eligibility against a tracked database")
    parser.add_argument("database_id", help="Registered tracked database id")
    parser.add_argument("--address1", required=True)
    parser.add_argument("--address2", default="")
    parser.add_argument("--city", required=True)
    parser.add_argument("--state", required=True)
    parser.add_argument("--zip", required=True)
    parser.add_argument("--program-type", required=True, dest="program_type")
    parser.add_argument("--occupancy-limit", type=int, default=None)
    parser.add_argument("--fail-closed", action="store_true", help="Treat lookup errors as a failed check")
    return parser.parse_args(argv)


async def run_check(args) -> int:
    """Run the check and print the audit view"""
    try:
        request = CheckAddressRequest(
            address1=args.address1,
            address2=args.address2,
            city=args.city,
            state=args.state,
            zip=args.zip,
            program_type=args.program_type,
        )
    except ValidationError as e:
        logger.error(f"Invalid address: {e}")
        return 2

    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    connector = TrackedDatabaseConnector()
    service = AddressCheckService(
        connector,
        occupancy_limit=args.occupancy_limit,
        failure_policy="fail_closed" if args.fail_closed else None,
    )

    try:
        async with AsyncSessionLocal() as session:
            result = await service.check_address(
                args.database_id,
                session,
                request.address1,
                request.address2,
                request.city,
                request.state,
                request.zip,
                request.program_type,
            )
    except EligibilityException as e:
        logger.error(f"Address check error: {e}")
        return 2
    finally:
        await connector.dispose()
        await engine.dispose()

    report = ResultPresenter().render(result)
    for line in report.lines:
        print(f"{ICONS.get(line.icon, line.icon)} {line.step_name}: {line.text}")
    print(report.verdict)
    print(report.final_message)

    return 0 if result.success == 1 else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(run_check(parse_args())))
