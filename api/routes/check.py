"""
Address eligibility check endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_check_service, get_presenter
from api.middleware import get_request_id
from eligibility.presenter import ResultPresenter
from eligibility.service import AddressCheckService
from schemas.check import CheckAddressRequest, CheckResult, CheckReport
import time
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tracked-databases", tags=["Address Check"])


async def _run_check(
    request_id: str,
    database_id: str,
    payload: CheckAddressRequest,
    db: AsyncSession,
    service: AddressCheckService
) -> CheckResult:
    start_time = time.time()

    logger.info(
        f"[{request_id}] POST check-address db={database_id} "
        f"programType={payload.program_type} state={payload.state} zip={payload.zip}"
    )

    result = await service.check_address(
        database_id,
        db,
        payload.address1,
        payload.address2,
        payload.city,
        payload.state,
        payload.zip,
        payload.program_type,
    )

    api_latency_ms = (time.time() - start_time) * 1000
    logger.info(
        f"[{request_id}] success={result.success} steps={len(result.steps)} "
        f"({api_latency_ms:.2f}ms): {result.final_message}"
    )
    return result


@router.post("/{database_id}/check-address", response_model=CheckResult)
async def check_address(
    database_id: str,
    payload: CheckAddressRequest,
    request_id: str = Depends(get_request_id),
    db: AsyncSession = Depends(get_db),
    service: AddressCheckService = Depends(get_check_service)
):
    """
    Check whether an address may proceed.

    The full step trace is computed and returned in one round trip. A
    tracked database that cannot be reached yields 503 with no steps.
    """
    return await _run_check(request_id, database_id, payload, db, service)


@router.post("/{database_id}/check-address/report", response_model=CheckReport)
async def check_address_report(
    database_id: str,
    payload: CheckAddressRequest,
    request_id: str = Depends(get_request_id),
    db: AsyncSession = Depends(get_db),
    service: AddressCheckService = Depends(get_check_service),
    presenter: ResultPresenter = Depends(get_presenter)
):
    """Run a check and return its human-readable audit view"""
    result = await _run_check(request_id, database_id, payload, db, service)
    return presenter.render(result)
