"""
Blacklist, whitelist and status list endpoints with pagination and filtering
"""

from contextlib import asynccontextmanager
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_connector, get_username
from core.database import TrackedDatabaseConnector
from eligibility.lists import AddressListService
from eligibility.normalizer import AddressNormalizer, SqlCanonicalizer
from schemas.lists import (
    BlacklistEntryCreate,
    BlacklistEntryResponse,
    BlacklistPage,
    ListFilters,
    PaginationMetadata,
    StatusListPage,
    StatusListRecordResponse,
    WhitelistEntryCreate,
    WhitelistEntryResponse,
    WhitelistPage,
)
from typing import Optional
import math
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tracked-databases/{database_id}", tags=["Address Lists"])


@asynccontextmanager
async def list_service(database_id: str, db: AsyncSession, connector: TrackedDatabaseConnector):
    async with connector.connect(database_id, db) as connection:
        yield AddressListService(connection, AddressNormalizer(SqlCanonicalizer(connection)))


def list_filters(
    address1: Optional[str] = Query(None),
    address2: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    zip: Optional[str] = Query(None),
    programtype: Optional[str] = Query(None),
) -> ListFilters:
    return ListFilters(
        address1=address1,
        address2=address2,
        city=city,
        state=state.upper() if state else None,
        zip=zip,
        programtype=programtype,
    )


def paginate(total_items: int, page: int, page_size: int) -> PaginationMetadata:
    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0
    return PaginationMetadata(
        current_page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


# ============================================================================
# Blacklist
# ============================================================================

@router.get("/blacklist", response_model=BlacklistPage)
async def get_blacklist(
    database_id: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    filters: ListFilters = Depends(list_filters),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        rows, total_items = await service.list_blacklist(filters.applied(), page, page_size)
    return BlacklistPage(
        items=[BlacklistEntryResponse.model_validate(row) for row in rows],
        pagination=paginate(total_items, page, page_size)
    )


@router.post("/blacklist", response_model=BlacklistEntryResponse, status_code=201)
async def create_blacklist_entry(
    database_id: str,
    payload: BlacklistEntryCreate,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        row = await service.create_blacklist_entry(payload.model_dump(), username)
    return BlacklistEntryResponse.model_validate(row)


@router.put("/blacklist/{row_id}", response_model=BlacklistEntryResponse)
async def update_blacklist_entry(
    database_id: str,
    row_id: int,
    payload: BlacklistEntryCreate,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        row = await service.update_blacklist_entry(row_id, payload.model_dump(), username)
    return BlacklistEntryResponse.model_validate(row)


@router.delete("/blacklist/{row_id}", status_code=204)
async def delete_blacklist_entry(
    database_id: str,
    row_id: int,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        await service.delete_blacklist_entry(row_id, username)
    return Response(status_code=204)


# ============================================================================
# Whitelist
# ============================================================================

@router.get("/whitelist", response_model=WhitelistPage)
async def get_whitelist(
    database_id: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    filters: ListFilters = Depends(list_filters),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        rows, total_items = await service.list_whitelist(filters.applied(), page, page_size)
    return WhitelistPage(
        items=[WhitelistEntryResponse.model_validate(row) for row in rows],
        pagination=paginate(total_items, page, page_size)
    )


@router.post("/whitelist", response_model=WhitelistEntryResponse, status_code=201)
async def create_whitelist_entry(
    database_id: str,
    payload: WhitelistEntryCreate,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        row = await service.create_whitelist_entry(payload.model_dump(), username)
    return WhitelistEntryResponse.model_validate(row)


@router.put("/whitelist/{row_id}", response_model=WhitelistEntryResponse)
async def update_whitelist_entry(
    database_id: str,
    row_id: int,
    payload: WhitelistEntryCreate,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        row = await service.update_whitelist_entry(row_id, payload.model_dump(), username)
    return WhitelistEntryResponse.model_validate(row)


@router.delete("/whitelist/{row_id}", status_code=204)
async def delete_whitelist_entry(
    database_id: str,
    row_id: int,
    username: str = Depends(get_username),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        await service.delete_whitelist_entry(row_id, username)
    return Response(status_code=204)


# ============================================================================
# Status list (read-only)
# ============================================================================

@router.get("/status-list", response_model=StatusListPage)
async def get_status_list(
    database_id: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    filters: ListFilters = Depends(list_filters),
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    async with list_service(database_id, db, connector) as service:
        rows, total_items = await service.list_status(filters.applied(), page, page_size)
    return StatusListPage(
        items=[StatusListRecordResponse.model_validate(row) for row in rows],
        pagination=paginate(total_items, page, page_size)
    )
