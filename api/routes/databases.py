"""
Registry of tracked databases
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from api.dependencies import get_db, get_connector
from api.middleware import get_request_id
from core.database import TrackedDatabaseConnector
from schemas.api import TrackedDatabaseCreate, TrackedDatabaseResponse
from models.tracked_database import TrackedDatabase
from typing import List
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tracked-databases", tags=["Tracked Databases"])


@router.get("", response_model=List[TrackedDatabaseResponse])
async def list_tracked_databases(db: AsyncSession = Depends(get_db)):
    """List registered tracked databases, newest first"""
    result = await db.execute(select(TrackedDatabase).order_by(TrackedDatabase.created_at.desc()))
    return [TrackedDatabaseResponse.from_model(tracked) for tracked in result.scalars().all()]


@router.post("", response_model=TrackedDatabaseResponse, status_code=201)
async def register_tracked_database(
    payload: TrackedDatabaseCreate,
    request_id: str = Depends(get_request_id),
    db: AsyncSession = Depends(get_db)
):
    """Register a database that carries the tracking schema"""
    tracked = TrackedDatabase(
        display_name=payload.display_name,
        database_name=payload.database_name,
        database_url=payload.database_url,
    )
    db.add(tracked)
    await db.commit()
    await db.refresh(tracked)

    logger.info(f"[{request_id}] Registered tracked database {tracked.database_name} ({tracked.id})")
    return TrackedDatabaseResponse.from_model(tracked)


@router.get("/{database_id}", response_model=TrackedDatabaseResponse)
async def get_tracked_database(
    database_id: str,
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    tracked = await connector.resolve(database_id, db)
    return TrackedDatabaseResponse.from_model(tracked)


@router.delete("/{database_id}", status_code=204)
async def delete_tracked_database(
    database_id: str,
    db: AsyncSession = Depends(get_db),
    connector: TrackedDatabaseConnector = Depends(get_connector)
):
    tracked = await connector.resolve(database_id, db)
    await db.delete(tracked)
    await db.commit()

    logger.info(f"Removed tracked database {tracked.database_name} ({database_id})")
    return Response(status_code=204)
