"""
FastAPI dependencies shared by the routers
"""

from typing import AsyncGenerator
from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import async_session_maker, TrackedDatabaseConnector
from eligibility.presenter import ResultPresenter
from eligibility.service import AddressCheckService

# One connector per process; engines are disposed on shutdown
connector = TrackedDatabaseConnector()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Registry database session"""
    async with async_session_maker() as session:
        yield session


def get_connector() -> TrackedDatabaseConnector:
    return connector


def get_check_service() -> AddressCheckService:
    return AddressCheckService(connector)


def get_presenter() -> ResultPresenter:
    return ResultPresenter()


def get_username(x_user: str = Header("system")) -> str:
    """Acting user for list mutations"""
    return x_user.strip() or "system"
