"""
List lookups consulted by the eligibility pipeline
"""

from abc import ABC, abstractmethod
from typing import Tuple
from sqlalchemy import select, exists, func, and_
from sqlalchemy.ext.asyncio import AsyncConnection
from core.exceptions import ListLookupError
from eligibility.normalizer import NormalizedKey
from models.address_lists import BlacklistEntry, WhitelistEntry, StatusListRecord
from models.base import ListName
import logging

logger = logging.getLogger(__name__)


class ListLookup(ABC):
    """
    Read access to the blacklist, whitelist and status list.

    Implementations raise ListLookupError when a query cannot be answered;
    they never decide eligibility themselves.
    """

    @abstractmethod
    async def lookup_blacklist(self, key: NormalizedKey, state: str, zip_code: str) -> bool:
        """Return True if a blacklist row matches the key"""
        pass

    @abstractmethod
    async def lookup_whitelist(self, key: NormalizedKey, state: str, zip_code: str) -> Tuple[bool, int]:
        """Return (whitelisted, capacity); capacity is the maximum over matching rows"""
        pass

    @abstractmethod
    async def lookup_occupancy(
        self,
        address1: str,
        address2: str,
        city: str,
        state: str,
        zip_code: str,
        program_category: str
    ) -> int:
        """Return the summed occupancy for the address and program category"""
        pass


class PostgresListLookup(ListLookup):
    """
    Lookups against the tracking schema over one scoped connection.

    Every query runs in its own SAVEPOINT so a failing lookup leaves the
    connection usable for the stages that follow.
    """

    def __init__(self, connection: AsyncConnection):
        self.connection = connection

    @staticmethod
    def _key_filter(model, key: NormalizedKey, state: str, zip_code: str):
        return and_(
            model.address1_upd == key.address1,
            model.address2_upd == key.address2,
            model.city_upd == key.city,
            model.state == state,
            model.zip == zip_code,
        )

    async def _scalar_row(self, list_name: ListName, stmt):
        try:
            async with self.connection.begin_nested():
                result = await self.connection.execute(stmt)
                return result.one()
        except Exception as e:
            raise ListLookupError(
                f"Failed to query {list_name.value}",
                context={"list_name": list_name.value},
                original_exception=e
            )

    async def lookup_blacklist(self, key: NormalizedKey, state: str, zip_code: str) -> bool:
        stmt = select(
            exists().where(self._key_filter(BlacklistEntry, key, state, zip_code))
        )
        row = await self._scalar_row(ListName.BLACKLIST, stmt)
        return bool(row[0])

    async def lookup_whitelist(self, key: NormalizedKey, state: str, zip_code: str) -> Tuple[bool, int]:
        stmt = select(
            func.count(WhitelistEntry.id),
            func.coalesce(func.max(WhitelistEntry.capacity), 0),
        ).where(self._key_filter(WhitelistEntry, key, state, zip_code))
        count, capacity = await self._scalar_row(ListName.WHITELIST, stmt)
        return count > 0, int(capacity)

    async def lookup_occupancy(
        self,
        address1: str,
        address2: str,
        city: str,
        state: str,
        zip_code: str,
        program_category: str
    ) -> int:
        stmt = select(
            func.coalesce(func.sum(StatusListRecord.total), 0)
        ).where(
            and_(
                StatusListRecord.address1 == address1,
                StatusListRecord.address2 == address2,
                StatusListRecord.city == city,
                StatusListRecord.state == state,
                StatusListRecord.zip == zip_code,
                StatusListRecord.programtype == program_category,
            )
        )
        row = await self._scalar_row(ListName.STATUSLIST, stmt)
        return int(row[0])
