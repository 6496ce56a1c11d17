"""
Blacklist and whitelist administration with key re-derivation and uniqueness
"""

from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
from sqlalchemy import select, func, insert, update, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection
from core.exceptions import DuplicateEntryError, EntryNotFoundError
from eligibility.normalizer import AddressNormalizer, NormalizedKey
from models.address_lists import BlacklistEntry, WhitelistEntry, StatusListRecord
from models.base import ListName
import logging

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("eligibility.audit")

ADDRESS_COLUMNS = ("address1", "address2", "city", "state", "zip")


class AddressListService:
    """
    CRUD over the tracking lists of one tracked database.

    Ensures:
    - address1_upd, address2_upd and city_upd are always re-derived from the
      row's current address fields, never taken from the caller
    - no two rows of a list share (address1_upd, address2_upd, city_upd, state, zip)
    - every mutation is committed on its own and written to the audit log
    """

    def __init__(self, connection: AsyncConnection, normalizer: AddressNormalizer):
        self.connection = connection
        self.normalizer = normalizer

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _list(
        self,
        model,
        filters: Dict[str, Any],
        page: int,
        page_size: int
    ) -> Tuple[List[Dict[str, Any]], int]:
        conditions = [
            getattr(model, column) == value
            for column, value in filters.items()
            if hasattr(model, column)
        ]

        count_query = select(func.count()).select_from(model)
        query = select(*model.__table__.c)
        if conditions:
            count_query = count_query.where(and_(*conditions))
            query = query.where(and_(*conditions))

        total_items = (await self.connection.execute(count_query)).scalar()

        query = query.order_by(model.id).offset((page - 1) * page_size).limit(page_size)
        result = await self.connection.execute(query)
        rows = [dict(row._mapping) for row in result]

        return rows, total_items or 0

    async def list_blacklist(self, filters: Dict[str, Any], page: int = 1, page_size: int = 50):
        return await self._list(BlacklistEntry, filters, page, page_size)

    async def list_whitelist(self, filters: Dict[str, Any], page: int = 1, page_size: int = 50):
        return await self._list(WhitelistEntry, filters, page, page_size)

    async def list_status(self, filters: Dict[str, Any], page: int = 1, page_size: int = 50):
        return await self._list(StatusListRecord, filters, page, page_size)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _derive_key(self, data: Dict[str, Any]) -> NormalizedKey:
        return await self.normalizer.normalize_strict(
            data["address1"], data.get("address2") or "", data["city"]
        )

    async def _ensure_unique(
        self,
        model,
        list_name: ListName,
        key: NormalizedKey,
        state: str,
        zip_code: str,
        exclude_id: Optional[int] = None
    ):
        conditions = [
            model.address1_upd == key.address1,
            model.address2_upd == key.address2,
            model.city_upd == key.city,
            model.state == state,
            model.zip == zip_code,
        ]
        if exclude_id is not None:
            conditions.append(model.id != exclude_id)

        count = (
            await self.connection.execute(
                select(func.count()).select_from(model).where(and_(*conditions))
            )
        ).scalar()

        if count:
            raise DuplicateEntryError(
                f"A {list_name.value} record with this combination of "
                f"address1_upd, address2_upd, city_upd, state and zip already exists",
                context={
                    "list_name": list_name.value,
                    "key": (key.address1, key.address2, key.city, state, zip_code)
                }
            )

    async def _prepare(self, model, list_name: ListName, data: Dict[str, Any], username: str, exclude_id=None):
        key = await self._derive_key(data)
        await self._ensure_unique(model, list_name, key, data["state"], data["zip"], exclude_id)

        values = dict(data)
        values.update({
            "address2": data.get("address2") or "",
            "address1_upd": key.address1,
            "address2_upd": key.address2,
            "city_upd": key.city,
            "updatedby": username,
            "updatedon": datetime.utcnow(),
        })
        return values

    async def _write(self, stmt, list_name: ListName, values: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = await self.connection.execute(stmt)
            row = result.one_or_none()
            await self.connection.commit()
        except IntegrityError as e:
            await self.connection.rollback()
            raise DuplicateEntryError(
                f"A {list_name.value} record with this key already exists",
                context={
                    "list_name": list_name.value,
                    "key": (values["address1_upd"], values["address2_upd"], values["city_upd"],
                            values["state"], values["zip"])
                },
                original_exception=e
            )
        return dict(row._mapping) if row is not None else None

    async def _create(self, model, list_name: ListName, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        values = await self._prepare(model, list_name, data, username)
        stmt = insert(model).values(**values).returning(*model.__table__.c)
        row = await self._write(stmt, list_name, values)

        audit_logger.info(
            f"{list_name.value.upper()}_CREATED | User: {username} | id={row['id']} | "
            f"{values['address1_upd']}, {values['city_upd']}, {values['state']} {values['zip']}"
        )
        return row

    async def _update(self, model, list_name: ListName, row_id: int, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        current = (
            await self.connection.execute(select(*model.__table__.c).where(model.id == row_id))
        ).one_or_none()
        if current is None:
            raise EntryNotFoundError(
                f"{list_name.value} row not found",
                context={"list_name": list_name.value, "row_id": row_id}
            )

        merged = {column: current._mapping[column] for column in ADDRESS_COLUMNS}
        merged.update(data)
        values = await self._prepare(model, list_name, merged, username, exclude_id=row_id)

        stmt = update(model).where(model.id == row_id).values(**values).returning(*model.__table__.c)
        row = await self._write(stmt, list_name, values)
        if row is None:
            raise EntryNotFoundError(
                f"{list_name.value} row not found",
                context={"list_name": list_name.value, "row_id": row_id}
            )

        audit_logger.info(f"{list_name.value.upper()}_UPDATED | User: {username} | id={row_id}")
        return row

    async def _delete(self, model, list_name: ListName, row_id: int, username: str):
        result = await self.connection.execute(delete(model).where(model.id == row_id))
        if result.rowcount == 0:
            await self.connection.rollback()
            raise EntryNotFoundError(
                f"{list_name.value} row not found",
                context={"list_name": list_name.value, "row_id": row_id}
            )
        await self.connection.commit()

        audit_logger.info(f"{list_name.value.upper()}_DELETED | User: {username} | id={row_id}")

    async def create_blacklist_entry(self, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        return await self._create(BlacklistEntry, ListName.BLACKLIST, data, username)

    async def update_blacklist_entry(self, row_id: int, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        return await self._update(BlacklistEntry, ListName.BLACKLIST, row_id, data, username)

    async def delete_blacklist_entry(self, row_id: int, username: str = "system"):
        await self._delete(BlacklistEntry, ListName.BLACKLIST, row_id, username)

    async def create_whitelist_entry(self, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        return await self._create(WhitelistEntry, ListName.WHITELIST, data, username)

    async def update_whitelist_entry(self, row_id: int, data: Dict[str, Any], username: str) -> Dict[str, Any]:
        return await self._update(WhitelistEntry, ListName.WHITELIST, row_id, data, username)

    async def delete_whitelist_entry(self, row_id: int, username: str = "system"):
        await self._delete(WhitelistEntry, ListName.WHITELIST, row_id, username)
