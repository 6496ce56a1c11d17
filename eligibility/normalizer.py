"""
Canonicalize raw address fields into the key used by every list lookup
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncConnection
from core.config import settings
from core.exceptions import NormalizationError
import enum
import logging

logger = logging.getLogger(__name__)


class AddressField(str, enum.Enum):
    """Address fields with their own canonicalization function"""
    ADDRESS1 = "address1"
    ADDRESS2 = "address2"
    CITY = "city"


# Canonicalization functions shipped in the tracking schema
CANONICALIZATION_FUNCTIONS = {
    AddressField.ADDRESS1: "get_hohaddress1",
    AddressField.ADDRESS2: "get_hohaddress2",
    AddressField.CITY: "get_hohcity",
}


@dataclass(frozen=True)
class NormalizedKey:
    """Canonical (address1, address2, city) triple"""
    address1: str
    address2: str
    city: str

    def __str__(self) -> str:
        return f"{self.address1}, {self.address2}, {self.city}"


@dataclass(frozen=True)
class NormalizationOutcome:
    key: NormalizedKey
    fallback: bool = False
    error: Optional[str] = None


class Canonicalizer(ABC):
    """The per-field canonicalization capability"""

    @abstractmethod
    async def canonicalize(self, field: AddressField, value: str) -> str:
        """Return the canonical form of one address field"""
        pass


class SqlCanonicalizer(Canonicalizer):
    """
    Canonicalize through the tracking schema functions of a tracked database.

    Each call runs inside a SAVEPOINT so a missing function does not abort
    the surrounding transaction.
    """

    def __init__(self, connection: AsyncConnection, schema: str = settings.TRACKING_SCHEMA):
        self.connection = connection
        self.schema = schema

    async def canonicalize(self, field: AddressField, value: str) -> str:
        sql_function = getattr(getattr(func, self.schema), CANONICALIZATION_FUNCTIONS[field])
        try:
            async with self.connection.begin_nested():
                canonical = await self.connection.scalar(select(sql_function(value)))
        except Exception as e:
            raise NormalizationError(
                f"Canonicalization of {field.value} failed",
                context={"field": field.value},
                original_exception=e
            )
        return canonical if canonical is not None else ""


class AddressNormalizer:
    """
    Build the NormalizedKey from raw address fields.

    normalize() never fails: if any field cannot be canonicalized the raw
    values are used unchanged and the outcome is flagged as a fallback.
    normalize_strict() raises instead, for callers that must not store a
    key derived from raw values.
    """

    def __init__(self, canonicalizer: Canonicalizer):
        self.canonicalizer = canonicalizer

    async def normalize_strict(self, address1: str, address2: str, city: str) -> NormalizedKey:
        return NormalizedKey(
            address1=await self.canonicalizer.canonicalize(AddressField.ADDRESS1, address1),
            address2=await self.canonicalizer.canonicalize(AddressField.ADDRESS2, address2 or ""),
            city=await self.canonicalizer.canonicalize(AddressField.CITY, city),
        )

    async def normalize(self, address1: str, address2: str, city: str) -> NormalizationOutcome:
        try:
            key = await self.normalize_strict(address1, address2, city)
        except NormalizationError as e:
            logger.warning(f"Normalization failed, using original values: {e.message}")
            return NormalizationOutcome(
                key=NormalizedKey(address1=address1, address2=address2 or "", city=city),
                fallback=True,
                error=str(e.original_exception or e.message),
            )
        return NormalizationOutcome(key=key)
