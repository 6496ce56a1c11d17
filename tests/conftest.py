"""
Pytest configuration and fixtures
"""

import pytest
from typing import Dict, Set, Tuple
from unittest.mock import AsyncMock, MagicMock, Mock
from core.exceptions import ListLookupError, NormalizationError
from eligibility.lookups import ListLookup
from eligibility.normalizer import AddressField, AddressNormalizer, Canonicalizer, NormalizedKey
from eligibility.pipeline import EligibilityPipeline


class FakeCanonicalizer(Canonicalizer):
    """Upper-cases and trims, like the tracking schema functions do"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def canonicalize(self, field: AddressField, value: str) -> str:
        self.calls.append((field, value))
        if self.fail:
            raise NormalizationError(
                f"Canonicalization of {field.value} failed",
                context={"field": field.value},
                original_exception=Exception("function tracking.get_hohaddress1(text) does not exist")
            )
        return (value or "").strip().upper()


class FakeListLookup(ListLookup):
    """
    In-memory lists keyed the same way as the tracking tables.

    blacklist: set of (address1, address2, city, state, zip)
    whitelist: {(address1, address2, city, state, zip): capacity}
    occupancy: {(address1, address2, city, state, zip, category): total}
    fail: names of lookups that raise ListLookupError
    """

    def __init__(
        self,
        blacklist: Set[Tuple[str, ...]] = None,
        whitelist: Dict[Tuple[str, ...], int] = None,
        occupancy: Dict[Tuple[str, ...], int] = None,
        fail: Set[str] = None
    ):
        self.blacklist = blacklist or set()
        self.whitelist = whitelist or {}
        self.occupancy = occupancy or {}
        self.fail = fail or set()
        self.calls = []

    def _maybe_fail(self, name: str):
        self.calls.append(name)
        if name in self.fail:
            raise ListLookupError(
                f"Failed to query {name}",
                context={"list_name": name},
                original_exception=Exception("connection reset by peer")
            )

    async def lookup_blacklist(self, key: NormalizedKey, state: str, zip_code: str) -> bool:
        self._maybe_fail("blacklist")
        return (key.address1, key.address2, key.city, state, zip_code) in self.blacklist

    async def lookup_whitelist(self, key: NormalizedKey, state: str, zip_code: str):
        self._maybe_fail("whitelist")
        full_key = (key.address1, key.address2, key.city, state, zip_code)
        if full_key in self.whitelist:
            return True, self.whitelist[full_key]
        return False, 0

    async def lookup_occupancy(self, address1, address2, city, state, zip_code, program_category) -> int:
        self._maybe_fail("statuslist")
        return self.occupancy.get((address1, address2, city, state, zip_code, program_category), 0)


class NestedTransaction:
    """Stand-in for AsyncConnection.begin_nested()"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def make_connection() -> MagicMock:
    """Mocked AsyncConnection with working savepoints"""
    connection = MagicMock()
    connection.begin_nested = Mock(side_effect=lambda: NestedTransaction())
    connection.execute = AsyncMock()
    connection.scalar = AsyncMock()
    connection.commit = AsyncMock()
    connection.rollback = AsyncMock()
    connection.close = AsyncMock()
    return connection


# Canonical form of the sample address below
KEY = ("123 MAIN ST", "APT 4", "SPRINGFIELD", "IL", "62701")


@pytest.fixture
def sample_address():
    """Raw address fields as submitted by a caller"""
    return {
        "address1": "123 Main St",
        "address2": "Apt 4",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "program_type": "LL",
    }


@pytest.fixture
def canonicalizer():
    return FakeCanonicalizer()


@pytest.fixture
def connection():
    return make_connection()


@pytest.fixture
def build_pipeline():
    """Factory for pipelines over in-memory lists"""

    def _build(lookup: ListLookup = None, fail_normalization: bool = False, **kwargs) -> EligibilityPipeline:
        return EligibilityPipeline(
            normalizer=AddressNormalizer(FakeCanonicalizer(fail=fail_normalization)),
            lookup=lookup or FakeListLookup(),
            **kwargs
        )

    return _build


@pytest.fixture
def key():
    """List key of sample_address after canonicalization"""
    return KEY


@pytest.fixture
def make_lookup():
    return FakeListLookup


@pytest.fixture
def make_canonicalizer():
    return FakeCanonicalizer


@pytest.fixture
def make_mock_connection():
    return make_connection
