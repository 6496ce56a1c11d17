"""
Pydantic schemas for blacklist, whitelist and status list administration
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class AddressFields(BaseModel):
    """Raw address fields shared by every list row"""
    address1: str = Field(..., min_length=1, max_length=255)
    address2: Optional[str] = Field("", max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=2, max_length=2)
    zip: str = Field(..., min_length=1, max_length=10)

    @field_validator("address1", "city", "zip")
    @classmethod
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("address2", mode="before")
    @classmethod
    def clean_address2(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("state")
    @classmethod
    def upper_state(cls, v):
        return v.strip().upper()


class BlacklistEntryCreate(AddressFields):
    """Schema for creating or replacing a blacklist row"""
    pass


class WhitelistEntryCreate(AddressFields):
    """Schema for creating or replacing a whitelist row"""
    capacity: int = Field(0, ge=0)


class BlacklistEntryResponse(BaseModel):
    id: int
    address1: str
    address2: Optional[str]
    city: str
    state: str
    zip: str
    address1_upd: str
    address2_upd: Optional[str]
    city_upd: str
    updatedby: Optional[str] = None
    updatedon: Optional[datetime] = None

    class Config:
        from_attributes = True


class WhitelistEntryResponse(BlacklistEntryResponse):
    capacity: int


class StatusListRecordResponse(BaseModel):
    id: int
    address1: str
    address2: Optional[str]
    city: str
    state: str
    zip: str
    programtype: str
    total: int

    class Config:
        from_attributes = True


class ListFilters(BaseModel):
    """Exact-match filters accepted by the list endpoints"""
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    programtype: Optional[str] = None

    def applied(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v is not None and v != ""}


class PaginationMetadata(BaseModel):
    """Pagination metadata"""
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_previous: bool


class BlacklistPage(BaseModel):
    items: List[BlacklistEntryResponse]
    pagination: PaginationMetadata


class WhitelistPage(BaseModel):
    items: List[WhitelistEntryResponse]
    pagination: PaginationMetadata


class StatusListPage(BaseModel):
    items: List[StatusListRecordResponse]
    pagination: PaginationMetadata
