"""
Pydantic schemas for the address eligibility check and its trace
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from models.base import StepStatus, StepResult


class CheckAddressRequest(BaseModel):
    """
    Candidate address submitted for an eligibility check.

    All fields except address2 are required and must be non-empty after
    trimming.
    """
    address1: str = Field(..., max_length=255)
    address2: Optional[str] = Field("", max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., description="Two-letter state code")
    zip: str = Field(..., max_length=10)
    program_type: str = Field(..., alias="programType", max_length=50)

    @field_validator("address1", "city", "zip", "program_type")
    @classmethod
    def require_non_blank(cls, v):
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
    def validate_state(cls, v):
        v = v.strip().upper()
        if len(v) != 2 or not v.isalpha():
            raise ValueError("state must be a two-letter code")
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "address1": "123 Main St",
                "address2": "Apt 4",
                "city": "Springfield",
                "state": "IL",
                "zip": "62701",
                "programType": "LL+ACP"
            }
        }


class CheckStep(BaseModel):
    """
    One stage of the check trace.

    capacity, occupancy and limit are filled in by the stages that compare
    them, so readers never have to parse them out of details. failed_lookups
    names the lookups (blacklist, whitelist, statuslist) that errored while
    the step ran; it is empty unless status is error.
    """
    step_name: str = Field(..., alias="stepName")
    status: StepStatus = StepStatus.PENDING
    message: str = ""
    details: str = ""
    result: StepResult = StepResult.NOT_APPLICABLE
    stop_process: bool = Field(False, alias="stopProcess")

    capacity: Optional[int] = None
    occupancy: Optional[int] = None
    limit: Optional[int] = None
    normalization_fallback: Optional[bool] = Field(None, alias="normalizationFallback")
    failed_lookups: List[str] = Field(default_factory=list, alias="failedLookups")

    class Config:
        populate_by_name = True


class CheckResult(BaseModel):
    """Verdict of one eligibility check plus its ordered trace"""
    success: int = Field(..., ge=0, le=1)
    steps: List[CheckStep] = Field(default_factory=list)
    final_message: str = Field(..., alias="finalMessage")

    @property
    def passed(self) -> bool:
        return self.success == 1

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "success": 1,
                "steps": [
                    {"stepName": "Normalize Address", "status": "completed", "result": -1, "stopProcess": False},
                    {"stepName": "Check Blacklist", "status": "completed", "result": 1, "stopProcess": False},
                    {
                        "stepName": "Check Whitelist",
                        "status": "completed",
                        "result": 1,
                        "stopProcess": True,
                        "capacity": 10,
                        "occupancy": 3
                    }
                ],
                "finalMessage": "Address is in whitelist with capacity 10 (occupancy: 3) - CHECK PASSED"
            }
        }


# ============================================================================
# Presentation Schemas
# ============================================================================

class ReportLine(BaseModel):
    """One human-readable line of the audit view"""
    step_name: str = Field(..., alias="stepName")
    icon: str = Field(..., description="success, error or skipped")
    text: str

    class Config:
        populate_by_name = True


class CheckReport(BaseModel):
    """Audit view rendered from a CheckResult"""
    verdict: str
    success: int
    lines: List[ReportLine]
    final_message: str = Field(..., alias="finalMessage")

    class Config:
        populate_by_name = True
