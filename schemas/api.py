"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy or unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    tracked_databases: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "tracked_databases": 2
            }
        }


# ============================================================================
# Tracked Database Schemas
# ============================================================================

class TrackedDatabaseCreate(BaseModel):
    """Request to register a tracked database"""
    display_name: str = Field(..., min_length=1, max_length=255)
    database_name: str = Field(..., min_length=1, max_length=255)
    database_url: str = Field(..., min_length=1, max_length=2048)


class TrackedDatabaseResponse(BaseModel):
    """Registered tracked database, with the password masked"""
    id: str
    display_name: str
    database_name: str
    database_url: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, tracked):
        return cls(
            id=tracked.id,
            display_name=tracked.display_name,
            database_name=tracked.database_name,
            database_url=tracked.masked_url,
            created_at=tracked.created_at,
            updated_at=tracked.updated_at,
        )


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "error": "TrackedDatabaseConnectionError",
                "detail": "Failed to connect to tracked database",
                "request_id": "req_3f9a1c2b7d4e",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
