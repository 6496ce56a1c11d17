from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base
from core.config import settings
import enum

# Administrative registry (public schema of DATABASE_URL)
Base = declarative_base()

# Tables living in the tracking schema of every tracked database
TrackingBase = declarative_base(metadata=MetaData(schema=settings.TRACKING_SCHEMA))


# ============================================================================
# ENUMS
# ============================================================================

class StepStatus(str, enum.Enum):
    """Lifecycle of a single check step"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class StepResult(int, enum.Enum):
    """Outcome of a single check step"""
    NOT_APPLICABLE = -1
    FAILED = 0
    PASSED = 1


class ListName(str, enum.Enum):
    """Address lists kept in the tracking schema"""
    BLACKLIST = "blacklist"
    WHITELIST = "whitelist"
    STATUSLIST = "statuslist"
