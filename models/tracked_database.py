from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.engine import make_url
from datetime import datetime
import uuid
from models.base import Base


class TrackedDatabase(Base):
    """
    A database carrying the tracking schema (blacklist, whitelist, status list).

    Purpose:
    - Resolve the database reference passed to an eligibility check
    - Hold the connection URL used for the scoped check connection

    Credentials are stored inside database_url as-is; responses only ever
    expose the masked form.
    """
    __tablename__ = "tracked_databases"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    display_name = Column(String(255), nullable=False)
    database_name = Column(String(255), nullable=False)
    database_url = Column(String(2048), nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_tracked_database_name", "database_name"),
    )

    @property
    def masked_url(self) -> str:
        return make_url(self.database_url).render_as_string(hide_password=True)
