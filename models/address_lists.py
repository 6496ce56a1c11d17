from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Index, CheckConstraint
from models.base import TrackingBase


class BlacklistEntry(TrackingBase):
    """
    Addresses that are unconditionally disqualified.

    The *_upd columns hold the canonical form of address1, address2 and city
    produced by the tracking schema functions; together with state and zip
    they form the matching key, which is unique per list.
    """
    __tablename__ = "hohaddressblacklist"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)

    address1_upd = Column(String(255), nullable=False)
    address2_upd = Column(String(255), nullable=False, default="")
    city_upd = Column(String(100), nullable=False)

    updatedby = Column(String(100), nullable=True)
    updatedon = Column(DateTime, nullable=True)

    __table_args__ = (
        Index(
            "idx_blacklist_key",
            "address1_upd", "address2_upd", "city_upd", "state", "zip",
            unique=True,
        ),
    )


class WhitelistEntry(TrackingBase):
    """
    Addresses pre-approved up to a capacity.

    Same key and uniqueness rule as the blacklist.
    """
    __tablename__ = "hohaddresswhitelist"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)

    address1_upd = Column(String(255), nullable=False)
    address2_upd = Column(String(255), nullable=False, default="")
    city_upd = Column(String(100), nullable=False)

    capacity = Column(Integer, nullable=False, default=0)

    updatedby = Column(String(100), nullable=True)
    updatedon = Column(DateTime, nullable=True)

    __table_args__ = (
        Index(
            "idx_whitelist_key",
            "address1_upd", "address2_upd", "city_upd", "state", "zip",
            unique=True,
        ),
        CheckConstraint("capacity >= 0", name="ck_whitelist_capacity"),
    )


class StatusListRecord(TrackingBase):
    """
    Aggregated occupancy per address and program category.

    Maintained outside this service; read-only here. Address columns hold
    the canonical form.
    """
    __tablename__ = "hohaddressstatuslist"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)
    programtype = Column(String(50), nullable=False)

    total = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_statuslist_address", "address1", "address2", "city", "state", "zip", "programtype"),
    )
