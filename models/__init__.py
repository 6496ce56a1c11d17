"""
SQLAlchemy ORM models for database tables.

This package defines two independent schemas:

Models:
    base: Declarative bases and shared enums (StepStatus, StepResult, ListName)
    tracked_database: Registry of databases carrying the tracking schema
    address_lists: Blacklist, whitelist and status list tables

Database Schema:
    TrackedDatabase belongs to the administrative registry (Base, DATABASE_URL).
    BlacklistEntry, WhitelistEntry and StatusListRecord belong to the tracking
    schema (TrackingBase) that exists in every registered tracked database.

Usage:
    from models.tracked_database import TrackedDatabase
    from models.address_lists import BlacklistEntry, WhitelistEntry, StatusListRecord
    from models.base import StepStatus, StepResult

Example:
    # Register a tracked database
    tracked = TrackedDatabase(
        display_name="Production HOH",
        database_name="hoh_prod",
        database_url="postgresql+asyncpg://user:pass@db:5432/hoh_prod"
    )
    session.add(tracked)
    await session.commit()
"""

__all__ = [
    "Base",
    "TrackingBase",
    "StepStatus",
    "StepResult",
    "ListName",
    "TrackedDatabase",
    "BlacklistEntry",
    "WhitelistEntry",
    "StatusListRecord",
]
