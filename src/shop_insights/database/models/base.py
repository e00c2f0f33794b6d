"""
Declarative base shared by all ORM models.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (all columns store naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for Shop Insights models."""
    pass
