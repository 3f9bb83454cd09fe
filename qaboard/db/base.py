"""
SQLAlchemy declarative base and metadata.
All board tables (users, questions, answers, voter association tables) hang off it.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Timezone-aware timestamp with microseconds; keeps created_at ordering stable."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models. Metadata drives create_all at startup."""

    pass
