"""
Base repository - generic data access shared by all board entities.
Challenge: Consistent data access, testability, query construction in one place.
"""

from typing import Generic, TypeVar

from sqlalchemy import Table, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qaboard.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

# Dialects with native INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_IGNORING_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> ModelType | None:
        """Fetch single entity by primary key. Always hits the database."""
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.unique().scalar_one_or_none()

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        await self.session.refresh(entity)
        return entity

    async def save(self, entity: ModelType) -> ModelType:
        """Flush pending changes on an already persistent entity."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Remove entity from DB."""
        await self.session.delete(entity)
        await self.session.flush()

    async def add_member(self, table: Table, **values) -> None:
        """Insert a row into an association table unless the same key is already there."""
        dialect = self.session.get_bind().dialect.name
        conflict_ignoring_insert = _CONFLICT_IGNORING_INSERTS.get(dialect)
        if conflict_ignoring_insert is not None:
            await self.session.execute(
                conflict_ignoring_insert(table).values(**values).on_conflict_do_nothing()
            )
            return
        try:
            async with self.session.begin_nested():
                await self.session.execute(insert(table).values(**values))
        except IntegrityError:
            # Primary key already present: membership unchanged
            return
