"""Call repository."""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.persistence.models.call import Call
from receptionist.persistence.models.call_structured_data import CallStructuredData
from receptionist.persistence.repositories.base import BaseRepository


class CallRepository(BaseRepository[Call]):
    """Repository for Call entities."""

    def __init__(self, session: AsyncSession):
        """Initialize call repository."""
        super().__init__(Call, session)

    async def upsert(self, call_id: str, **fields: Any) -> None:
        """Insert or update a call row keyed by the runtime's call id.

        Null values are dropped before the statement is built, so a later
        report never erases what an earlier one stored.

        Args:
            call_id: Call id assigned by the voice runtime
            **fields: Call columns to write
        """
        values = {key: value for key, value in fields.items() if value is not None}
        values["id"] = call_id

        stmt = self._insert().values(**values)
        update_columns = {key: stmt.excluded[key] for key in values if key != "id"}
        update_columns["updated_at"] = datetime.utcnow()
        stmt = stmt.on_conflict_do_update(index_elements=[Call.id], set_=update_columns)

        await self.session.execute(stmt)
        await self.session.commit()

    async def mark_contact_counted(self, call_id: str, commit: bool = True) -> None:
        """Flag a call as already counted on its caller's contact."""
        stmt = update(Call).where(Call.id == call_id).values(contact_counted=True, updated_at=datetime.utcnow())
        await self.session.execute(stmt)
        if commit:
            await self.session.commit()


class CallStructuredDataRepository(BaseRepository[CallStructuredData]):
    """Repository for per-call structured extraction."""

    def __init__(self, session: AsyncSession):
        """Initialize structured data repository."""
        super().__init__(CallStructuredData, session)

    async def get_by_call_id(self, call_id: str) -> CallStructuredData | None:
        stmt = (
            select(CallStructuredData)
            .where(CallStructuredData.call_id == call_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, call_id: str, **fields: Any) -> None:
        """Insert or replace the structured data for a call.

        The latest extraction wins in full, since it is derived from the
        complete transcript.
        """
        values = dict(fields)
        values["call_id"] = call_id

        stmt = self._insert().values(**values)
        update_columns = {key: stmt.excluded[key] for key in values if key != "call_id"}
        update_columns["updated_at"] = datetime.utcnow()
        stmt = stmt.on_conflict_do_update(
            index_elements=[CallStructuredData.call_id], set_=update_columns
        )

        await self.session.execute(stmt)
        await self.session.commit()
