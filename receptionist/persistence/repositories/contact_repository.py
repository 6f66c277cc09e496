"""Contact repository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.persistence.models.contact import Contact
from receptionist.persistence.repositories.base import BaseRepository

MERGEABLE_FIELDS = ("name", "company", "email", "status", "last_machine")


class ContactRepository(BaseRepository[Contact]):
    """Repository for Contact entities."""

    def __init__(self, session: AsyncSession):
        """Initialize contact repository."""
        super().__init__(Contact, session)

    async def get_by_phone(self, phone_number: str) -> Contact | None:
        """Get contact by phone number.

        Args:
            phone_number: Phone number in the form stored on the contact

        Returns:
            Contact or None if not found
        """
        stmt = (
            select(Contact)
            .where(Contact.phone_number == phone_number)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_merge(
        self,
        phone_number: str,
        fields: dict,
        count_call: bool = False,
        seen_at: datetime | None = None,
        commit: bool = True,
    ) -> None:
        """Create or coalesce-merge a contact in one statement.

        Incoming nulls never overwrite stored values; non-null values always do.

        Args:
            phone_number: Contact key
            fields: Candidate values for name, company, email, status, last_machine
            count_call: Bump total_calls and last_call_at for this write
            seen_at: Timestamp of the call being counted (defaults to now)
            commit: Commit at the end; pass False to join a larger transaction
        """
        seen_at = seen_at or datetime.utcnow()
        incoming = {
            key: fields.get(key)
            for key in MERGEABLE_FIELDS
            if fields.get(key) is not None
        }

        values = dict(incoming)
        values["phone_number"] = phone_number
        if count_call:
            values.update(total_calls=1, first_call_at=seen_at, last_call_at=seen_at)

        stmt = self._insert().values(**values)
        update_columns = {key: stmt.excluded[key] for key in incoming}
        if count_call:
            update_columns["total_calls"] = Contact.total_calls + 1
            update_columns["last_call_at"] = stmt.excluded.last_call_at
        update_columns["updated_at"] = datetime.utcnow()

        stmt = stmt.on_conflict_do_update(
            index_elements=[Contact.phone_number], set_=update_columns
        )
        await self.session.execute(stmt)
        if commit:
            await self.session.commit()
