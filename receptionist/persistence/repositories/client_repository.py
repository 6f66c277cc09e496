"""Client repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.persistence.models.client import Client, ClientPhoneLine
from receptionist.persistence.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """Repository for Client entities."""

    def __init__(self, session: AsyncSession):
        """Initialize client repository."""
        super().__init__(Client, session)

    async def get_by_phone_number_id(self, phone_number_id: str) -> Client | None:
        """Get the client that owns a Vapi phone number.

        Args:
            phone_number_id: Vapi phone number id from the call payload

        Returns:
            Client or None if the line is not mapped
        """
        stmt = (
            select(Client)
            .join(ClientPhoneLine, ClientPhoneLine.client_id == Client.id)
            .where(ClientPhoneLine.vapi_phone_number_id == phone_number_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_assistant_id(self, client_id: str, assistant_id: str) -> Client | None:
        """Store the permanent assistant id provisioned for a client."""
        client = await self.get_by_id(client_id)
        if client is None:
            return None
        client.vapi_assistant_id = assistant_id
        await self.session.commit()
        await self.session.refresh(client)
        return client
