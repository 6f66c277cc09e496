"""Callback request repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.persistence.models.callback_request import CallbackRequest
from receptionist.persistence.repositories.base import BaseRepository


class CallbackRepository(BaseRepository[CallbackRequest]):
    """Repository for CallbackRequest entities."""

    def __init__(self, session: AsyncSession):
        """Initialize callback repository."""
        super().__init__(CallbackRequest, session)
