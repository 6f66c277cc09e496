"""Equipment inventory repository."""

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.persistence.models.equipment import EquipmentItem
from receptionist.persistence.repositories.base import BaseRepository


class EquipmentRepository(BaseRepository[EquipmentItem]):
    """Repository for EquipmentItem entities."""

    def __init__(self, session: AsyncSession):
        """Initialize equipment repository."""
        super().__init__(EquipmentItem, session)

    async def search(self, query: str, limit: int = 10) -> list[EquipmentItem]:
        """Case-insensitive substring search over model, category and specs.

        Items with units on the lot sort first.
        """
        pattern = f"%{query}%"
        stmt = (
            select(EquipmentItem)
            .where(
                or_(
                    EquipmentItem.model.ilike(pattern),
                    EquipmentItem.category.ilike(pattern),
                    EquipmentItem.specs.ilike(pattern),
                )
            )
            .order_by(
                case((EquipmentItem.available > 0, 0), else_=1),
                EquipmentItem.category,
                EquipmentItem.model,
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
