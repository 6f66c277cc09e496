"""Equipment inventory model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from receptionist.persistence.database import Base


class EquipmentItem(Base):
    """A rentable machine model and how many units are on the lot."""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    model = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    available = Column(Integer, nullable=False, default=0)
    price_per_day = Column(Float, nullable=False)

    condition = Column(String(20), nullable=True)  # Excellent, Good, Fair, Poor
    year = Column(Integer, nullable=True)
    specs = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<EquipmentItem(id={self.id}, model={self.model}, available={self.available})>"
