"""Callback request model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from receptionist.persistence.database import Base

if TYPE_CHECKING:
    from receptionist.persistence.models.client import Client


class CallbackStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CallbackRequest(Base):
    """A caller-confirmed callback scheduled by the agent during a call."""

    __tablename__ = "callback_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="ck_callback_requests_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String(100), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    call_id = Column(String(255), nullable=True, index=True)

    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=False)
    # Exactly as confirmed by the caller, e.g. "Tuesday, October 20 at 9am"
    preferred_time = Column(String(255), nullable=False)
    reason = Column(Text, nullable=True)
    department = Column(String(50), nullable=False)

    status = Column(String(20), nullable=False, default=CallbackStatus.PENDING.value)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    client = relationship("Client", back_populates="callback_requests")

    def __repr__(self) -> str:
        return f"<CallbackRequest(id={self.id}, client_id={self.client_id}, status={self.status})>"
