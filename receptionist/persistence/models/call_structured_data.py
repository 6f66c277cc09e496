"""Structured data extracted from a call transcript."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from receptionist.persistence.database import Base

if TYPE_CHECKING:
    from receptionist.persistence.models.call import Call


class CallStructuredData(Base):
    """Per-call extraction, stored flattened for querying and raw for reference."""

    __tablename__ = "call_structured_data"

    id = Column(Integer, primary_key=True, index=True)
    call_id = Column(String(255), ForeignKey("calls.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    # Caller
    caller_name = Column(String(255), nullable=True)
    caller_company = Column(String(255), nullable=True)
    caller_phone = Column(String(50), nullable=True)
    caller_email = Column(String(255), nullable=True)

    # Intent
    intent_category = Column(String(50), nullable=True, index=True)  # sales, rental, parts, service, billing, general, other
    intent_subcategory = Column(String(255), nullable=True)

    # Machine
    machine_make = Column(String(100), nullable=True, index=True)
    machine_model = Column(String(100), nullable=True)
    machine_year = Column(Integer, nullable=True)
    machine_serial = Column(String(100), nullable=True)
    machine_category = Column(String(100), nullable=True)

    # Details
    location = Column(String(255), nullable=True)
    timing = Column(String(255), nullable=True)
    urgency = Column(String(20), nullable=True, index=True)  # low, medium, high, critical

    # Outcome
    outcome_type = Column(String(50), nullable=True, index=True)
    outcome_transferred_to = Column(String(50), nullable=True)
    outcome_next_step = Column(Text, nullable=True)
    outcome_scheduled_callback_time = Column(String(255), nullable=True)

    notes = Column(Text, nullable=True)
    raw_json = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    call = relationship("Call", back_populates="structured_data")

    def __repr__(self) -> str:
        return f"<CallStructuredData(call_id={self.call_id}, intent_category={self.intent_category})>"
