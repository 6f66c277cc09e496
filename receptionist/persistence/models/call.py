"""Call model for inbound voice calls."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from receptionist.persistence.database import Base

if TYPE_CHECKING:
    from receptionist.persistence.models.call_structured_data import CallStructuredData
    from receptionist.persistence.models.client import Client


class Call(Base):
    """Call model keyed by the voice runtime's call id. Rows are never deleted."""

    __tablename__ = "calls"
    __table_args__ = (
        CheckConstraint(
            "success_score IS NULL OR (success_score >= 1 AND success_score <= 10)",
            name="ck_calls_success_score_range",
        ),
    )

    id = Column(String(255), primary_key=True)
    client_id = Column(String(100), ForeignKey("clients.id"), nullable=True, index=True)

    # Call metadata
    phone_number_id = Column(String(255), nullable=True)
    caller_phone = Column(String(50), nullable=True, index=True)
    call_type = Column(String(50), nullable=True)  # inboundPhoneCall, outboundPhoneCall, webCall

    # Lifecycle
    started_at = Column(DateTime, nullable=True)
    ended_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    status = Column(String(50), nullable=True, index=True)  # in-progress, forwarding, ended
    ended_reason = Column(String(255), nullable=True)
    transferred_to = Column(String(50), nullable=True)
    # Set in the same commit that bumps the caller's contact aggregate
    contact_counted = Column(Boolean, nullable=False, default=False)

    # Content
    transcript = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    recording_url = Column(Text, nullable=True)
    stereo_recording_url = Column(Text, nullable=True)

    # Analytics
    success_score = Column(Integer, nullable=True)

    # Provider-attributed cost
    cost_total = Column(Float, nullable=True)
    cost_transport = Column(Float, nullable=True)
    cost_stt = Column(Float, nullable=True)
    cost_llm = Column(Float, nullable=True)
    cost_tts = Column(Float, nullable=True)
    cost_vapi = Column(Float, nullable=True)
    llm_prompt_tokens = Column(Integer, nullable=True)
    llm_completion_tokens = Column(Integer, nullable=True)
    tts_characters = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    client = relationship("Client", back_populates="calls")
    structured_data = relationship(
        "CallStructuredData", back_populates="call", uselist=False, cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Call(id={self.id}, client_id={self.client_id}, status={self.status})>"
