"""Client (tenant) and phone line models."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from receptionist.persistence.database import Base

if TYPE_CHECKING:
    from receptionist.persistence.models.call import Call
    from receptionist.persistence.models.callback_request import CallbackRequest

# Departments a caller can be transferred to, mapped to the column holding the number
DEPARTMENT_PHONE_COLUMNS = {
    "sales": "sales_phone",
    "rentals": "rentals_phone",
    "service": "service_phone",
    "parts": "parts_phone",
    "billing": "billing_phone",
}


class Client(Base):
    """Client model representing a business answering calls through the receptionist."""

    __tablename__ = "clients"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)

    # Transfer destinations
    sales_phone = Column(String(50), nullable=True)
    rentals_phone = Column(String(50), nullable=True)
    service_phone = Column(String(50), nullable=True)
    parts_phone = Column(String(50), nullable=True)
    billing_phone = Column(String(50), nullable=True)

    # Permanent assistant provisioned in Vapi (see scripts/sync_assistant.py)
    vapi_assistant_id = Column(String(255), nullable=True)
    custom_prompt = Column(Text, nullable=True)
    additional_context = Column(Text, nullable=True)
    first_message_template = Column(Text, nullable=True)
    agent_name = Column(String(50), nullable=False, default="Tex")

    # Tool feature flags
    enable_inventory = Column(Boolean, nullable=False, default=True)
    enable_transfers = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    phone_lines = relationship("ClientPhoneLine", back_populates="client", cascade="all, delete-orphan")
    calls = relationship("Call", back_populates="client")
    callback_requests = relationship("CallbackRequest", back_populates="client", cascade="all, delete-orphan")

    def department_phone(self, department: str) -> str | None:
        """Return the transfer number configured for a department, if any."""
        column = DEPARTMENT_PHONE_COLUMNS.get((department or "").strip().lower())
        if column is None:
            return None
        return getattr(self, column)

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name}, vapi_assistant_id={self.vapi_assistant_id})>"


class ClientPhoneLine(Base):
    """Maps a Vapi phone number to the client that owns it."""

    __tablename__ = "client_phone_lines"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String(100), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    vapi_phone_number_id = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    client = relationship("Client", back_populates="phone_lines")

    def __repr__(self) -> str:
        return f"<ClientPhoneLine(client_id={self.client_id}, vapi_phone_number_id={self.vapi_phone_number_id})>"
