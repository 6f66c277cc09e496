"""Contact model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from receptionist.persistence.database import Base


class Contact(Base):
    """Known caller keyed by phone number, with a rolling call aggregate."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    status = Column(String(50), nullable=True, default="New")  # VIP, New, Bad Standing, Regular
    last_machine = Column(String(255), nullable=True)  # Last machine they asked about

    total_calls = Column(Integer, nullable=False, default=0)
    first_call_at = Column(DateTime, nullable=True)
    last_call_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, phone_number={self.phone_number}, name={self.name})>"
