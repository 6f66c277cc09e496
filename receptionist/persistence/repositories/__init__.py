"""Repositories for data access."""

from receptionist.persistence.repositories.call_repository import (
    CallRepository,
    CallStructuredDataRepository,
)
from receptionist.persistence.repositories.callback_repository import CallbackRepository
from receptionist.persistence.repositories.client_repository import ClientRepository
from receptionist.persistence.repositories.contact_repository import ContactRepository
from receptionist.persistence.repositories.equipment_repository import EquipmentRepository

__all__ = [
    "CallRepository",
    "CallStructuredDataRepository",
    "CallbackRepository",
    "ClientRepository",
    "ContactRepository",
    "EquipmentRepository",
]
