"""Database models."""

from receptionist.persistence.models.call import Call
from receptionist.persistence.models.call_structured_data import CallStructuredData
from receptionist.persistence.models.callback_request import CallbackRequest, CallbackStatus
from receptionist.persistence.models.client import Client, ClientPhoneLine
from receptionist.persistence.models.contact import Contact
from receptionist.persistence.models.equipment import EquipmentItem

__all__ = [
    "Call",
    "CallStructuredData",
    "CallbackRequest",
    "CallbackStatus",
    "Client",
    "ClientPhoneLine",
    "Contact",
    "EquipmentItem",
]
