"""Collaborator facades over the repositories.

The call orchestration core talks to these three objects only. Each wraps
one AsyncSession, turns database failures into CollaboratorError, and hands
back plain records instead of ORM rows.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.core.errors import CollaboratorError
from receptionist.core.phone import normalize_phone_e164
from receptionist.persistence.models.call import Call
from receptionist.persistence.models.callback_request import CallbackRequest, CallbackStatus
from receptionist.persistence.models.client import Client
from receptionist.persistence.repositories.call_repository import (
    CallRepository,
    CallStructuredDataRepository,
)
from receptionist.persistence.repositories.callback_repository import CallbackRepository
from receptionist.persistence.repositories.client_repository import ClientRepository
from receptionist.persistence.repositories.contact_repository import ContactRepository
from receptionist.persistence.repositories.equipment_repository import EquipmentRepository
from receptionist.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class ContactRecord:
    """Known caller as seen by the context assembler and tools."""

    phone_number: str
    name: str | None = None
    company: str | None = None
    email: str | None = None
    status: str | None = None
    last_machine: str | None = None
    total_calls: int = 0
    last_call_at: datetime | None = None


@dataclass
class EquipmentRecord:
    """Inventory line returned by an equipment search."""

    name: str
    category: str
    available: int
    price: float
    condition: str | None = None
    year: int | None = None
    specs: str | None = None


def _flatten_structured_data(data: dict) -> dict[str, Any]:
    """Flatten the nested extraction into call_structured_data columns."""

    def section(key: str) -> dict:
        value = data.get(key)
        return value if isinstance(value, dict) else {}

    caller = section("caller")
    intent = section("intent")
    machine = section("machine")
    details = section("details")
    outcome = section("outcome")

    year = machine.get("year")
    try:
        year = int(year) if year not in (None, "") else None
    except (TypeError, ValueError):
        year = None

    return {
        "caller_name": caller.get("name") or None,
        "caller_company": caller.get("company") or None,
        "caller_phone": caller.get("phone") or None,
        "caller_email": caller.get("email") or None,
        "intent_category": intent.get("category") or None,
        "intent_subcategory": intent.get("subcategory") or None,
        "machine_make": machine.get("make") or None,
        "machine_model": machine.get("model") or None,
        "machine_year": year,
        "machine_serial": machine.get("serial") or None,
        "machine_category": machine.get("category") or None,
        "location": details.get("location") or None,
        "timing": details.get("timing") or None,
        "urgency": details.get("urgency") or None,
        "outcome_type": outcome.get("type") or None,
        "outcome_transferred_to": outcome.get("transferred_to") or None,
        "outcome_next_step": outcome.get("next_step") or None,
        "outcome_scheduled_callback_time": outcome.get("scheduled_callback_time") or None,
        "notes": data.get("notes") or None,
        "raw_json": data,
    }


class CallRecordStore:
    """Call, structured data, client and callback persistence."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.calls = CallRepository(session)
        self.structured_data = CallStructuredDataRepository(session)
        self.clients = ClientRepository(session)
        self.callbacks = CallbackRepository(session)

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed after store error")

    async def upsert_call(self, call_id: str, **fields: Any) -> None:
        """Insert or update a call row; null fields keep the stored value.

        Duration is derived when both start and end timestamps are given.
        """
        started_at = fields.get("started_at")
        ended_at = fields.get("ended_at")
        if started_at and ended_at and fields.get("duration_seconds") is None:
            fields["duration_seconds"] = max(0, int((ended_at - started_at).total_seconds()))
        try:
            await self.calls.upsert(call_id, **fields)
        except SQLAlchemyError as e:
            await self._rollback()
            raise CollaboratorError("call_record_store", f"upsert_call failed for {call_id}: {e}") from e

    async def get_call(self, call_id: str) -> Call | None:
        try:
            return await self.calls.get_by_id(call_id)
        except SQLAlchemyError as e:
            await self._rollback()
            raise CollaboratorError("call_record_store", f"get_call failed for {call_id}: {e}") from e

    async def record_transfer(self, call_id: str, department: str) -> None:
        """Mark a call as handed off to a department."""
        await self.upsert_call(call_id, transferred_to=department, status="forwarding")

    async def upsert_structured_data(self, call_id: str, data: dict) -> None:
        """Store the structured extraction for an existing call."""
        try:
            await self.structured_data.upsert(call_id, **_flatten_structured_data(data))
        except SQLAlchemyError as e:
            await self._rollback()
            raise CollaboratorError(
                "call_record_store", f"upsert_structured_data failed for {call_id}: {e}"
            ) from e

    async def get_client_by_phone_line_id(self, phone_line_id: str | None) -> Client | None:
        """Resolve the client for a phone line, falling back to the default client.

        Args:
            phone_line_id: Vapi phone number id (may be missing for web calls)

        Returns:
            The owning client, the default client, or None if neither exists
        """
        try:
            client = None
            if phone_line_id:
                client = await self.clients.get_by_phone_number_id(phone_line_id)
            if client is None:
                logger.info(
                    f"No client mapped to phone line {phone_line_id}, using default client",
                    extra={"phone_number_id": phone_line_id, "default_client_id": settings.default_client_id},
                )
                client = await self.clients.get_by_id(settings.default_client_id)
            return client
        except SQLAlchemyError as e:
            await self._rollback()
            raise CollaboratorError("call_record_store", f"client lookup failed: {e}") from e

    async def save_callback(
        self,
        client_id: str,
        customer_phone: str,
        preferred_time: str,
        department: str,
        customer_name: str | None = None,
        reason: str | None = None,
        call_id: str | None = None,
    ) -> CallbackRequest:
        """Persist a pending callback request."""
        try:
            return await self.callbacks.create(
                client_id=client_id,
                call_id=call_id,
                customer_name=customer_name,
                customer_phone=customer_phone,
                preferred_time=preferred_time,
                reason=reason,
                department=department,
                status=CallbackStatus.PENDING.value,
            )
        except SQLAlchemyError as e:
            await self._rollback()
            raise CollaboratorError("call_record_store", f"save_callback failed: {e}") from e


class CallerDirectory:
    """Contact lookup and coalesce-merge updates keyed by phone number."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.contacts = ContactRepository(session)
        self.calls = CallRepository(session)

    async def get(self, phone: str | None) -> ContactRecord | None:
        normalized = normalize_phone_e164(phone)
        if not normalized:
            return None
        try:
            contact = await self.contacts.get_by_phone(normalized)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise CollaboratorError("caller_directory", f"lookup failed: {e}") from e
        if contact is None:
            return None
        return ContactRecord(
            phone_number=contact.phone_number,
            name=contact.name,
            company=contact.company,
            email=contact.email,
            status=contact.status,
            last_machine=contact.last_machine,
            total_calls=contact.total_calls or 0,
            last_call_at=contact.last_call_at,
        )

    async def upsert(
        self,
        phone: str | None,
        fields: dict,
        count_call: bool = False,
        counted_call_id: str | None = None,
    ) -> None:
        """Coalesce-merge fields into the contact for a phone number.

        When a call is counted and counted_call_id is given, the call row is
        flagged as counted in the same commit as the contact write.

        Args:
            phone: Caller phone in any common format
            fields: name, company, email, status, last_machine (None values ignored)
            count_call: Count this write as a completed call
            counted_call_id: Call being counted
        """
        normalized = normalize_phone_e164(phone)
        if not normalized:
            logger.warning("Skipping contact upsert without a phone number")
            return
        try:
            await self.contacts.upsert_merge(normalized, fields, count_call=count_call, commit=False)
            if count_call and counted_call_id:
                await self.calls.mark_contact_counted(counted_call_id, commit=False)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise CollaboratorError("caller_directory", f"upsert failed for {normalized}: {e}") from e


class EquipmentDirectory:
    """Inventory search for the check_inventory tool."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.equipment = EquipmentRepository(session)

    async def search(self, query: str) -> list[EquipmentRecord]:
        """Search inventory, retrying a plural query in singular form."""
        query = (query or "").strip()
        if not query:
            return []
        try:
            items = await self.equipment.search(query)
            if not items and len(query) > 3 and query.lower().endswith("s"):
                items = await self.equipment.search(query[:-1])
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise CollaboratorError("equipment_directory", f"search failed for '{query}': {e}") from e
        return [
            EquipmentRecord(
                name=item.model,
                category=item.category,
                available=item.available,
                price=item.price_per_day,
                condition=item.condition,
                year=item.year,
                specs=item.specs,
            )
            for item in items
        ]
