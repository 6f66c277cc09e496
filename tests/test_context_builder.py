"""Tests for per-call context assembly."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from receptionist.core.errors import CollaboratorError
from receptionist.domain.services.context_builder import (
    NEW_CALLER_MARKER,
    ContextAssembler,
    build_first_message,
    format_caller_context,
)
from receptionist.persistence.models import Client, Contact
from receptionist.persistence.stores import CallerDirectory, ContactRecord

from tests.conftest import ABHAVE_PHONE, UNKNOWN_PHONE

# Monday, October 19, 2026 at 9:05 AM in Phoenix
OPEN_NOW = datetime(2026, 10, 19, 16, 5)
# Monday, October 19, 2026 at 8:30 PM in Phoenix
CLOSED_NOW = datetime(2026, 10, 20, 3, 30)


@pytest.mark.asyncio
async def test_known_caller_open_hours(db_session, tenant, known_caller):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(ABHAVE_PHONE, tenant, now=OPEN_NOW)

    caller_block = context.variables["caller_context"]
    assert context.is_after_hours is False
    assert "Name: Abhave" in caller_block
    assert "Company: Tex Intel HQ" in caller_block
    assert "Status: VIP" in caller_block
    assert "Previously asked about: Cat 336 Excavator" in caller_block
    assert f"Phone: {ABHAVE_PHONE}" in caller_block
    assert NEW_CALLER_MARKER not in caller_block
    assert context.caller_name == "Abhave"
    assert context.first_message == (
        "Hi Abhave, thanks for calling Tex Intel again. This is Tex, how can I help you today?"
    )


@pytest.mark.asyncio
async def test_caller_lookup_normalizes_phone_format(db_session, tenant, known_caller):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context("(602) 570-5474", tenant, now=OPEN_NOW)

    assert context.caller_name == "Abhave"


@pytest.mark.asyncio
async def test_unknown_caller_gets_new_caller_marker(db_session, tenant, known_caller):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(UNKNOWN_PHONE, tenant, now=OPEN_NOW)

    caller_block = context.variables["caller_context"]
    assert caller_block == f"{NEW_CALLER_MARKER}\nPhone: {UNKNOWN_PHONE}"
    assert "Name:" not in caller_block
    assert context.caller is None
    assert context.first_message == "Thanks for calling Tex Intel. This is Tex, how can I help you today?"


@pytest.mark.asyncio
async def test_missing_caller_phone_is_unknown(db_session, tenant):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(None, tenant, now=OPEN_NOW)

    assert context.variables["caller_context"] == f"{NEW_CALLER_MARKER}\nPhone: Unknown"


@pytest.mark.asyncio
async def test_absent_contact_fields_render_unknown(db_session, tenant):
    db_session.add(Contact(phone_number=UNKNOWN_PHONE, name="Bob Builder", total_calls=1))
    await db_session.commit()
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(UNKNOWN_PHONE, tenant, now=OPEN_NOW)

    caller_block = context.variables["caller_context"]
    assert "Name: Bob Builder" in caller_block
    assert "Company: Unknown" in caller_block
    assert "Previously asked about: Unknown" in caller_block


@pytest.mark.asyncio
async def test_after_hours_context(db_session, tenant, known_caller):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(ABHAVE_PHONE, tenant, now=CLOSED_NOW)

    hours_block = context.variables["business_hours_context"]
    assert context.is_after_hours is True
    assert "Office status: CLOSED" in hours_block
    assert "Next open: Tuesday at 8:00 AM" in hours_block
    assert "- Tomorrow: Tuesday, October 20" in hours_block
    assert "- Next Monday: Monday, October 26" in hours_block
    assert context.first_message == (
        "Hi Abhave, thanks for calling Tex Intel. "
        "We're currently closed, but I can help you schedule a callback."
    )


@pytest.mark.asyncio
async def test_business_hours_block_layout(db_session, tenant):
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(UNKNOWN_PHONE, tenant, now=OPEN_NOW)

    assert context.variables["business_hours_context"] == "\n".join(
        [
            "Today's date: October 19, 2026",
            "Current time: Monday, 9:05 AM",
            "Office status: OPEN",
            "",
            "BUSINESS HOURS SCHEDULE:",
            "- Monday-Friday: 8:00 AM to 5:00 PM",
            "- Saturday: 9:00 AM to 3:00 PM",
            "- Sunday: CLOSED",
            "",
            "PRE-COMPUTED DATES (use these exact phrases):",
            "- Tomorrow: Tuesday, October 20",
            "- Next business day: Tuesday, October 20",
            "- Next Monday: Monday, October 26",
            "- Next Tuesday: Tuesday, October 20",
        ]
    )


@pytest.mark.asyncio
async def test_variables_include_client_fields(db_session, tenant):
    tenant.additional_context = "Yard closes early on holidays."
    assembler = ContextAssembler(CallerDirectory(db_session))

    context = await assembler.build_context(UNKNOWN_PHONE, tenant, now=OPEN_NOW)

    assert context.variables["company_name"] == "Tex Intel"
    assert context.variables["agent_name"] == "Tex"
    assert context.variables["additional_context"] == "Yard closes early on holidays."


@pytest.mark.asyncio
async def test_lookup_failure_degrades_to_new_caller(tenant):
    directory = AsyncMock()
    directory.get = AsyncMock(side_effect=CollaboratorError("caller_directory", "connection reset"))
    assembler = ContextAssembler(directory)

    context = await assembler.build_context(ABHAVE_PHONE, tenant, now=OPEN_NOW)

    assert context.variables["caller_context"].startswith(NEW_CALLER_MARKER)
    assert context.caller is None


def make_client(**overrides) -> Client:
    fields = dict(id="tex-intel-primary", name="Tex Intel", agent_name="Tex")
    fields.update(overrides)
    return Client(**fields)


class TestFirstMessage:
    """Opening line selection."""

    def test_template_used_during_open_hours(self):
        tenant = make_client(first_message_template="Thanks for calling {company_name}, this is {agent_name}.")

        assert build_first_message(tenant, "Abhave", False) == "Thanks for calling Tex Intel, this is Tex."

    def test_template_ignored_after_hours(self):
        tenant = make_client(first_message_template="Thanks for calling {company_name}, this is {agent_name}.")

        assert build_first_message(tenant, None, True) == (
            "Thanks for calling Tex Intel. We're currently closed, but I can help you schedule a callback."
        )

    def test_broken_template_falls_back(self):
        tenant = make_client(first_message_template="Hello {unknown_placeholder}")

        assert build_first_message(tenant, None, False) == (
            "Thanks for calling Tex Intel. This is Tex, how can I help you today?"
        )


def test_format_caller_context_counts_calls():
    record = ContactRecord(phone_number=ABHAVE_PHONE, name="Abhave", total_calls=4)

    assert "Previous calls: 4" in format_caller_context(record, ABHAVE_PHONE)
