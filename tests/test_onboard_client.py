"""Tests for the client onboarding script."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from receptionist.core.errors import CollaboratorError
from receptionist.persistence.models import Client
from receptionist.persistence.stores import CallRecordStore

from scripts.onboard_client import onboard_client, validate_client_id
from tests.conftest import CLIENT_ID, PHONE_LINE_ID


def fake_vapi(assistant_id: str = "asst_acme") -> AsyncMock:
    vapi = AsyncMock()
    vapi.create_assistant.return_value = {"id": assistant_id}
    return vapi


@pytest.mark.asyncio
async def test_onboard_creates_routes_and_provisions(db_session):
    vapi = fake_vapi()

    client = await onboard_client(
        db_session,
        client_id="acme-rentals",
        name="Acme Rentals",
        department_phones={"rentals": "(602) 555-0202", "sales": "602-555-0201"},
        enable_inventory=False,
        first_message_template="Acme Rentals, this is {agent_name}. How can I help?",
        agent_name="Ava",
        phone_number_id="pn_acme_main",
        phone_number="602-555-0200",
        vapi=vapi,
    )

    assert client.rentals_phone == "+16025550202"
    assert client.sales_phone == "+16025550201"
    assert client.service_phone is None
    assert client.enable_inventory is False
    assert client.enable_transfers is True
    assert client.vapi_assistant_id == "asst_acme"

    config = vapi.create_assistant.await_args.args[0]
    assert config["name"] == "Acme Rentals - Receptionist"
    resolved = await CallRecordStore(db_session).get_client_by_phone_line_id("pn_acme_main")
    assert resolved.id == "acme-rentals"
    assert resolved.first_message_template == "Acme Rentals, this is {agent_name}. How can I help?"


@pytest.mark.asyncio
async def test_onboard_without_assistant(db_session):
    vapi = fake_vapi()

    client = await onboard_client(db_session, client_id="acme-rentals", name="Acme Rentals", provision=False, vapi=vapi)

    assert client.vapi_assistant_id is None
    vapi.create_assistant.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_provisioning_keeps_client(db_session):
    vapi = AsyncMock()
    vapi.create_assistant.side_effect = CollaboratorError("vapi", "create assistant failed: 401")

    client = await onboard_client(db_session, client_id="acme-rentals", name="Acme Rentals", vapi=vapi)

    assert client.id == "acme-rentals"
    assert client.vapi_assistant_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"client_id": CLIENT_ID},
        {"client_id": "Acme Rentals"},
        {"client_id": "acme-rentals", "phone_number_id": PHONE_LINE_ID, "phone_number": "+16025550200"},
        {"client_id": "acme-rentals", "phone_number_id": "pn_acme_main"},
        {"client_id": "acme-rentals", "department_phones": {"catering": "+16025550299"}},
    ],
)
async def test_rejected_without_changes(db_session, tenant, kwargs):
    vapi = fake_vapi()

    assert await onboard_client(db_session, name="Acme Rentals", vapi=vapi, **kwargs) is None

    assert (await db_session.execute(select(func.count()).select_from(Client))).scalar_one() == 1
    vapi.create_assistant.assert_not_awaited()


@pytest.mark.parametrize(
    "client_id, valid",
    [("acme-rentals", True), ("a", True), ("-acme", False), ("Acme", False), ("", False)],
)
def test_validate_client_id(client_id, valid):
    assert validate_client_id(client_id) is valid
