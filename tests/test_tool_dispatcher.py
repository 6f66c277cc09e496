"""Tests for the tool dispatcher and the receptionist's tool handlers."""

import json
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from receptionist.core.errors import CollaboratorError, NotFoundError
from receptionist.domain.models.webhook_messages import ToolCallsMessage
from receptionist.domain.services.tool_dispatcher import (
    TOOL_NOT_FOUND,
    ToolDispatcher,
    ToolRegistry,
    ToolSpec,
    parse_tool_arguments,
)
from receptionist.domain.services.tool_handlers import build_tool_registry, format_price
from receptionist.persistence.models import Call, CallbackRequest
from receptionist.persistence.stores import CallerDirectory, CallRecordStore, EquipmentDirectory

from tests.conftest import ABHAVE_PHONE, CLIENT_ID, PHONE_LINE_ID, UNKNOWN_PHONE

# Monday, October 19, 2026 at 9:05 AM in Phoenix
OPEN_NOW = datetime(2026, 10, 19, 16, 5)
# Monday, October 19, 2026 at 8:30 PM in Phoenix
CLOSED_NOW = datetime(2026, 10, 20, 3, 30)

CONTROL_URL = "https://phone-call-websocket.aws-us-west-2-backend-production1.vapi.ai/call-1/control-abc"


def tool_message(name: str, arguments, caller: str = ABHAVE_PHONE, control_url: str | None = CONTROL_URL, extra_calls=None):
    call = {
        "id": "call-1",
        "type": "inboundPhoneCall",
        "phoneNumberId": PHONE_LINE_ID,
        "customer": {"number": caller},
    }
    if control_url:
        call["monitor"] = {"controlUrl": control_url}
    tool_calls = [{"id": "tc-1", "type": "function", "function": {"name": name, "arguments": arguments}}]
    tool_calls.extend(extra_calls or [])
    return ToolCallsMessage.model_validate({"type": "tool-calls", "call": call, "toolCalls": tool_calls})


def make_dispatcher(session, call_control, registry=None) -> ToolDispatcher:
    return ToolDispatcher(
        registry=registry or build_tool_registry(),
        store=CallRecordStore(session),
        caller_directory=CallerDirectory(session),
        equipment_directory=EquipmentDirectory(session),
        call_control=call_control,
    )


class TestArgumentParsing:

    def test_json_string(self):
        assert parse_tool_arguments('{"query": "excavator"}') == {"query": "excavator"}

    def test_native_object(self):
        assert parse_tool_arguments({"query": "dozer"}) == {"query": "dozer"}

    def test_malformed_string_is_empty(self):
        assert parse_tool_arguments('{"query": ') == {}

    def test_non_object_json_is_empty(self):
        assert parse_tool_arguments('["excavator"]') == {}
        assert parse_tool_arguments(None) == {}
        assert parse_tool_arguments(42) == {}


class TestDispatchSemantics:
    """Registry lookup, sync/async replies and error surfacing with a fake registry."""

    @pytest.mark.asyncio
    async def test_unknown_tool_returns_not_found_string(self, db_session, call_control):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("launch_rocket", {}))

        assert result.status_code == 200
        assert result.body == {"results": [{"toolCallId": "tc-1", "result": TOOL_NOT_FOUND}]}
        assert TOOL_NOT_FOUND == "Tool not found."

    @pytest.mark.asyncio
    async def test_sync_tool_returns_result(self, db_session, call_control):
        handler = AsyncMock(return_value="pong")
        registry = ToolRegistry([ToolSpec("ping", handler)])
        dispatcher = make_dispatcher(db_session, call_control, registry)

        result = await dispatcher.dispatch(tool_message("ping", '{"value": 1}'))

        assert result.body == {"results": [{"toolCallId": "tc-1", "result": "pong"}]}
        context = handler.await_args.args[0]
        assert context.arguments == {"value": 1}

    @pytest.mark.asyncio
    async def test_async_tool_returns_bare_ack(self, db_session, call_control):
        registry = ToolRegistry([ToolSpec("fire", AsyncMock(return_value=None), is_async=True)])
        dispatcher = make_dispatcher(db_session, call_control, registry)

        result = await dispatcher.dispatch(tool_message("fire", {}))

        assert result.status_code == 200
        assert result.body == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_only_first_invocation_runs(self, db_session, call_control):
        first = AsyncMock(return_value="first")
        second = AsyncMock(return_value="second")
        registry = ToolRegistry([ToolSpec("first", first), ToolSpec("second", second)])
        dispatcher = make_dispatcher(db_session, call_control, registry)
        extra = [{"id": "tc-2", "function": {"name": "second", "arguments": {}}}]

        result = await dispatcher.dispatch(tool_message("first", {}, extra_calls=extra))

        assert result.body["results"][0]["result"] == "first"
        first.assert_awaited_once()
        second.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_exception_is_error_response(self, db_session, call_control):
        handler = AsyncMock(side_effect=CollaboratorError("call_control", "boom"))
        registry = ToolRegistry([ToolSpec("fire", handler, is_async=True)])
        dispatcher = make_dispatcher(db_session, call_control, registry)

        result = await dispatcher.dispatch(tool_message("fire", {}))

        assert result.status_code == 500
        assert result.body["error"] == "Tool execution failed"
        assert result.body["toolCallId"] == "tc-1"
        assert "boom" in result.body["details"]

    @pytest.mark.asyncio
    async def test_not_found_becomes_spoken_apology(self, db_session, call_control):
        handler = AsyncMock(side_effect=NotFoundError("missing", spoken_message="Sorry about that."))
        registry = ToolRegistry([ToolSpec("fire", handler, is_async=True)])
        dispatcher = make_dispatcher(db_session, call_control, registry)

        result = await dispatcher.dispatch(tool_message("fire", {}))

        assert result.status_code == 200
        assert result.body == {"results": [{"toolCallId": "tc-1", "result": "Sorry about that."}]}

    @pytest.mark.asyncio
    async def test_no_tool_calls(self, db_session, call_control):
        dispatcher = make_dispatcher(db_session, call_control)
        message = ToolCallsMessage.model_validate({"type": "tool-calls", "toolCalls": []})

        result = await dispatcher.dispatch(message)

        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_tool_call_list_alias(self, db_session, call_control):
        registry = ToolRegistry([ToolSpec("ping", AsyncMock(return_value="pong"))])
        dispatcher = make_dispatcher(db_session, call_control, registry)
        message = ToolCallsMessage.model_validate(
            {"type": "tool-calls", "toolCallList": [{"id": "tc-9", "function": {"name": "ping", "arguments": "{}"}}]}
        )

        result = await dispatcher.dispatch(message)

        assert result.body == {"results": [{"toolCallId": "tc-9", "result": "pong"}]}

    def test_duplicate_registration_rejected(self):
        registry = ToolRegistry([ToolSpec("ping", AsyncMock())])

        with pytest.raises(ValueError):
            registry.register(ToolSpec("ping", AsyncMock()))


class TestCheckInventory:

    @pytest.mark.asyncio
    async def test_matches_model_and_price(self, db_session, call_control, inventory):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("check_inventory", json.dumps({"query": "excavator"})))

        text = result.body["results"][0]["result"]
        assert text == (
            "We have the following available: Cat 320 (3 available at $950/day), "
            "Cat 336 (2 available at $1,200/day)"
        )

    @pytest.mark.asyncio
    async def test_nothing_on_the_lot(self, db_session, call_control, inventory):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("check_inventory", {"query": "crane"}))

        assert result.body["results"][0]["result"] == "I checked the lot, but I don't see any crane available right now."

    @pytest.mark.asyncio
    async def test_unavailable_units_are_not_offered(self, db_session, call_control, inventory):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("check_inventory", {"query": "Cat D6"}))

        assert "don't see any Cat D6" in result.body["results"][0]["result"]

    @pytest.mark.asyncio
    async def test_missing_query_asks_for_equipment(self, db_session, call_control, inventory):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("check_inventory", "not json"))

        assert result.body["results"][0]["result"] == "Which type of equipment are you looking for?"

    def test_format_price(self):
        assert format_price(1200) == "$1,200"
        assert format_price(87.5) == "$87.50"


class TestTransferCall:

    @pytest.mark.asyncio
    async def test_transfers_known_caller(self, db_session, call_control, tenant, known_caller):
        store = CallRecordStore(db_session)
        await store.upsert_call("call-1", status="in-progress", client_id=CLIENT_ID)
        dispatcher = make_dispatcher(db_session, call_control)
        arguments = {"department": "rentals", "reason": "needs a Cat 336 for Thursday"}

        result = await dispatcher.dispatch(tool_message("transfer_call", arguments), now=OPEN_NOW)

        assert result.status_code == 200
        assert result.body == {"status": "ok"}
        call_control.transfer.assert_awaited_once_with(
            CONTROL_URL,
            "+16025550102",
            "Transfer from Tex Intel receptionist. Abhave from Tex Intel HQ. "
            "needs a Cat 336 for Thursday. Urgency: medium.",
            "Perfect, connecting you to rentals now. They'll be right with you.",
        )
        call = await store.get_call("call-1")
        assert call.transferred_to == "rentals"

    @pytest.mark.asyncio
    async def test_critical_urgency_message(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)
        arguments = {"department": "service", "reason": "excavator down", "urgency": "critical"}

        await dispatcher.dispatch(tool_message("transfer_call", arguments, caller=UNKNOWN_PHONE), now=OPEN_NOW)

        _, destination, brief, caller_message = call_control.transfer.await_args.args
        assert destination == "+16025550103"
        assert "Unknown caller" in brief
        assert caller_message == "Connecting you to service immediately."

    @pytest.mark.asyncio
    async def test_missing_control_url_fails_loudly(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(
            tool_message("transfer_call", {"department": "sales", "reason": "quote"}, control_url=None),
            now=OPEN_NOW,
        )

        assert result.status_code == 500
        assert result.body["error"] == "Tool execution failed"
        call_control.transfer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unconfigured_department_offers_callback(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(
            tool_message("transfer_call", {"department": "parts", "reason": "filters"}),
            now=OPEN_NOW,
        )

        assert result.status_code == 200
        assert "callback" in result.body["results"][0]["result"]
        call_control.transfer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_after_hours_transfer_offers_callback(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(
            tool_message("transfer_call", {"department": "sales", "reason": "quote"}),
            now=CLOSED_NOW,
        )

        assert result.status_code == 200
        assert "callback" in result.body["results"][0]["result"]
        call_control.transfer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_control_channel_failure_propagates(self, db_session, call_control, tenant):
        call_control.transfer.side_effect = CollaboratorError("call_control", "transfer failed with status 502")
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(
            tool_message("transfer_call", {"department": "sales", "reason": "quote"}),
            now=OPEN_NOW,
        )

        assert result.status_code == 500
        assert "502" in result.body["details"]


class TestScheduleCallback:

    @pytest.mark.asyncio
    async def test_creates_pending_callback(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)
        arguments = {
            "customer_name": "Dana",
            "customer_phone": UNKNOWN_PHONE,
            "preferred_time": "Tuesday, October 20 at 9am",
            "reason": "Excavator rental",
            "department": "rentals",
        }

        result = await dispatcher.dispatch(tool_message("schedule_callback", arguments, caller=UNKNOWN_PHONE))

        assert result.body["results"][0]["result"] == (
            "Got it! I've got you down for a callback Tuesday, October 20 at 9am. Someone from rentals "
            "will give you a call then. Anything else you want me to pass along to them?"
        )
        rows = (await db_session.execute(select(CallbackRequest))).scalars().all()
        assert len(rows) == 1
        assert rows[0].status == "pending"
        assert rows[0].preferred_time == "Tuesday, October 20 at 9am"
        assert rows[0].client_id == CLIENT_ID
        assert rows[0].call_id == "call-1"

    @pytest.mark.asyncio
    async def test_short_argument_names_and_caller_id(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)
        arguments = {"name": "Dana", "preferred_time": "Monday, October 26 at 8am", "department": "Service"}

        await dispatcher.dispatch(tool_message("schedule_callback", arguments, caller=UNKNOWN_PHONE))

        row = (await db_session.execute(select(CallbackRequest))).scalar_one()
        assert row.customer_name == "Dana"
        assert row.customer_phone == UNKNOWN_PHONE
        assert row.department == "service"

    @pytest.mark.asyncio
    async def test_missing_time_asks_and_saves_nothing(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(tool_message("schedule_callback", {"department": "sales"}))

        assert result.body["results"][0]["result"] == "What day and time works best for the callback?"
        assert (await db_session.execute(select(CallbackRequest))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_missing_department_asks(self, db_session, call_control, tenant):
        dispatcher = make_dispatcher(db_session, call_control)

        result = await dispatcher.dispatch(
            tool_message("schedule_callback", {"preferred_time": "Tuesday, October 20 at 9am"})
        )

        assert result.body["results"][0]["result"].startswith("Which department should call you back")

    @pytest.mark.asyncio
    async def test_missing_client_degrades_to_apology(self, db_session, call_control):
        dispatcher = make_dispatcher(db_session, call_control)
        arguments = {"preferred_time": "Tuesday, October 20 at 9am", "department": "sales"}

        result = await dispatcher.dispatch(tool_message("schedule_callback", arguments))

        assert result.status_code == 200
        assert "issue on our end" in result.body["results"][0]["result"]
