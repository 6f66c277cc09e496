"""Session controller: the Vapi server-message state machine.

No call state lives in this process between webhooks. Every transition
reads and writes the call record store by call id, so each message can be
applied on its own, in any order, and more than once.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from receptionist.core.call_context import set_tenant_context
from receptionist.core.errors import CollaboratorError, ConfigurationError
from receptionist.domain.models.webhook_messages import (
    AssistantRequestMessage,
    EndOfCallReportMessage,
    ServerMessage,
    StatusUpdateMessage,
    ToolCallsMessage,
    UndecodableMessage,
)
from receptionist.domain.services.context_builder import ContextAssembler
from receptionist.domain.services.tool_dispatcher import (
    ToolDispatcher,
    ToolDispatchResult,
    invalid_tool_calls_result,
)
from receptionist.persistence.stores import CallerDirectory, CallRecordStore

logger = logging.getLogger(__name__)

ACK = {"status": "ok"}
ENDED_STATUS = "ended"
SCORE_PATTERN = re.compile(r"\d+")


@dataclass
class CallOverride:
    """Transient per-call layer on top of the permanent assistant."""

    variable_values: dict[str, str]
    first_message: str

    def to_dict(self) -> dict[str, Any]:
        return {"variableValues": self.variable_values, "firstMessage": self.first_message}


@dataclass
class AssistantSelection:
    """Permanent assistant identity composed with a per-call override."""

    assistant_id: str
    override: CallOverride

    def to_dict(self) -> dict[str, Any]:
        return {"assistantId": self.assistant_id, "assistantOverrides": self.override.to_dict()}


@dataclass
class WebhookResponse:
    status_code: int = 200
    body: dict[str, Any] = field(default_factory=lambda: dict(ACK))


def parse_success_score(value: Any) -> int | None:
    """Pull a 1-10 score out of a success evaluation ("8/10" -> 8).

    Returns None when the value is absent, has no number, or is out of range.
    """
    if value is None or isinstance(value, bool):
        return None
    match = SCORE_PATTERN.search(str(value))
    if not match:
        return None
    score = int(match.group())
    if 1 <= score <= 10:
        return score
    return None


def extract_structured_result(message: EndOfCallReportMessage) -> dict | None:
    """The single structured-analysis result for a call, if present and not an error."""
    candidate: Any = None
    outputs = message.artifact.structured_outputs if message.artifact else None
    if isinstance(outputs, dict) and outputs:
        candidate = next(iter(outputs.values()))
    elif isinstance(outputs, list) and outputs:
        candidate = outputs[0]

    # Structured outputs wrap the payload as {"name": ..., "result": {...}}
    if isinstance(candidate, dict) and "result" in candidate:
        if candidate.get("error"):
            return None
        candidate = candidate.get("result")

    if candidate is None and message.analysis is not None:
        candidate = message.analysis.structured_data

    if not isinstance(candidate, dict) or not candidate:
        return None
    if candidate.get("error") and set(candidate) <= {"error", "message", "details"}:
        return None
    return candidate


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _contact_fields(data: dict) -> dict[str, Any]:
    caller = data.get("caller") if isinstance(data.get("caller"), dict) else {}
    machine = data.get("machine") if isinstance(data.get("machine"), dict) else {}

    last_machine = None
    if machine.get("make") or machine.get("model"):
        last_machine = " ".join(str(part) for part in (machine.get("make"), machine.get("model")) if part)
    elif machine.get("category"):
        last_machine = str(machine["category"])

    return {
        "name": caller.get("name") or None,
        "company": caller.get("company") or None,
        "email": caller.get("email") or None,
        "last_machine": last_machine,
    }


class SessionController:
    """Handles one webhook delivery from the voice runtime."""

    def __init__(
        self,
        store: CallRecordStore,
        caller_directory: CallerDirectory,
        context_assembler: ContextAssembler,
        tool_dispatcher: ToolDispatcher,
    ) -> None:
        self.store = store
        self.caller_directory = caller_directory
        self.context_assembler = context_assembler
        self.tool_dispatcher = tool_dispatcher
        self._handlers = {
            "assistant-request": self.handle_assistant_request,
            "status-update": self.handle_status_update,
            "conversation-update": self.handle_observational,
            "speech-update": self.handle_observational,
            "tool-calls": self.handle_tool_calls,
            "end-of-call-report": self.handle_end_of_call_report,
        }

    async def handle(self, message: ServerMessage, now: datetime | None = None) -> WebhookResponse:
        """Route a decoded server message to its handler.

        Unknown message types and payloads that could not be decoded are
        acknowledged and ignored; an undecodable tool-calls message gets an
        explicit error result.

        Raises:
            ConfigurationError: For an assistant-request on an unprovisioned tenant
            CollaboratorError: If the tenant lookup for an assistant-request fails
        """
        if isinstance(message, UndecodableMessage):
            if message.type == "tool-calls":
                result = invalid_tool_calls_result(message.raw, message.error)
                return WebhookResponse(result.status_code, result.body)
            logger.warning(
                f"Acknowledging undecodable {message.type} message without processing",
                extra={"message_type": message.type},
            )
            return WebhookResponse()

        handler = self._handlers.get(message.type)
        if handler is None:
            logger.info(f"Ignoring unhandled message type: {message.type}", extra={"message_type": message.type})
            return WebhookResponse()
        return await handler(message, now)

    async def handle_assistant_request(
        self, message: AssistantRequestMessage, now: datetime | None = None
    ) -> WebhookResponse:
        """Pick the permanent assistant and build this call's override."""
        client = await self.store.get_client_by_phone_line_id(message.phone_number_id)
        if client is None:
            raise ConfigurationError(
                f"No client configured for phone line {message.phone_number_id} and no default client"
            )
        set_tenant_context(client.id)

        if not client.vapi_assistant_id:
            raise ConfigurationError(f"Client {client.id} has no provisioned assistant")

        context = await self.context_assembler.build_context(message.caller_phone, client, now=now)

        if message.call_id:
            try:
                await self.store.upsert_call(
                    message.call_id,
                    client_id=client.id,
                    phone_number_id=message.phone_number_id,
                    caller_phone=message.caller_phone,
                    call_type=message.call.type if message.call else None,
                    started_at=_naive_utc(message.call.started_at) if message.call else None,
                    status="in-progress",
                )
            except CollaboratorError as e:
                logger.error(f"Failed to record call start: {e}", exc_info=True)

        selection = AssistantSelection(
            assistant_id=client.vapi_assistant_id,
            override=CallOverride(variable_values=context.variables, first_message=context.first_message),
        )
        logger.info(
            f"Assistant selected for call: {client.vapi_assistant_id}",
            extra={
                "client_id": client.id,
                "assistant_id": client.vapi_assistant_id,
                "is_after_hours": context.is_after_hours,
                "known_caller": context.caller is not None,
            },
        )
        return WebhookResponse(200, selection.to_dict())

    async def handle_status_update(self, message: StatusUpdateMessage, now: datetime | None = None) -> WebhookResponse:
        artifacts = message.failure_artifacts
        if artifacts:
            logger.warning(
                f"Status update with failure artifacts: {message.status}",
                extra={"status": message.status, "ended_reason": message.ended_reason, "artifacts": artifacts},
            )
        else:
            logger.debug(f"Status update: {message.status}", extra={"status": message.status})
        return WebhookResponse()

    async def handle_observational(self, message: ServerMessage, now: datetime | None = None) -> WebhookResponse:
        logger.debug(f"Received {message.type}")
        return WebhookResponse()

    async def handle_tool_calls(self, message: ToolCallsMessage, now: datetime | None = None) -> WebhookResponse:
        result: ToolDispatchResult = await self.tool_dispatcher.dispatch(message, now=now)
        return WebhookResponse(result.status_code, result.body)

    async def handle_end_of_call_report(
        self, message: EndOfCallReportMessage, now: datetime | None = None
    ) -> WebhookResponse:
        """Persist the final call record. Failures are logged, never surfaced."""
        call_id = message.call_id
        if not call_id:
            logger.warning("end-of-call-report without a call id")
            return WebhookResponse()

        try:
            await self._persist_end_of_call(call_id, message)
        except Exception as e:
            logger.error(f"Failed to persist end-of-call report for {call_id}: {e}", exc_info=True)
            try:
                await self.store.session.rollback()
            except Exception:
                logger.exception("Rollback failed after end-of-call error")
        return WebhookResponse()

    async def _persist_end_of_call(self, call_id: str, message: EndOfCallReportMessage) -> None:
        existing = await self.store.get_call(call_id)
        # Counted once per call, however many reports arrive
        count_call = existing is None or not existing.contact_counted

        client_id = existing.client_id if existing is not None else None
        if client_id is None:
            client = await self.store.get_client_by_phone_line_id(message.phone_number_id)
            client_id = client.id if client else None
        if client_id:
            set_tenant_context(client_id)

        analysis = message.analysis
        artifact = message.artifact
        costs = message.cost_breakdown
        call = message.call

        await self.store.upsert_call(
            call_id,
            client_id=client_id,
            phone_number_id=message.phone_number_id,
            caller_phone=message.caller_phone,
            call_type=call.type if call else None,
            started_at=_naive_utc(message.started_at or (call.started_at if call else None)),
            ended_at=_naive_utc(message.ended_at or (call.ended_at if call else None)),
            status=ENDED_STATUS,
            ended_reason=message.ended_reason,
            transcript=message.transcript or (artifact.transcript if artifact else None),
            summary=message.summary or (analysis.summary if analysis else None),
            recording_url=message.recording_url or (artifact.recording_url if artifact else None),
            stereo_recording_url=message.stereo_recording_url or (artifact.stereo_recording_url if artifact else None),
            success_score=parse_success_score(analysis.success_evaluation) if analysis else None,
            cost_total=message.cost if message.cost is not None else (costs.total if costs else None),
            cost_transport=costs.transport if costs else None,
            cost_stt=costs.stt if costs else None,
            cost_llm=costs.llm if costs else None,
            cost_tts=costs.tts if costs else None,
            cost_vapi=costs.vapi if costs else None,
            llm_prompt_tokens=costs.llm_prompt_tokens if costs else None,
            llm_completion_tokens=costs.llm_completion_tokens if costs else None,
            tts_characters=costs.tts_characters if costs else None,
        )

        structured = extract_structured_result(message)
        if structured is None:
            logger.info(f"Call {call_id} saved without structured data")
            return

        await self.store.upsert_structured_data(call_id, structured)

        caller = structured.get("caller") if isinstance(structured.get("caller"), dict) else {}
        contact_phone = message.caller_phone or caller.get("phone")
        await self.caller_directory.upsert(
            contact_phone,
            _contact_fields(structured),
            count_call=count_call,
            counted_call_id=call_id,
        )
        logger.info(
            f"Call {call_id} saved with structured data",
            extra={"counted_call": count_call, "client_id": client_id},
        )
