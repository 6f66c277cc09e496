"""Vapi server message payloads.

Each webhook body is {"message": {"type": ..., ...}}. The type tag selects
the model; unknown types decode as the permissive base message.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class VapiModel(BaseModel):
    """camelCase wire names, snake_case attributes, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Customer(VapiModel):
    number: str | None = None
    name: str | None = None


class PhoneNumberInfo(VapiModel):
    id: str | None = None
    number: str | None = None


class Monitor(VapiModel):
    control_url: str | None = None
    listen_url: str | None = None


class VapiCall(VapiModel):
    id: str | None = None
    type: str | None = None
    phone_number_id: str | None = None
    assistant_id: str | None = None
    customer: Customer | None = None
    monitor: Monitor | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None


class ServerMessage(VapiModel):
    """Fields shared by every server message."""

    type: str
    call: VapiCall | None = None
    phone_number: PhoneNumberInfo | None = None
    customer: Customer | None = None
    timestamp: Any = None

    @property
    def call_id(self) -> str | None:
        return self.call.id if self.call else None

    @property
    def caller_phone(self) -> str | None:
        if self.call and self.call.customer and self.call.customer.number:
            return self.call.customer.number
        if self.customer and self.customer.number:
            return self.customer.number
        return None

    @property
    def phone_number_id(self) -> str | None:
        if self.call and self.call.phone_number_id:
            return self.call.phone_number_id
        if self.phone_number and self.phone_number.id:
            return self.phone_number.id
        return None

    @property
    def control_url(self) -> str | None:
        if self.call and self.call.monitor:
            return self.call.monitor.control_url
        return None


class AssistantRequestMessage(ServerMessage):
    pass


class StatusUpdateMessage(ServerMessage):
    status: str | None = None
    ended_reason: str | None = None

    @property
    def failure_artifacts(self) -> dict[str, Any]:
        """Embedded debugging or error payloads, keyed by field name."""
        artifacts = {}
        for key, value in (self.model_extra or {}).items():
            if value and ("DebuggingArtifacts" in key or key in ("error", "errors")):
                artifacts[key] = value
        return artifacts


class ToolFunction(VapiModel):
    name: str = ""
    arguments: Any = None


class ToolCall(VapiModel):
    id: str | None = None
    type: str | None = None
    function: ToolFunction = Field(default_factory=ToolFunction)


class ToolCallsMessage(ServerMessage):
    tool_calls: list[ToolCall] | None = None
    tool_call_list: list[ToolCall] | None = None

    @property
    def invocations(self) -> list[ToolCall]:
        return self.tool_calls or self.tool_call_list or []


class CostBreakdown(VapiModel):
    transport: float | None = None
    stt: float | None = None
    llm: float | None = None
    tts: float | None = None
    vapi: float | None = None
    total: float | None = None
    llm_prompt_tokens: int | None = None
    llm_completion_tokens: int | None = None
    tts_characters: int | None = None


class Analysis(VapiModel):
    summary: str | None = None
    structured_data: Any = None
    success_evaluation: Any = None


class Artifact(VapiModel):
    transcript: str | None = None
    recording_url: str | None = None
    stereo_recording_url: str | None = None
    structured_outputs: Any = None


class EndOfCallReportMessage(ServerMessage):
    ended_reason: str | None = None
    summary: str | None = None
    transcript: str | None = None
    recording_url: str | None = None
    stereo_recording_url: str | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    cost: float | None = None
    cost_breakdown: CostBreakdown | None = None
    analysis: Analysis | None = None
    artifact: Artifact | None = None


class UndecodableMessage(ServerMessage):
    """A message whose payload does not fit the model for its type.

    Carries the raw payload and the validation error; it is acknowledged
    rather than processed.
    """

    raw: dict[str, Any] = Field(default_factory=dict)
    error: str = ""


MESSAGE_MODELS: dict[str, type[ServerMessage]] = {
    "assistant-request": AssistantRequestMessage,
    "status-update": StatusUpdateMessage,
    "tool-calls": ToolCallsMessage,
    "end-of-call-report": EndOfCallReportMessage,
}


def parse_server_message(payload: dict) -> ServerMessage:
    """Decode a webhook body into the model for its message type.

    Args:
        payload: Raw webhook body ({"message": {...}}) or the bare message

    Returns:
        Typed message; unknown types decode as ServerMessage and off-shape
        payloads as UndecodableMessage
    """
    message = payload.get("message", payload) if isinstance(payload, dict) else {}
    if not isinstance(message, dict):
        message = {}
    message_type = str(message.get("type") or "unknown")
    model = MESSAGE_MODELS.get(message_type, ServerMessage)
    try:
        return model.model_validate({**message, "type": message_type})
    except ValidationError as e:
        logger.warning(
            f"Could not decode {message_type} message: {e.error_count()} validation errors",
            extra={"message_type": message_type, "errors": e.errors(include_url=False)},
        )
        return UndecodableMessage(type=message_type, raw=message, error=str(e))
