"""Tool dispatcher: executes the agent's mid-call tool invocations.

Sync tools answer in the same response cycle with a result string. Async
tools perform a side effect (a live transfer) and get a bare
acknowledgement, since the runtime has already moved on.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable

from receptionist.core.errors import NotFoundError
from receptionist.domain.models.webhook_messages import ToolCall, ToolCallsMessage
from receptionist.infrastructure.vapi_client import VapiCallControl
from receptionist.persistence.stores import CallerDirectory, CallRecordStore, EquipmentDirectory

logger = logging.getLogger(__name__)

TOOL_NOT_FOUND = "Tool not found."


@dataclass
class ToolContext:
    """Everything a handler may touch for one invocation."""

    message: ToolCallsMessage
    tool_call: ToolCall
    arguments: dict[str, Any]
    store: CallRecordStore
    caller_directory: CallerDirectory
    equipment_directory: EquipmentDirectory
    call_control: VapiCallControl
    now: datetime | None = None


ToolHandler = Callable[[ToolContext], Awaitable[str | None]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    handler: ToolHandler
    is_async: bool = False


class ToolRegistry:
    """Name-keyed table of tool handlers, built once at startup."""

    def __init__(self, specs: list[ToolSpec] | None = None) -> None:
        self._specs: dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._specs[spec.name] = spec

    def get(self, name: str) -> ToolSpec | None:
        return self._specs.get(name)


@dataclass
class ToolDispatchResult:
    """HTTP status and JSON body to send back to the runtime."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def parse_tool_arguments(raw: Any) -> dict[str, Any]:
    """Parse tool arguments sent as a JSON string or a native object.

    Malformed or non-object arguments become an empty dict.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Malformed tool arguments, using empty set: {raw[:200]}")
            return {}
        if isinstance(parsed, dict):
            return parsed
    logger.warning(f"Tool arguments are not an object, using empty set: {type(raw).__name__}")
    return {}


def invalid_tool_calls_result(raw: Any, error: str) -> ToolDispatchResult:
    """Error response for a tool-calls payload that could not be decoded.

    The id of the first tool call is echoed back when it can be found.
    """
    tool_call_id = None
    if isinstance(raw, dict):
        calls = raw.get("toolCalls") or raw.get("toolCallList")
        if isinstance(calls, list) and calls and isinstance(calls[0], dict):
            tool_call_id = calls[0].get("id")
    return ToolDispatchResult(
        400,
        {"error": "Invalid tool call payload", "details": error, "toolCallId": tool_call_id},
    )


def _result(tool_call_id: str | None, result: str) -> ToolDispatchResult:
    return ToolDispatchResult(200, {"results": [{"toolCallId": tool_call_id, "result": result}]})


class ToolDispatcher:
    """Routes the first tool invocation of a batch to its registered handler."""

    def __init__(
        self,
        registry: ToolRegistry,
        store: CallRecordStore,
        caller_directory: CallerDirectory,
        equipment_directory: EquipmentDirectory,
        call_control: VapiCallControl,
    ) -> None:
        self.registry = registry
        self.store = store
        self.caller_directory = caller_directory
        self.equipment_directory = equipment_directory
        self.call_control = call_control

    async def dispatch(self, message: ToolCallsMessage, now: datetime | None = None) -> ToolDispatchResult:
        """Execute the first tool call in a tool-calls message.

        Args:
            message: Decoded tool-calls message
            now: Instant used for business-hours checks (defaults to current time)

        Returns:
            ToolDispatchResult with the response for the runtime
        """
        invocations = message.invocations
        if not invocations:
            logger.warning("No tool calls found in payload")
            return ToolDispatchResult(400, {"error": "No tool calls found"})

        if len(invocations) > 1:
            # Only the first invocation of a batch is executed
            logger.warning(
                f"Received {len(invocations)} tool calls, processing only the first",
                extra={"tool_names": [call.function.name for call in invocations]},
            )

        tool_call = invocations[0]
        name = tool_call.function.name
        arguments = parse_tool_arguments(tool_call.function.arguments)
        logger.info(f"Tool call: {name}", extra={"tool_name": name, "tool_call_id": tool_call.id, "arguments": arguments})

        spec = self.registry.get(name)
        if spec is None:
            logger.warning(f"Unknown tool: {name}", extra={"tool_name": name})
            return _result(tool_call.id, TOOL_NOT_FOUND)

        context = ToolContext(
            message=message,
            tool_call=tool_call,
            arguments=arguments,
            store=self.store,
            caller_directory=self.caller_directory,
            equipment_directory=self.equipment_directory,
            call_control=self.call_control,
            now=now,
        )

        try:
            result = await spec.handler(context)
        except NotFoundError as e:
            logger.warning(f"Tool {name} could not complete: {e}", extra={"tool_name": name})
            return _result(tool_call.id, e.spoken_message)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True, extra={"tool_name": name})
            return ToolDispatchResult(
                500,
                {"error": "Tool execution failed", "details": str(e), "toolCallId": tool_call.id},
            )

        if spec.is_async:
            return ToolDispatchResult(200, {"status": "ok"})

        logger.info(f"Tool result: {result}", extra={"tool_name": name})
        return _result(tool_call.id, result or "")
