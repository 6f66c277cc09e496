"""Vapi webhook endpoints: server messages and tool execution."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from receptionist.api.deps import get_session_controller, get_tool_dispatcher, verify_vapi_secret
from receptionist.core.call_context import clear_call_context, set_call_context
from receptionist.core.errors import CollaboratorError, ConfigurationError
from receptionist.domain.models.webhook_messages import ToolCallsMessage, parse_server_message
from receptionist.domain.services.session_controller import SessionController
from receptionist.domain.services.tool_dispatcher import ToolDispatcher, invalid_tool_calls_result

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_vapi_secret)])


@router.post("/inbound")
async def handle_server_message(
    controller: Annotated[SessionController, Depends(get_session_controller)],
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Handle a Vapi server message.

    assistant-request returns the assistant selection for the call; every
    other type is acknowledged with {"status": "ok"}. An unprovisioned tenant
    answers 500 and a failing collaborator during tenant lookup answers 503.

    Args:
        controller: Session controller bound to this request's session
        payload: Webhook body ({"message": {...}})

    Returns:
        JSON response for the runtime
    """
    message = parse_server_message(payload)
    set_call_context(message.call_id)
    logger.info(
        f"Vapi server message: {message.type}",
        extra={"message_type": message.type, "phone_number_id": message.phone_number_id},
    )

    try:
        response = await controller.handle(message)
    except ConfigurationError as e:
        logger.error(f"Configuration error handling {message.type}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "configuration_error", "message": str(e)},
        )
    except CollaboratorError as e:
        logger.error(f"Collaborator failure handling {message.type}: {e}", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"error": "collaborator_error", "collaborator": e.collaborator, "message": str(e)},
        )
    finally:
        clear_call_context()

    return JSONResponse(status_code=response.status_code, content=response.body)


@router.post("/tools")
async def execute_tool(
    dispatcher: Annotated[ToolDispatcher, Depends(get_tool_dispatcher)],
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Execute the first tool call in a tool-calls message.

    Sync tools return {"results": [{"toolCallId", "result"}]}; async tools
    return {"status": "ok"}.
    """
    raw = payload.get("message", payload) if isinstance(payload, dict) else {}
    if not isinstance(raw, dict):
        raw = {}
    try:
        message = ToolCallsMessage.model_validate({**raw, "type": "tool-calls"})
    except ValidationError as e:
        logger.warning(f"Could not decode tool-calls message: {e.error_count()} validation errors")
        result = invalid_tool_calls_result(raw, str(e))
        return JSONResponse(status_code=result.status_code, content=result.body)

    set_call_context(message.call_id)

    try:
        result = await dispatcher.dispatch(message)
    finally:
        clear_call_context()

    return JSONResponse(status_code=result.status_code, content=result.body)
