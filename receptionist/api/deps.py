"""FastAPI dependencies for the webhook endpoints."""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from receptionist.domain.services.context_builder import ContextAssembler
from receptionist.domain.services.session_controller import SessionController
from receptionist.domain.services.tool_dispatcher import ToolDispatcher, ToolRegistry
from receptionist.infrastructure.vapi_client import VapiCallControl
from receptionist.persistence.database import get_db
from receptionist.persistence.stores import CallerDirectory, CallRecordStore, EquipmentDirectory
from receptionist.settings import settings

logger = logging.getLogger(__name__)


def get_tool_registry(request: Request) -> ToolRegistry:
    """Tool registry built at startup."""
    return request.app.state.tool_registry


def get_call_control(request: Request) -> VapiCallControl:
    """Live call control client built at startup."""
    return request.app.state.call_control


async def verify_vapi_secret(
    x_vapi_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Check the shared webhook secret when one is configured.

    Raises:
        HTTPException: If the secret is configured and does not match
    """
    expected = settings.vapi_webhook_secret
    if not expected:
        return
    if not x_vapi_secret or not hmac.compare_digest(x_vapi_secret, expected):
        logger.warning("Rejected webhook with invalid x-vapi-secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret",
        )


def get_tool_dispatcher(
    db: Annotated[AsyncSession, Depends(get_db)],
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    call_control: Annotated[VapiCallControl, Depends(get_call_control)],
) -> ToolDispatcher:
    return ToolDispatcher(
        registry=registry,
        store=CallRecordStore(db),
        caller_directory=CallerDirectory(db),
        equipment_directory=EquipmentDirectory(db),
        call_control=call_control,
    )


def get_session_controller(
    db: Annotated[AsyncSession, Depends(get_db)],
    dispatcher: Annotated[ToolDispatcher, Depends(get_tool_dispatcher)],
) -> SessionController:
    caller_directory = CallerDirectory(db)
    return SessionController(
        store=CallRecordStore(db),
        caller_directory=caller_directory,
        context_assembler=ContextAssembler(caller_directory),
        tool_dispatcher=dispatcher,
    )
