"""Handlers for the receptionist's tools and the registry that binds them."""

import logging
from datetime import datetime

from receptionist.core.errors import CollaboratorError, NotFoundError
from receptionist.domain.services.business_calendar import get_business_hours_snapshot
from receptionist.domain.services.tool_dispatcher import ToolContext, ToolRegistry, ToolSpec
from receptionist.persistence.models.client import DEPARTMENT_PHONE_COLUMNS
from receptionist.persistence.stores import EquipmentRecord

logger = logging.getLogger(__name__)

MAX_INVENTORY_RESULTS = 5
CALLBACK_DEPARTMENTS = set(DEPARTMENT_PHONE_COLUMNS) | {"general"}

CALLBACK_CLIENT_MISSING = (
    "I've noted your callback request, but there was an issue on our end. "
    "Please try calling back during business hours."
)


def _text(arguments: dict, *keys: str) -> str | None:
    """First non-empty string value among the given argument keys."""
    for key in keys:
        value = arguments.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def format_price(price: float) -> str:
    if float(price).is_integer():
        return f"${price:,.0f}"
    return f"${price:,.2f}"


def format_inventory_results(query: str, items: list[EquipmentRecord]) -> str:
    """Spoken summary of an inventory search."""
    available = [item for item in items if item.available > 0][:MAX_INVENTORY_RESULTS]
    if not available:
        return f"I checked the lot, but I don't see any {query} available right now."
    listed = ", ".join(
        f"{item.name} ({item.available} available at {format_price(item.price)}/day)"
        for item in available
    )
    return f"We have the following available: {listed}"


async def check_inventory(context: ToolContext) -> str:
    query = _text(context.arguments, "query", "equipment", "equipment_type")
    if not query:
        return "Which type of equipment are you looking for?"
    items = await context.equipment_directory.search(query)
    return format_inventory_results(query, items)


async def _describe_caller(context: ToolContext) -> str:
    caller_phone = context.message.caller_phone
    try:
        caller = await context.caller_directory.get(caller_phone)
    except CollaboratorError as e:
        logger.warning(f"Caller lookup failed for handoff brief: {e}")
        caller = None
    if caller is None or not caller.name:
        return "Unknown caller"
    if caller.company:
        return f"{caller.name} from {caller.company}"
    return caller.name


async def transfer_call(context: ToolContext) -> None:
    """Warm-transfer the live call to a department.

    Raises:
        CollaboratorError: No control URL on the call, or the transfer request failed
        NotFoundError: Unknown department, no client, office closed, or no number configured
    """
    department = (_text(context.arguments, "department") or "").lower()
    reason = _text(context.arguments, "reason") or "Reason not given"
    urgency = (_text(context.arguments, "urgency") or "medium").lower()

    control_url = context.message.control_url
    if not control_url:
        raise CollaboratorError("call_control", "Control URL not available for transfer")

    if department not in DEPARTMENT_PHONE_COLUMNS:
        raise NotFoundError(
            f"Unknown department: {department!r}",
            spoken_message=(
                "I'm not sure which department that is. Is this about sales, rentals, "
                "service, parts, or billing?"
            ),
        )

    client = await context.store.get_client_by_phone_line_id(context.message.phone_number_id)
    if client is None:
        raise NotFoundError(
            f"No client for phone line {context.message.phone_number_id}",
            spoken_message="I'm sorry, I can't transfer you right now. I can set up a callback instead.",
        )

    snapshot = get_business_hours_snapshot(context.now or datetime.utcnow())
    if not snapshot.is_open:
        raise NotFoundError(
            f"Transfer to {department} requested while the office is closed",
            spoken_message=(
                f"Our {department} team is out of the office right now, but I can schedule a "
                "callback for when we open."
            ),
        )

    destination = client.department_phone(department)
    if not destination:
        logger.error(
            f"No {department} number configured for client {client.id}",
            extra={"client_id": client.id, "department": department},
        )
        raise NotFoundError(
            f"Transfer destination not configured for {department}",
            spoken_message=(
                f"I'm sorry, I can't reach {department} directly right now. "
                "I can set up a callback so they call you back."
            ),
        )

    caller_description = await _describe_caller(context)
    handoff_brief = f"Transfer from {client.name} receptionist. {caller_description}. {reason}. Urgency: {urgency}."
    if urgency == "critical":
        caller_message = f"Connecting you to {department} immediately."
    else:
        caller_message = f"Perfect, connecting you to {department} now. They'll be right with you."

    await context.call_control.transfer(control_url, destination, handoff_brief, caller_message)

    call_id = context.message.call_id
    if call_id:
        try:
            await context.store.record_transfer(call_id, department)
        except CollaboratorError as e:
            # The caller is already being transferred
            logger.error(f"Failed to record transfer on call {call_id}: {e}")
    return None


async def schedule_callback(context: ToolContext) -> str:
    """Save a pending callback and confirm it back to the caller."""
    arguments = context.arguments
    customer_name = _text(arguments, "customer_name", "name")
    customer_phone = _text(arguments, "customer_phone", "phone") or context.message.caller_phone
    preferred_time = _text(arguments, "preferred_time")
    reason = _text(arguments, "reason")
    department = (_text(arguments, "department") or "").lower()

    if not preferred_time:
        return "What day and time works best for the callback?"
    if department not in CALLBACK_DEPARTMENTS:
        return "Which department should call you back: sales, rentals, service, parts, or billing?"
    if not customer_phone:
        return "What's the best number to reach you?"

    client = await context.store.get_client_by_phone_line_id(context.message.phone_number_id)
    if client is None:
        logger.error(f"No client found for phone line {context.message.phone_number_id}")
        return CALLBACK_CLIENT_MISSING

    callback = await context.store.save_callback(
        client_id=client.id,
        customer_phone=customer_phone,
        preferred_time=preferred_time,
        department=department,
        customer_name=customer_name,
        reason=reason,
        call_id=context.message.call_id,
    )
    logger.info(
        f"Scheduled callback {callback.id} for {preferred_time} ({department})",
        extra={"callback_id": callback.id, "client_id": client.id, "department": department},
    )
    return (
        f"Got it! I've got you down for a callback {preferred_time}. Someone from {department} "
        "will give you a call then. Anything else you want me to pass along to them?"
    )


def build_tool_registry() -> ToolRegistry:
    """Registry of every tool the receptionist can execute."""
    return ToolRegistry(
        [
            ToolSpec("check_inventory", check_inventory, is_async=False),
            ToolSpec("transfer_call", transfer_call, is_async=True),
            ToolSpec("schedule_callback", schedule_callback, is_async=False),
        ]
    )
