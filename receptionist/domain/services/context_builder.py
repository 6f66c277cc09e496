"""Per-call context assembly: caller history plus business hours."""

import logging
from dataclasses import dataclass
from datetime import datetime

from receptionist.core.errors import CollaboratorError
from receptionist.domain.services.business_calendar import (
    DEFAULT_SCHEDULE,
    BusinessHoursSnapshot,
    WeeklySchedule,
    get_business_hours_snapshot,
)
from receptionist.persistence.models.client import Client
from receptionist.persistence.stores import CallerDirectory, ContactRecord

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
NEW_CALLER_MARKER = "New caller (no history)"
DEFAULT_AGENT_NAME = "Tex"


@dataclass
class CallContext:
    """Result of context assembly for one call."""

    variables: dict[str, str]
    is_after_hours: bool
    business_hours: BusinessHoursSnapshot
    caller: ContactRecord | None = None
    first_message: str = ""

    @property
    def caller_name(self) -> str | None:
        return self.caller.name if self.caller else None


def _value(value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return UNKNOWN
    return str(value)


def format_caller_context(caller: ContactRecord | None, caller_phone: str | None) -> str:
    """Render the caller block; every absent field is spelled out as Unknown."""
    phone_line = f"Phone: {_value(caller_phone)}"
    if caller is None:
        return f"{NEW_CALLER_MARKER}\n{phone_line}"

    lines = [
        f"Name: {_value(caller.name)}",
        f"Company: {_value(caller.company)}",
        f"Status: {_value(caller.status)}",
        f"Previously asked about: {_value(caller.last_machine)}",
        f"Previous calls: {caller.total_calls}",
        phone_line,
    ]
    return "\n".join(lines)


def format_business_hours_context(snapshot: BusinessHoursSnapshot) -> str:
    """Render the business hours block with the pre-computed dates."""
    lines = [
        f"Today's date: {snapshot.current_date}",
        f"Current time: {snapshot.current_day}, {snapshot.current_time}",
        f"Office status: {'OPEN' if snapshot.is_open else 'CLOSED'}",
        "",
        "BUSINESS HOURS SCHEDULE:",
        *snapshot.schedule_lines,
    ]
    if not snapshot.is_open and snapshot.next_open:
        lines.extend(["", f"Next open: {snapshot.next_open}"])

    upcoming = snapshot.upcoming
    lines.extend(["", "PRE-COMPUTED DATES (use these exact phrases):"])
    if upcoming.tomorrow:
        lines.append(f"- Tomorrow: {upcoming.tomorrow}")
    lines.append(f"- Next business day: {upcoming.next_business_day}")
    lines.append(f"- Next Monday: {upcoming.next_monday}")
    lines.append(f"- Next Tuesday: {upcoming.next_tuesday}")
    return "\n".join(lines)


def build_first_message(client: Client, caller_name: str | None, is_after_hours: bool) -> str:
    """Pick the opening line for the call.

    After-hours calls always get the closed-office line. During open hours a
    client's first_message_template, when set, replaces the default greeting.

    Args:
        client: Client answering the call
        caller_name: Known caller name, or None
        is_after_hours: Whether the office is closed right now

    Returns:
        Opening line for the agent
    """
    company = client.name
    if is_after_hours:
        if caller_name:
            return (
                f"Hi {caller_name}, thanks for calling {company}. "
                "We're currently closed, but I can help you schedule a callback."
            )
        return f"Thanks for calling {company}. We're currently closed, but I can help you schedule a callback."

    agent_name = client.agent_name or DEFAULT_AGENT_NAME
    template = (client.first_message_template or "").strip()
    if template:
        try:
            return template.format(
                company_name=company,
                agent_name=agent_name,
                caller_name=caller_name or "there",
            )
        except (KeyError, IndexError, ValueError):
            logger.warning(
                f"Invalid first_message_template for client {client.id}, using default greeting",
                extra={"client_id": client.id},
            )

    if caller_name:
        return f"Hi {caller_name}, thanks for calling {company} again. This is {agent_name}, how can I help you today?"
    return f"Thanks for calling {company}. This is {agent_name}, how can I help you today?"


class ContextAssembler:
    """Builds the per-call variables injected into the assistant prompt."""

    def __init__(self, caller_directory: CallerDirectory, schedule: WeeklySchedule = DEFAULT_SCHEDULE) -> None:
        """Initialize context assembler.

        Args:
            caller_directory: Contact lookup by phone
            schedule: Weekly business hours
        """
        self.caller_directory = caller_directory
        self.schedule = schedule

    async def _lookup_caller(self, caller_phone: str | None) -> ContactRecord | None:
        if not caller_phone:
            return None
        try:
            return await self.caller_directory.get(caller_phone)
        except CollaboratorError as e:
            # Treat as a new caller rather than guessing who is on the line
            logger.error(f"Caller lookup failed, continuing as new caller: {e}", exc_info=True)
            return None

    async def build_context(
        self,
        caller_phone: str | None,
        client: Client,
        now: datetime | None = None,
    ) -> CallContext:
        """Assemble caller and business hours context for a call.

        Args:
            caller_phone: Caller number from the runtime (may be missing)
            client: Client answering the call
            now: Instant to evaluate business hours at (defaults to current UTC time)

        Returns:
            CallContext with prompt variables, after-hours flag and opening line
        """
        now = now or datetime.utcnow()
        caller = await self._lookup_caller(caller_phone)
        snapshot = get_business_hours_snapshot(now, self.schedule)
        is_after_hours = not snapshot.is_open

        variables = {
            "company_name": client.name,
            "agent_name": client.agent_name or DEFAULT_AGENT_NAME,
            "caller_context": format_caller_context(caller, caller_phone),
            "business_hours_context": format_business_hours_context(snapshot),
            "additional_context": client.additional_context or "",
        }

        caller_name = caller.name if caller else None
        logger.info(
            f"Built call context for client {client.id}",
            extra={
                "client_id": client.id,
                "known_caller": caller is not None,
                "is_after_hours": is_after_hours,
            },
        )
        return CallContext(
            variables=variables,
            is_after_hours=is_after_hours,
            business_hours=snapshot,
            caller=caller,
            first_message=build_first_message(client, caller_name, is_after_hours),
        )
