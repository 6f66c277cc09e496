"""Onboard a new client: department numbers, tool flags, phone line and assistant.

Usage:
    python scripts/onboard_client.py acme-rentals "Acme Rentals" \\
        --phone-number-id pn_acme_main --phone-number "+16025550200" \\
        --rentals-phone "(602) 555-0202" --no-inventory

Creates the client row, maps its Vapi phone number to it and provisions the
permanent assistant with the same code path as scripts/sync_assistant.py.
"""

import argparse
import asyncio
import os
import re
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from receptionist.core.phone import normalize_phone_e164
from receptionist.infrastructure.vapi_client import VapiClient
from receptionist.logging_config import setup_logging
from receptionist.persistence.database import AsyncSessionLocal
from receptionist.persistence.models.client import DEPARTMENT_PHONE_COLUMNS, Client, ClientPhoneLine
from receptionist.persistence.repositories.client_repository import ClientRepository

from scripts.sync_assistant import provision_assistant


def validate_client_id(client_id: str) -> bool:
    """Validate client id format (lowercase slug, used in logs and URLs)."""
    if not client_id:
        return False
    pattern = r'^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$'
    return bool(re.match(pattern, client_id)) and len(client_id) <= 100


async def onboard_client(
    session: AsyncSession,
    client_id: str,
    name: str,
    company: str | None = None,
    department_phones: dict[str, str | None] | None = None,
    enable_inventory: bool = True,
    enable_transfers: bool = True,
    first_message_template: str | None = None,
    agent_name: str = "Tex",
    phone_number_id: str | None = None,
    phone_number: str | None = None,
    provision: bool = True,
    vapi: VapiClient | None = None,
) -> Client | None:
    """Create a client, map its phone line and optionally provision its assistant.

    Args:
        session: Database session
        client_id: New client id
        name: Business name the agent uses in greetings
        company: Legal or display company name
        department_phones: Transfer numbers keyed by department (sales, rentals, ...)
        enable_inventory: Offer the check_inventory tool
        enable_transfers: Offer the transfer_call tool
        first_message_template: Greeting override, may use {company_name} and {agent_name}
        agent_name: Name the agent introduces itself with
        phone_number_id: Vapi phone number id to route to this client
        phone_number: Number behind phone_number_id
        provision: Create the Vapi assistant after saving the client
        vapi: Vapi API client (defaults to one built from settings)

    Returns:
        The created client, or None if validation failed
    """
    repo = ClientRepository(session)

    if not validate_client_id(client_id):
        print(f"❌ Invalid client id '{client_id}'. Use lowercase letters, digits and hyphens only.")
        return None

    existing = await repo.get_by_id(client_id)
    if existing:
        print(f"❌ Client '{client_id}' already exists ({existing.name})")
        return None

    if phone_number_id:
        if not phone_number:
            print("❌ --phone-number is required with --phone-number-id")
            return None
        mapped = await repo.get_by_phone_number_id(phone_number_id)
        if mapped:
            print(f"❌ Phone line {phone_number_id} is already mapped to {mapped.id}")
            return None

    columns = {}
    for department, phone in (department_phones or {}).items():
        column = DEPARTMENT_PHONE_COLUMNS.get(department)
        if column is None:
            print(f"❌ Unknown department '{department}'. Choose from: {', '.join(DEPARTMENT_PHONE_COLUMNS)}")
            return None
        columns[column] = normalize_phone_e164(phone)

    print("=" * 70)
    print(f"CLIENT ONBOARDING - {name}")
    print("=" * 70)

    client = await repo.create(
        id=client_id,
        name=name,
        company=company,
        agent_name=agent_name,
        first_message_template=first_message_template,
        enable_inventory=enable_inventory,
        enable_transfers=enable_transfers,
        **columns,
    )
    print(f"✓ Created client: {client.name} (ID: {client.id})")
    for department, column in DEPARTMENT_PHONE_COLUMNS.items():
        print(f"   {department:<8} {getattr(client, column) or '-'}")
    print(f"   inventory tool: {'on' if client.enable_inventory else 'off'}")
    print(f"   transfer tool:  {'on' if client.enable_transfers else 'off'}")

    if phone_number_id:
        session.add(
            ClientPhoneLine(
                client_id=client.id,
                vapi_phone_number_id=phone_number_id,
                phone_number=normalize_phone_e164(phone_number),
            )
        )
        await session.commit()
        print(f"✓ Mapped phone line {phone_number_id} → {client.id}")
    else:
        print("⚠️  No phone line mapped; calls fall back to the default client")

    if provision:
        assistant_id = await provision_assistant(session, client.id, vapi)
        if assistant_id is None:
            print(f"⚠️  Client saved without an assistant. Retry with: python scripts/sync_assistant.py {client.id}")
    else:
        print(f"Skipped assistant provisioning. Run: python scripts/sync_assistant.py {client.id}")

    lines = await session.execute(select(ClientPhoneLine).where(ClientPhoneLine.client_id == client.id))
    print()
    print(f"✅ Onboarded {client.id} ({len(lines.scalars().all())} phone line(s))")
    return await repo.get_by_id(client.id)


def main():
    parser = argparse.ArgumentParser(description="Onboard a new receptionist client")
    parser.add_argument("client_id", help="New client id (e.g. acme-rentals)")
    parser.add_argument("name", help="Business name used in greetings")
    parser.add_argument("--company", help="Company name")
    for department in DEPARTMENT_PHONE_COLUMNS:
        parser.add_argument(f"--{department}-phone", help=f"Transfer number for {department}")
    parser.add_argument("--no-inventory", action="store_true", help="Disable the inventory tool")
    parser.add_argument("--no-transfers", action="store_true", help="Disable the transfer tool")
    parser.add_argument("--first-message", help="Greeting template, may use {company_name} and {agent_name}")
    parser.add_argument("--agent-name", default="Tex", help="Name the agent introduces itself with")
    parser.add_argument("--phone-number-id", help="Vapi phone number id to route to this client")
    parser.add_argument("--phone-number", help="E.164 number behind --phone-number-id")
    parser.add_argument("--skip-assistant", action="store_true", help="Do not provision the Vapi assistant")
    args = parser.parse_args()

    department_phones = {
        department: getattr(args, f"{department}_phone")
        for department in DEPARTMENT_PHONE_COLUMNS
        if getattr(args, f"{department}_phone")
    }

    async def run() -> Client | None:
        async with AsyncSessionLocal() as session:
            return await onboard_client(
                session,
                client_id=args.client_id,
                name=args.name,
                company=args.company,
                department_phones=department_phones,
                enable_inventory=not args.no_inventory,
                enable_transfers=not args.no_transfers,
                first_message_template=args.first_message,
                agent_name=args.agent_name,
                phone_number_id=args.phone_number_id,
                phone_number=args.phone_number,
                provision=not args.skip_assistant,
            )

    setup_logging()
    client = asyncio.run(run())
    sys.exit(0 if client else 1)


if __name__ == "__main__":
    main()
