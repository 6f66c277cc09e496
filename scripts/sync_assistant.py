"""Create or update a client's permanent Vapi assistant.

Usage:
    python scripts/sync_assistant.py <client_id>

Pushes the configuration from assistant_config.build_assistant_config and
stores the returned assistant id on the client. Run again after changing
the prompt, tools or client settings; per-call details never require it.
"""

import argparse
import asyncio
import logging
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from receptionist.core.errors import CollaboratorError
from receptionist.domain.services.assistant_config import ASSISTANT_CONFIG_VERSION, build_assistant_config
from receptionist.infrastructure.vapi_client import VapiClient
from receptionist.logging_config import setup_logging
from receptionist.persistence.database import AsyncSessionLocal
from receptionist.persistence.repositories.client_repository import ClientRepository

logger = logging.getLogger(__name__)


async def provision_assistant(session: AsyncSession, client_id: str, vapi: VapiClient | None = None) -> str | None:
    """Provision the client's assistant and return its id (None on failure)."""
    vapi = vapi or VapiClient()
    repo = ClientRepository(session)
    client = await repo.get_by_id(client_id)
    if client is None:
        print(f"❌ Client not found: {client_id}")
        return None

    config = build_assistant_config(client)
    print(f"Syncing assistant for {client.name} (config {ASSISTANT_CONFIG_VERSION})")

    try:
        existing = None
        if client.vapi_assistant_id:
            existing = await vapi.get_assistant(client.vapi_assistant_id)

        if existing:
            assistant = await vapi.update_assistant(client.vapi_assistant_id, config)
            print(f"   ↻ Updated assistant {assistant['id']}")
        else:
            if client.vapi_assistant_id:
                print(f"   Stored assistant {client.vapi_assistant_id} no longer exists, creating a new one")
            assistant = await vapi.create_assistant(config)
            print(f"   + Created assistant {assistant['id']}")
    except CollaboratorError as e:
        logger.error(f"Assistant sync failed for {client_id}: {e}")
        print(f"❌ Sync failed: {e}")
        return None

    await repo.set_assistant_id(client.id, assistant["id"])
    print(f"✅ {client.id} now uses assistant {assistant['id']}")
    return assistant["id"]


async def sync_assistant(client_id: str, vapi: VapiClient | None = None) -> str | None:
    async with AsyncSessionLocal() as session:
        return await provision_assistant(session, client_id, vapi)


def main():
    parser = argparse.ArgumentParser(description="Create or update a client's permanent Vapi assistant")
    parser.add_argument("client_id", help="Client id (e.g. tex-intel-primary)")
    args = parser.parse_args()

    setup_logging()
    assistant_id = asyncio.run(sync_assistant(args.client_id))
    sys.exit(0 if assistant_id else 1)


if __name__ == "__main__":
    main()
