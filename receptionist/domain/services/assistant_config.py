"""Permanent assistant configuration pushed to Vapi out of band.

The configuration built here is provisioned once per client by
scripts/sync_assistant.py. Per-call personalization happens later through
the assistant-request override, never by re-provisioning.
"""

import logging
from typing import Any

from receptionist.domain.prompts.system_prompt import build_system_prompt
from receptionist.persistence.models.client import DEPARTMENT_PHONE_COLUMNS, Client
from receptionist.settings import settings

logger = logging.getLogger(__name__)

ASSISTANT_CONFIG_VERSION = "2026-10-01"

SUMMARY_PROMPT = (
    "Summarize this call in 2-3 sentences. Include: equipment discussed, customer intent "
    "(inquiry/rental/service), and outcome (answered/transferred/pending)."
)

SUCCESS_RUBRIC_PROMPT = (
    "Rate this call's success from 1-10. Output ONLY a number (e.g., 8). Consider: Did we "
    "answer the customer's question? Did we route them correctly?"
)

SERVER_MESSAGES = [
    "conversation-update",
    "end-of-call-report",
    "status-update",
    "tool-calls",
    "speech-update",
]

CALLBACK_DEPARTMENTS = list(DEPARTMENT_PHONE_COLUMNS) + ["general"]

STRUCTURED_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "caller": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Caller's full name if mentioned"},
                "company": {"type": "string", "description": "Company name if mentioned"},
                "phone": {"type": "string", "description": "Phone number (from call metadata or if mentioned)"},
                "email": {"type": "string", "description": "Email address if provided"},
            },
        },
        "intent": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": ["sales", "rental", "parts", "service", "billing", "general", "other"],
                },
                "subcategory": {"type": "string"},
            },
            "required": ["category"],
        },
        "machine": {
            "type": "object",
            "properties": {
                "make": {"type": "string"},
                "model": {"type": "string"},
                "year": {"type": "number"},
                "serial": {"type": "string"},
                "category": {"type": "string"},
            },
        },
        "details": {
            "type": "object",
            "properties": {
                "location": {"type": "string"},
                "timing": {"type": "string"},
                "urgency": {"type": "string", "enum": ["low", "medium", "high", "critical"]},
            },
        },
        "outcome": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": [
                        "transferred",
                        "callback_scheduled",
                        "voicemail",
                        "wrong_number",
                        "not_interested",
                        "information_provided",
                        "other",
                    ],
                },
                "transferred_to": {"type": "string"},
                "next_step": {"type": "string"},
                "scheduled_callback_time": {"type": "string"},
            },
            "required": ["type"],
        },
        "notes": {"type": "string"},
    },
    "required": ["intent", "outcome"],
}


def tools_url() -> str:
    """Public URL of the tool-execution endpoint."""
    return f"{settings.server_url.rstrip('/')}{settings.api_v1_prefix}/vapi/tools"


def _function_tool(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "async": False,
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
        "server": {"url": tools_url()},
    }


def build_check_inventory_tool() -> dict:
    return _function_tool(
        "check_inventory",
        "Check equipment inventory. Returns availability and daily pricing. Use this for ANY "
        "question about equipment availability or price.",
        {
            "query": {
                "type": "string",
                "description": "Type of equipment (e.g., excavator, dozer, skid steer) or a model (e.g., Cat 336)",
            }
        },
        ["query"],
    )


def build_transfer_call_tool() -> dict:
    return _function_tool(
        "transfer_call",
        "Transfer the call to a department. Only use when the office is OPEN.",
        {
            "department": {
                "type": "string",
                "enum": list(DEPARTMENT_PHONE_COLUMNS),
                "description": "Which department to transfer to",
            },
            "reason": {
                "type": "string",
                "description": 'Brief reason for transfer (e.g., "wants to rent Cat D8")',
            },
            "urgency": {
                "type": "string",
                "enum": ["low", "medium", "high", "critical"],
                "description": "How urgent the caller's need is",
            },
        },
        ["department", "reason"],
    )


def build_schedule_callback_tool() -> dict:
    return _function_tool(
        "schedule_callback",
        "Schedule a callback. Use when the office is CLOSED, a transfer failed, or the caller asks "
        "to be called back. The preferred time must be a concrete day and time confirmed by the caller.",
        {
            "customer_name": {"type": "string", "description": "Customer's name"},
            "customer_phone": {"type": "string", "description": "Customer's phone number for the callback"},
            "preferred_time": {
                "type": "string",
                "description": 'Confirmed callback time using a pre-computed date (e.g., "Tuesday, October 20 at 9am")',
            },
            "reason": {"type": "string", "description": "Brief reason for the callback"},
            "department": {
                "type": "string",
                "enum": CALLBACK_DEPARTMENTS,
                "description": "Which department should call back",
            },
        },
        ["customer_name", "customer_phone", "preferred_time", "reason", "department"],
    )


def build_tools_for_client(client: Client) -> list[dict]:
    """Tool definitions enabled for a client. Callbacks are always available."""
    tools = []
    if client.enable_inventory:
        tools.append(build_check_inventory_tool())
    if client.enable_transfers:
        tools.append(build_transfer_call_tool())
    tools.append(build_schedule_callback_tool())

    logger.info(
        f"Tools for client {client.id}: {[tool['function']['name'] for tool in tools]}",
        extra={"client_id": client.id},
    )
    return tools


def build_base_assistant_config() -> dict:
    """Model, voice, transcriber and analysis settings shared by every client."""
    return {
        "model": {
            "provider": "anthropic",
            "model": "claude-sonnet-4-5-20250929",
            "temperature": 0,
        },
        "voice": {
            "provider": "11labs",
            "voiceId": "cgSgspJ2msm6clMCkdW9",
            "model": "eleven_turbo_v2_5",
            "stability": 0.5,
            "similarityBoost": 0.75,
        },
        "transcriber": {
            "provider": "deepgram",
            "model": "nova-3",
            "language": "en",
            "endpointing": 150,
        },
        "analysisPlan": {
            "summaryPlan": {
                "enabled": True,
                "messages": [{"role": "system", "content": SUMMARY_PROMPT}],
            },
            "successEvaluationPlan": {
                "enabled": True,
                "rubric": "NumericScale",
                "messages": [{"role": "system", "content": SUCCESS_RUBRIC_PROMPT}],
            },
            "structuredDataPlan": {
                "enabled": True,
                "schema": STRUCTURED_OUTPUT_SCHEMA,
            },
        },
        "artifactPlan": {
            "recordingEnabled": True,
            "videoRecordingEnabled": False,
        },
        "startSpeakingPlan": {
            "waitSeconds": 0.4,
            "smartEndpointingEnabled": True,
        },
        "backgroundDenoisingEnabled": False,
        "serverMessages": SERVER_MESSAGES,
        "metadata": {"configVersion": ASSISTANT_CONFIG_VERSION},
    }


def build_assistant_config(client: Client) -> dict:
    """Complete permanent assistant configuration for a client.

    Args:
        client: Client to provision

    Returns:
        Payload for Vapi's create/update assistant endpoints
    """
    config = build_base_assistant_config()
    config["name"] = f"{client.name} - Receptionist"[:40]
    config["model"] = {
        **config["model"],
        "messages": [{"role": "system", "content": build_system_prompt(client.custom_prompt)}],
        "tools": build_tools_for_client(client),
    }
    config["server"] = {"url": f"{settings.server_url.rstrip('/')}{settings.api_v1_prefix}/vapi/inbound"}
    if settings.vapi_webhook_secret:
        config["server"]["secret"] = settings.vapi_webhook_secret
    # Generic fallback, replaced by the per-call override
    config["firstMessage"] = f"Thanks for calling {client.name}. This is {client.agent_name or 'Tex'}, how can I help?"
    config["metadata"]["clientId"] = client.id
    return config
