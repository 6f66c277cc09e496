"""Tests for the permanent assistant configuration."""

from unittest.mock import patch

from receptionist.domain.prompts.system_prompt import build_system_prompt
from receptionist.domain.services.assistant_config import (
    SERVER_MESSAGES,
    build_assistant_config,
    build_tools_for_client,
)
from receptionist.persistence.models import Client
from receptionist.settings import settings


def make_client(**overrides) -> Client:
    fields = {
        "id": "tex-intel-primary",
        "name": "Tex Intel",
        "agent_name": "Tex",
        "enable_inventory": True,
        "enable_transfers": True,
    }
    fields.update(overrides)
    return Client(**fields)


def tool_names(tools: list[dict]) -> list[str]:
    return [tool["function"]["name"] for tool in tools]


class TestToolsForClient:
    def test_all_tools_enabled(self):
        tools = build_tools_for_client(make_client())

        assert tool_names(tools) == ["check_inventory", "transfer_call", "schedule_callback"]

    def test_callbacks_always_available(self):
        tools = build_tools_for_client(make_client(enable_inventory=False, enable_transfers=False))

        assert tool_names(tools) == ["schedule_callback"]

    def test_inventory_disabled(self):
        tools = build_tools_for_client(make_client(enable_inventory=False))

        assert "check_inventory" not in tool_names(tools)
        assert "transfer_call" in tool_names(tools)

    def test_tools_point_at_tool_endpoint(self):
        with patch.object(settings, "server_url", "https://receptionist.example.com/"):
            tools = build_tools_for_client(make_client())

        for tool in tools:
            assert tool["server"]["url"] == f"https://receptionist.example.com{settings.api_v1_prefix}/vapi/tools"

    def test_transfer_departments(self):
        transfer = build_tools_for_client(make_client())[1]
        department = transfer["function"]["parameters"]["properties"]["department"]

        assert department["enum"] == ["sales", "rentals", "service", "parts", "billing"]


class TestAssistantConfig:
    def test_system_prompt_keeps_placeholders(self):
        config = build_assistant_config(make_client())
        prompt = config["model"]["messages"][0]["content"]

        for placeholder in (
            "{{caller_context}}",
            "{{business_hours_context}}",
            "{{additional_context}}",
            "{{company_name}}",
        ):
            assert placeholder in prompt

    def test_custom_prompt_appended(self):
        config = build_assistant_config(make_client(custom_prompt="Always mention the spring promo."))
        prompt = config["model"]["messages"][0]["content"]

        assert prompt.endswith("Always mention the spring promo.")
        assert prompt.startswith(build_system_prompt())

    def test_server_and_analysis(self):
        with patch.object(settings, "vapi_webhook_secret", "s3cret"):
            config = build_assistant_config(make_client())

        assert config["server"]["url"].endswith(f"{settings.api_v1_prefix}/vapi/inbound")
        assert config["server"]["secret"] == "s3cret"
        assert config["serverMessages"] == SERVER_MESSAGES
        assert config["analysisPlan"]["successEvaluationPlan"]["rubric"] == "NumericScale"
        assert config["metadata"]["clientId"] == "tex-intel-primary"

    def test_no_secret_configured(self):
        with patch.object(settings, "vapi_webhook_secret", None):
            config = build_assistant_config(make_client())

        assert "secret" not in config["server"]

    def test_name_truncated(self):
        config = build_assistant_config(make_client(name="Very Long Heavy Equipment Rental Company Name"))

        assert len(config["name"]) <= 40
