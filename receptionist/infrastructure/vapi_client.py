"""Vapi live call control and REST API clients."""

import logging
from typing import Any

import httpx

from receptionist.core.errors import CollaboratorError
from receptionist.settings import settings

logger = logging.getLogger(__name__)


class VapiCallControl:
    """Sends mid-call commands to a live call's control URL."""

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize call control.

        Args:
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.timeout = timeout or settings.control_request_timeout_seconds

    def _get_client(self) -> httpx.AsyncClient:
        """Create HTTP client for control requests."""
        return httpx.AsyncClient(
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    async def transfer(
        self,
        control_url: str,
        destination_number: str,
        handoff_brief: str,
        caller_message: str,
    ) -> None:
        """Transfer a live call to a phone number.

        Args:
            control_url: monitor.controlUrl of the live call
            destination_number: E.164 number to transfer to
            handoff_brief: Message the receiving human hears before the caller joins
            caller_message: What the caller hears while being transferred

        Raises:
            CollaboratorError: If the control request fails
        """
        payload = {
            "type": "transfer",
            "destination": {
                "type": "number",
                "number": destination_number,
                "message": handoff_brief,
            },
            "content": caller_message,
        }
        url = f"{control_url.rstrip('/')}/control"

        try:
            async with self._get_client() as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Transfer rejected by call control: {e.response.status_code}",
                extra={"destination": destination_number, "response_body": e.response.text[:500]},
            )
            raise CollaboratorError("call_control", f"transfer failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Transfer request failed: {e}", extra={"destination": destination_number})
            raise CollaboratorError("call_control", f"transfer request failed: {e}") from e

        logger.info(f"Transfer issued to {destination_number}", extra={"destination": destination_number})


class VapiClient:
    """Vapi REST API client used to provision permanent assistants."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        """Initialize Vapi client.

        Args:
            api_key: Vapi private API key (defaults to settings)
            base_url: API base URL (defaults to settings)
        """
        self.api_key = api_key or settings.vapi_api_key
        self.base_url = base_url or settings.vapi_api_base_url

    def _get_client(self) -> httpx.AsyncClient:
        """Create HTTP client with auth headers."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
        )

    async def _request(self, method: str, path: str, payload: dict | None = None) -> dict[str, Any] | None:
        try:
            async with self._get_client() as client:
                response = await client.request(method, path, json=payload)
                if method == "GET" and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Vapi API {method} {path} failed: {e.response.status_code}",
                extra={"response_body": e.response.text[:1000]},
            )
            raise CollaboratorError("vapi_api", f"{method} {path} failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CollaboratorError("vapi_api", f"{method} {path} failed: {e}") from e

    async def get_assistant(self, assistant_id: str) -> dict[str, Any] | None:
        """Fetch an assistant, or None if it does not exist."""
        return await self._request("GET", f"/assistant/{assistant_id}")

    async def create_assistant(self, config: dict) -> dict[str, Any]:
        """Create an assistant and return it (including its id)."""
        return await self._request("POST", "/assistant", config)

    async def update_assistant(self, assistant_id: str, config: dict) -> dict[str, Any]:
        """Replace an assistant's configuration."""
        return await self._request("PATCH", f"/assistant/{assistant_id}", config)
