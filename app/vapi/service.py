"""
Vapi service for outbound interview calls.

Handles all interactions with the Vapi REST API: calls and assistants.
"""

from typing import Any

import httpx
import structlog

from app.vapi.call_context import CallContext
from app.vapi.config import VapiConfig, get_vapi_config, validate_vapi_config

logger = structlog.get_logger()


class VapiError(Exception):
    """A Vapi request failed, or Vapi is not configured."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class VapiService:
    """Service for managing Vapi voice calls."""

    def __init__(
        self,
        config: VapiConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or get_vapi_config()
        self.base_url = self.config.vapi_base_url
        self.headers = {
            "Authorization": f"Bearer {self.config.vapi_private_key}",
            "Content-Type": "application/json",
        }
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return validate_vapi_config(self.config)

    def require_configured(self, phone_number: bool = True) -> None:
        """Raise VapiError(500) when credentials needed for the operation are missing."""
        if not self.config.vapi_private_key:
            raise VapiError("VAPI_PRIVATE_KEY not configured")
        if phone_number and not (self.config.vapi_phone_number_id and self.config.vapi_assistant_id):
            raise VapiError(
                "Vapi credentials not configured. "
                "Missing VAPI_PRIVATE_KEY, VAPI_ASSISTANT_ID, or VAPI_PHONE_NUMBER_ID"
            )

    async def _request(self, method: str, path: str, json: dict | None = None) -> Any:
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                headers=self.headers,
                json=json,
                timeout=self.config.request_timeout_seconds,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            logger.error(
                "Vapi API error",
                method=method,
                path=path,
                status_code=response.status_code,
                response=data,
            )
            raise VapiError(message or f"Vapi request failed ({response.status_code})", response.status_code)

        return data

    async def create_call(self, context: CallContext, use_phone_number: bool = True) -> dict[str, Any]:
        """
        Create an outbound call via Vapi.

        Args:
            context: Who to call and with which script
            use_phone_number: Dial out from the Vapi phone number. False when
                Twilio carries the call and Vapi only runs the assistant.

        Returns:
            The created call object (id, status, ...)

        Raises:
            VapiError: If Vapi is not configured or the API call fails
        """
        self.require_configured(phone_number=use_phone_number)

        payload = context.to_vapi_call_payload(
            phone_number_id=self.config.vapi_phone_number_id if use_phone_number else None,
            assistant_id=self.config.vapi_assistant_id,
        )

        logger.info(
            "Triggering Vapi call",
            phone=context.phone_number,
            candidate_name=context.candidate_name,
            fallback_reason=context.fallback_reason,
        )

        call = await self._request("POST", "/call", json=payload)

        logger.info("Vapi call initiated", vapi_call_id=call.get("id"), status=call.get("status"))
        return call

    async def get_call(self, call_id: str) -> dict[str, Any]:
        """Get the current state of a call."""
        self.require_configured(phone_number=False)
        return await self._request("GET", f"/call/{call_id}")

    async def create_assistant(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.require_configured(phone_number=False)
        assistant = await self._request("POST", "/assistant", json=payload)
        logger.info("Vapi assistant created", assistant_id=assistant.get("id"), name=payload.get("name"))
        return assistant

    async def list_assistants(self) -> list[dict[str, Any]]:
        self.require_configured(phone_number=False)
        return await self._request("GET", "/assistant")

    async def get_assistant(self, assistant_id: str) -> dict[str, Any]:
        self.require_configured(phone_number=False)
        return await self._request("GET", f"/assistant/{assistant_id}")


# Singleton instance
_vapi_service: VapiService | None = None


def get_vapi_service() -> VapiService:
    """Get or create the VapiService singleton."""
    global _vapi_service
    if _vapi_service is None:
        _vapi_service = VapiService()
    return _vapi_service
