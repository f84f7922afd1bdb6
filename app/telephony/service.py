"""
Twilio service for outbound calls.

Wraps the Twilio REST client: placing calls with inline TwiML, polling
call status and listing verified caller IDs.
"""

from typing import Any
from urllib.parse import urlencode

import structlog
from twilio.rest import Client

from app.telephony.config import TwilioConfig, get_twilio_config, validate_twilio_config

logger = structlog.get_logger()

STATUS_CALLBACK_EVENTS = ["initiated", "ringing", "answered", "completed"]

# Trial accounts can only dial verified numbers
TRIAL_ACCOUNT_ERROR_CODES = (21219, 21211)


class TwilioConfigError(Exception):
    """Twilio credentials are missing."""


class TwilioService:
    """Service for placing and inspecting Twilio calls."""

    def __init__(self, config: TwilioConfig | None = None, client: Client | None = None):
        self.config = config or get_twilio_config()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return validate_twilio_config(self.config)

    @property
    def client(self) -> Client:
        if self._client is None:
            if not validate_twilio_config(self.config, phone_number=False):
                raise TwilioConfigError("Twilio credentials not configured")
            self._client = Client(self.config.twilio_account_sid, self.config.twilio_auth_token)
        return self._client

    def url_for(self, path: str, **params) -> str:
        """Absolute URL on this service, for Twilio callbacks."""
        url = f"{self.config.public_base_url.rstrip('/')}{path}"
        query = {k: v for k, v in params.items() if v is not None}
        return f"{url}?{urlencode(query)}" if query else url

    def create_call(self, to: str, twiml: str, call_type: str, **callback_params) -> dict[str, Any]:
        """
        Place an outbound call that plays the given TwiML.

        Args:
            to: E.164 number to dial
            twiml: TwiML document for the call
            call_type: Tag echoed back on the status callback
            callback_params: Extra query parameters for the status callback

        Returns:
            {"sid": ..., "status": ...}

        Raises:
            TwilioConfigError: If credentials or the caller ID are missing
            TwilioRestException: If Twilio rejects the call
        """
        if not self.config.twilio_phone_number:
            raise TwilioConfigError("Twilio credentials not configured")

        status_callback = self.url_for("/api/webhooks/twilio", callType=call_type, **callback_params)

        logger.info("Triggering Twilio call", to=to, call_type=call_type)

        call = self.client.calls.create(
            to=to,
            from_=self.config.twilio_phone_number,
            twiml=twiml,
            status_callback=status_callback,
            status_callback_event=STATUS_CALLBACK_EVENTS,
            status_callback_method="POST",
        )

        logger.info("Twilio call initiated", call_sid=call.sid, status=call.status)
        return {"sid": call.sid, "status": call.status}

    def fetch_call(self, call_sid: str) -> dict[str, Any]:
        """Get the current state of a call."""
        call = self.client.calls(call_sid).fetch()
        return {
            "sid": call.sid,
            "status": call.status,
            "direction": call.direction,
            "from": call.from_formatted,
            "to": call.to,
            "startTime": call.start_time.isoformat() if call.start_time else None,
            "endTime": call.end_time.isoformat() if call.end_time else None,
            "duration": call.duration,
        }

    def list_verified_numbers(self) -> list[dict[str, Any]]:
        """Caller IDs verified on the account (the only numbers a trial account can dial)."""
        numbers = self.client.outgoing_caller_ids.list()
        return [
            {
                "phoneNumber": number.phone_number,
                "friendlyName": number.friendly_name,
                "dateCreated": number.date_created.isoformat() if number.date_created else None,
                "dateUpdated": number.date_updated.isoformat() if number.date_updated else None,
            }
            for number in numbers
        ]

    def is_verified(self, phone_number: str) -> bool:
        return any(n["phoneNumber"] == phone_number for n in self.list_verified_numbers())


# Singleton instance
_twilio_service: TwilioService | None = None


def get_twilio_service() -> TwilioService:
    """Get or create the TwilioService singleton."""
    global _twilio_service
    if _twilio_service is None:
        _twilio_service = TwilioService()
    return _twilio_service
