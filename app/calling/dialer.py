"""
Provider selection for outbound interview calls.

The only fallback policy is "Twilio, else Vapi": a smart call tries
Twilio first and, if Twilio rejects the call, places it through Vapi
instead. There is no retry beyond that single fallback.
"""

from dataclasses import asdict, dataclass
from typing import Any

import structlog
from pydantic.alias_generators import to_camel

from app.calling.script_cache import ScriptCache, get_script_cache
from app.db.models import CallMethod
from app.telephony import twiml
from app.telephony.service import (
    TRIAL_ACCOUNT_ERROR_CODES,
    TwilioConfigError,
    TwilioService,
    get_twilio_service,
)
from app.vapi.call_context import CallContext
from app.vapi.service import VapiService, get_vapi_service

logger = structlog.get_logger()


@dataclass
class CallResult:
    """Outcome of placing a call."""

    provider: str
    call_id: str | None
    status: str | None
    message: str
    vapi_call_id: str | None = None
    fallback_reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, **{to_camel(k): v for k, v in asdict(self).items() if v is not None}}


def fallback_reason_for(error: Exception) -> str:
    """Human readable reason a Twilio call fell back to Vapi."""
    if getattr(error, "code", None) in TRIAL_ACCOUNT_ERROR_CODES:
        return "Twilio trial account limitation"
    return str(getattr(error, "msg", None) or error)


class Dialer:
    """Places interview calls through Vapi, Twilio, or both."""

    def __init__(
        self,
        vapi: VapiService | None = None,
        twilio: TwilioService | None = None,
        script_cache: ScriptCache | None = None,
    ):
        self.vapi = vapi or get_vapi_service()
        self.twilio = twilio or get_twilio_service()
        self.script_cache = script_cache or get_script_cache()

    async def vapi_call(
        self,
        phone_number: str,
        candidate_name: str | None = None,
        assistant_id: str | None = None,
        candidate_id: int | None = None,
        fallback_reason: str | None = None,
    ) -> CallResult:
        context = CallContext(
            phone_number=phone_number,
            candidate_name=candidate_name,
            candidate_id=candidate_id,
            assistant_id=assistant_id,
            script=self.script_cache.get_script(),
            fallback_reason=fallback_reason,
        )
        call = await self.vapi.create_call(context)

        if fallback_reason:
            message = f"Call initiated with Vapi (fallback from Twilio: {fallback_reason})"
        else:
            message = "Call initiated successfully with Vapi"

        return CallResult(
            provider="vapi",
            call_id=call.get("id"),
            status=call.get("status"),
            message=message,
            fallback_reason=fallback_reason,
        )

    def twilio_connect_call(self, phone_number: str, candidate_name: str | None = None) -> CallResult:
        """Twilio call that greets the candidate and asks them to hold."""
        document = twiml.hold_message(candidate_name)
        call = self.twilio.create_call(
            phone_number,
            document,
            call_type="twilio",
            candidateName=candidate_name or "",
        )
        return CallResult(
            provider="twilio",
            call_id=call["sid"],
            status=call["status"],
            message="Twilio call initiated successfully",
        )

    def twilio_interview_call(
        self,
        phone_number: str,
        candidate_name: str | None = None,
        candidate_id: int | None = None,
        call_type: str = "twilio-only",
    ) -> CallResult:
        """Twilio call running the keypad interview flow."""
        document = twiml.interview_greeting(
            candidate_name,
            action=self.twilio.url_for(twiml.RESPONSE_ACTION),
            voice=self.twilio.config.twiml_voice,
        )
        call = self.twilio.create_call(
            phone_number,
            document,
            call_type=call_type,
            candidateId=candidate_id,
        )
        return CallResult(
            provider="twilio",
            call_id=call["sid"],
            status=call["status"],
            message="Twilio call initiated successfully with interview flow",
        )

    async def hybrid_call(
        self,
        phone_number: str,
        candidate_name: str | None = None,
        assistant_id: str | None = None,
        candidate_id: int | None = None,
    ) -> CallResult:
        """Create the Vapi call first, then a Twilio call that redirects into it."""
        if not self.twilio.is_configured:
            raise TwilioConfigError("Twilio credentials not configured")

        context = CallContext(
            phone_number=phone_number,
            candidate_name=candidate_name,
            candidate_id=candidate_id,
            assistant_id=assistant_id,
            script=self.script_cache.get_script(),
        )
        vapi_call = await self.vapi.create_call(context, use_phone_number=False)
        vapi_call_id = vapi_call.get("id")

        document = twiml.hold_message(
            candidate_name,
            voice=self.twilio.config.twiml_voice,
            redirect_url=f"{self.vapi.base_url}/call/{vapi_call_id}/connect",
        )
        call = self.twilio.create_call(
            phone_number,
            document,
            call_type="hybrid",
            vapiCallId=vapi_call_id,
            candidateId=candidate_id,
        )

        return CallResult(
            provider="hybrid",
            call_id=call["sid"],
            status=call["status"],
            message="Hybrid call initiated successfully (Twilio + Vapi)",
            vapi_call_id=vapi_call_id,
        )

    async def smart_call(
        self,
        phone_number: str,
        candidate_name: str | None = None,
        assistant_id: str | None = None,
        prefer_vapi: bool = False,
        candidate_id: int | None = None,
    ) -> CallResult:
        """Twilio first, Vapi if Twilio is unavailable or rejects the call."""
        if prefer_vapi or not self.twilio.is_configured:
            return await self.vapi_call(phone_number, candidate_name, assistant_id, candidate_id)

        try:
            return self.twilio_interview_call(phone_number, candidate_name, candidate_id, call_type="twilio")
        except Exception as e:
            reason = fallback_reason_for(e)
            logger.warning("Twilio call failed, trying Vapi fallback", error=str(e), reason=reason)
            return await self.vapi_call(
                phone_number,
                candidate_name,
                assistant_id,
                candidate_id,
                fallback_reason=reason,
            )

    async def dial(
        self,
        phone_number: str,
        candidate_name: str | None = None,
        assistant_id: str | None = None,
        candidate_id: int | None = None,
        method: CallMethod | None = None,
    ) -> CallResult:
        """Place a call with the configured method (read from the script cache)."""
        method = method or self.script_cache.get_call_method()
        logger.info("Dialing candidate", method=method.value, candidate_id=candidate_id)

        if method == CallMethod.VAPI:
            return await self.vapi_call(phone_number, candidate_name, assistant_id, candidate_id)
        if method == CallMethod.TWILIO:
            return self.twilio_interview_call(phone_number, candidate_name, candidate_id)
        return await self.hybrid_call(phone_number, candidate_name, assistant_id, candidate_id)


def get_dialer() -> Dialer:
    return Dialer()
