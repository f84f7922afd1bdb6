"""
API routes for placing and monitoring interview calls.

Each route validates the request, hands it to a provider and maps the
provider's answer to JSON.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from twilio.base.exceptions import TwilioRestException

from app.calling.dialer import CallResult, Dialer, get_dialer
from app.calling.phone import validate_phone_number
from app.calling.script_cache import ScriptCache, get_script_cache
from app.config import get_settings
from app.db.models import CamelModel, CandidateStatus
from app.db.repository import CandidateRepository, get_candidate_repository
from app.telephony import twiml
from app.telephony.service import TwilioConfigError
from app.vapi.service import VapiError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/calls", tags=["calls"])


# ══════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════


class CallRequest(CamelModel):
    """Request to call one candidate."""

    phone_number: str = ""
    candidate_name: Optional[str] = None
    assistant_id: Optional[str] = None
    candidate_id: Optional[int] = None
    prefer_vapi: bool = False


# ══════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════


def _require_phone(request: CallRequest) -> str:
    if not request.phone_number:
        raise HTTPException(status_code=400, detail="Phone number is required")
    return request.phone_number


def _formatted_phone(request: CallRequest) -> str:
    """Required, E.164-normalized phone number."""
    phone = _require_phone(request)
    validation = validate_phone_number(phone, get_settings().default_country_code)
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail={
                "error": f"Invalid phone number: {validation.error}",
                "formatted": validation.formatted,
                "original": phone,
            },
        )
    return validation.formatted


def _provider_error(e: Exception, default_message: str = "Failed to initiate call") -> HTTPException:
    """Map a provider failure onto an HTTP error."""
    if isinstance(e, VapiError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    if isinstance(e, TwilioConfigError):
        return HTTPException(status_code=500, detail=str(e))
    return HTTPException(status_code=500, detail=default_message)


def _mark_calling(repo: CandidateRepository, candidate_id: int | None, result: CallResult) -> None:
    if candidate_id is None:
        return
    repo.update_status(
        candidate_id,
        CandidateStatus.CALLING,
        call_notes=f"{result.provider} call {result.call_id}",
    )


# ══════════════════════════════════════════════════════════
# Endpoints
# ══════════════════════════════════════════════════════════


@router.post("/initiate")
async def initiate_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    """Call a candidate using the configured call method."""
    phone = _formatted_phone(request)

    try:
        result = await dialer.dial(
            phone,
            candidate_name=request.candidate_name,
            assistant_id=request.assistant_id,
            candidate_id=request.candidate_id,
        )
    except Exception as e:
        logger.error("Failed to initiate call", phone=phone, error=str(e))
        raise _provider_error(e)

    _mark_calling(repo, request.candidate_id, result)
    return result.to_dict()


@router.post("/smart")
async def smart_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    """Try Twilio, fall back to Vapi."""
    phone = _formatted_phone(request)

    try:
        result = await dialer.smart_call(
            phone,
            candidate_name=request.candidate_name,
            assistant_id=request.assistant_id,
            prefer_vapi=request.prefer_vapi,
            candidate_id=request.candidate_id,
        )
    except Exception as e:
        logger.error("Error in smart call", phone=phone, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to initiate call with both Twilio and Vapi")

    return result.to_dict()


@router.post("/vapi")
async def vapi_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    phone = _require_phone(request)

    try:
        result = await dialer.vapi_call(
            phone,
            candidate_name=request.candidate_name,
            assistant_id=request.assistant_id,
            candidate_id=request.candidate_id,
        )
    except VapiError as e:
        logger.error("Vapi call failed", phone=phone, error=e.message)
        raise _provider_error(e)

    return result.to_dict()


@router.get("/vapi/{call_id}")
async def vapi_call_status(call_id: str, dialer: Dialer = Depends(get_dialer)) -> dict[str, Any]:
    try:
        call = await dialer.vapi.get_call(call_id)
    except VapiError as e:
        logger.error("Failed to get call status", call_id=call_id, error=e.message)
        raise _provider_error(e)
    return {"success": True, "call": call}


@router.post("/twilio")
async def twilio_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    """Twilio call that greets the candidate and asks them to hold."""
    phone = _require_phone(request)

    try:
        result = dialer.twilio_connect_call(phone, request.candidate_name)
    except (TwilioConfigError, TwilioRestException) as e:
        logger.error("Error initiating Twilio call", phone=phone, error=str(e))
        raise _provider_error(e)

    return result.to_dict()


@router.get("/twilio/{call_sid}")
async def twilio_call_status(call_sid: str, dialer: Dialer = Depends(get_dialer)) -> dict[str, Any]:
    try:
        call = dialer.twilio.fetch_call(call_sid)
    except (TwilioConfigError, TwilioRestException) as e:
        logger.error("Error getting call status", call_sid=call_sid, error=str(e))
        raise _provider_error(e, "Failed to get call status")
    return {"success": True, "call": call}


@router.post("/twilio-interview")
async def twilio_interview_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    """Twilio-only call running the keypad interview."""
    phone = _formatted_phone(request)

    try:
        result = dialer.twilio_interview_call(phone, request.candidate_name, request.candidate_id)
    except (TwilioConfigError, TwilioRestException) as e:
        logger.error("Error initiating Twilio call", phone=phone, error=str(e))
        raise _provider_error(e)

    return result.to_dict()


@router.post("/hybrid")
async def hybrid_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    """Vapi assistant carried over a Twilio call."""
    phone = _require_phone(request)

    try:
        result = await dialer.hybrid_call(
            phone,
            request.candidate_name,
            request.assistant_id,
            request.candidate_id,
        )
    except (VapiError, TwilioConfigError, TwilioRestException) as e:
        logger.error("Error initiating hybrid call", phone=phone, error=str(e))
        raise _provider_error(e)

    return result.to_dict()


@router.post("/hybrid/transfer")
async def hybrid_transfer_call(
    request: CallRequest,
    dialer: Dialer = Depends(get_dialer),
) -> dict[str, Any]:
    """Twilio call with the keypad interview, for accounts without a Vapi phone number."""
    phone = _require_phone(request)

    try:
        result = dialer.twilio_interview_call(phone, request.candidate_name, call_type="twilio-only")
    except (TwilioConfigError, TwilioRestException) as e:
        logger.error("Error initiating Twilio call", phone=phone, error=str(e))
        raise _provider_error(e)

    return {**result.to_dict(), "message": "Twilio call initiated with basic interview flow"}


@router.post("/response")
async def call_response(
    request: Request,
    cache: ScriptCache = Depends(get_script_cache),
) -> Response:
    """Twilio Gather callback. Always answers with TwiML."""
    try:
        form = await request.form()
        digits = form.get("Digits")
        logger.info("Call responded", call_sid=form.get("CallSid"), digits=digits)
        document = twiml.digit_response(digits, cache.get_script())
    except Exception as e:
        logger.error("Error handling call response", error=str(e))
        document = twiml.technical_error()

    return Response(content=document, media_type="text/xml")
