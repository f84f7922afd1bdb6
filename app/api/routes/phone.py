"""
API routes for phone number checks.

Twilio trial accounts can only call verified caller IDs, so the dashboard
checks a number before queueing it.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from twilio.base.exceptions import TwilioRestException

from app.calling.phone import format_phone_for_display, validate_phone_number
from app.config import get_settings
from app.db.models import CamelModel
from app.telephony.service import TwilioService, get_twilio_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/phone", tags=["phone"])

VERIFICATION_URL = "https://console.twilio.com/us1/develop/phone-numbers/manage/verified"


class VerifyRequest(CamelModel):
    phone_number: str = ""


def _require_twilio(twilio: TwilioService) -> None:
    if not (twilio.config.twilio_account_sid and twilio.config.twilio_auth_token):
        raise HTTPException(status_code=500, detail="Twilio credentials not configured")


@router.post("/verify")
async def verify_phone(
    request: VerifyRequest,
    twilio: TwilioService = Depends(get_twilio_service),
) -> dict[str, Any]:
    _require_twilio(twilio)

    if not request.phone_number:
        raise HTTPException(status_code=400, detail="Phone number is required")

    validation = validate_phone_number(request.phone_number, get_settings().default_country_code)
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail={
                "error": f"Invalid phone number: {validation.error}",
                "formatted": validation.formatted,
                "original": request.phone_number,
            },
        )

    phone = validation.formatted

    try:
        is_verified = twilio.is_verified(phone)
    except TwilioRestException as e:
        logger.error("Error checking phone verification", phone=phone, error=str(e))
        return {
            "success": False,
            "phoneNumber": phone,
            "isVerified": False,
            "message": "Could not verify phone number status",
            "error": e.msg,
            "suggestion": "Please verify the phone number manually in your Twilio console",
        }

    return {
        "success": True,
        "phoneNumber": phone,
        "displayNumber": format_phone_for_display(phone),
        "isVerified": is_verified,
        "message": (
            "Phone number is verified and can receive calls"
            if is_verified
            else "Phone number is not verified. Please verify it in your Twilio console."
        ),
        "verificationUrl": VERIFICATION_URL,
    }


@router.get("/verified")
async def list_verified_numbers(twilio: TwilioService = Depends(get_twilio_service)) -> dict[str, Any]:
    _require_twilio(twilio)

    try:
        numbers = twilio.list_verified_numbers()
    except TwilioRestException as e:
        logger.error("Error getting verified numbers", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get verified numbers")

    return {"success": True, "verifiedNumbers": numbers, "count": len(numbers)}
