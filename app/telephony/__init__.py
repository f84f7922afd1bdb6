"""
Twilio telephony module.

Places plain telephony calls with inline TwiML.
"""

from app.telephony.config import TwilioConfig, get_twilio_config, validate_twilio_config
from app.telephony.service import (
    TRIAL_ACCOUNT_ERROR_CODES,
    TwilioConfigError,
    TwilioService,
    get_twilio_service,
)

__all__ = [
    "TwilioConfig",
    "get_twilio_config",
    "validate_twilio_config",
    "TRIAL_ACCOUNT_ERROR_CODES",
    "TwilioConfigError",
    "TwilioService",
    "get_twilio_service",
]
