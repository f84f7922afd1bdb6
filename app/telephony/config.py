"""
Twilio configuration for outbound calls.

Reads environment variables:
- TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN: REST credentials
- TWILIO_PHONE_NUMBER: Caller ID for outbound calls
- PUBLIC_BASE_URL: Where Twilio posts status callbacks and Gather digits
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class TwilioConfig(BaseSettings):
    """Configuration for Twilio calling."""

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""

    public_base_url: str = "http://localhost:3000"
    twiml_voice: str = "alice"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_twilio_config() -> TwilioConfig:
    """Get cached Twilio configuration from environment."""
    return TwilioConfig()


def validate_twilio_config(config: TwilioConfig | None = None, phone_number: bool = True) -> bool:
    """Whether credentials (and optionally the caller ID) are present."""
    config = config or get_twilio_config()
    has_credentials = bool(config.twilio_account_sid and config.twilio_auth_token)
    if not phone_number:
        return has_credentials
    return has_credentials and bool(config.twilio_phone_number)
