"""
Vapi.ai configuration for outbound interview calls.

Reads environment variables:
- VAPI_PRIVATE_KEY: API authentication key
- VAPI_PHONE_NUMBER_ID: Outbound phone number ID
- VAPI_ASSISTANT_ID: Pre-configured assistant ID
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class VapiConfig(BaseSettings):
    """Configuration for Vapi voice calling service."""

    # Credentials (empty when not configured)
    vapi_private_key: str = ""
    vapi_public_key: str = ""
    vapi_phone_number_id: str = ""
    vapi_assistant_id: str = ""

    # API settings
    vapi_base_url: str = "https://api.vapi.ai"
    request_timeout_seconds: float = 30.0

    # Used by the assistant builder when the language is Hindi
    hindi_voice_id: str = "hindi-male-1"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_vapi_config() -> VapiConfig:
    """Get cached Vapi configuration from environment."""
    return VapiConfig()


def validate_vapi_config(config: VapiConfig | None = None) -> bool:
    """Whether everything needed to place a call is present."""
    config = config or get_vapi_config()
    return bool(
        config.vapi_private_key
        and config.vapi_phone_number_id
        and config.vapi_assistant_id
    )
