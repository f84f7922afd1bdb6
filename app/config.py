import logging
import sys
from functools import lru_cache

import structlog
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    port: int = 3000
    debug: bool = False
    log_level: str = "info"

    # Supabase (optional - falls back to in-process storage)
    supabase_url: str = ""
    supabase_key: str = ""

    # Vapi and Twilio credentials live in app.vapi.config / app.telephony.config

    # Webhooks
    webhook_secret: str = ""

    # Phone numbers without a country code get this prefix
    default_country_code: str = "+91"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "info", debug: bool = False) -> None:
    """Configure structlog once at startup."""
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
