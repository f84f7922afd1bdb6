"""
Supabase client configuration.

Supabase is optional: when SUPABASE_URL / SUPABASE_KEY are not set the
repositories fall back to process-local storage.
"""

import os
from functools import lru_cache

import structlog
from supabase import Client, create_client

from app.config import get_settings

logger = structlog.get_logger()


def _get_url_and_key() -> tuple[str, str]:
    """Get Supabase URL and key from settings, then legacy env names."""
    settings = get_settings()
    url = (
        settings.supabase_url
        or os.environ.get("NEXT_PUBLIC_SUPABASE_URL", "")
    )
    key = (
        settings.supabase_key
        or os.environ.get("SUPABASE_ANON_KEY", "")
        or os.environ.get("NEXT_PUBLIC_SUPABASE_ANON_KEY", "")
    )
    return url, key


def is_supabase_configured() -> bool:
    url, key = _get_url_and_key()
    return bool(url and key)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get a cached Supabase client instance.

    Accepts environment variables (in order of preference):
    - SUPABASE_URL or NEXT_PUBLIC_SUPABASE_URL
    - SUPABASE_KEY or SUPABASE_ANON_KEY or NEXT_PUBLIC_SUPABASE_ANON_KEY

    Raises:
        ValueError: If Supabase is not configured
    """
    url, key = _get_url_and_key()

    if not url or not key:
        raise ValueError(
            "Supabase URL and key must be set. "
            "Set SUPABASE_URL and SUPABASE_KEY (or SUPABASE_ANON_KEY)"
        )

    logger.info("Supabase client initialized", url=url)
    return create_client(url, key)


def get_optional_client() -> Client | None:
    """Return the shared client, or None when Supabase is not configured."""
    if not is_supabase_configured():
        return None
    return get_supabase_client()
