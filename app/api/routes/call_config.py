"""
API routes for the call configuration.

Reads go through the script cache; writes save to the store and then
refresh the cache so the next read sees the new value.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.calling.script_cache import ConfigResult, ScriptCache, get_script_cache
from app.db.models import CallConfiguration

logger = structlog.get_logger()

router = APIRouter(prefix="/api/config", tags=["config"])


def _config_response(result: ConfigResult, **extra) -> dict[str, Any]:
    return {
        "success": True,
        "config": result.config,
        "source": result.outcome.value,
        **extra,
    }


@router.get("")
async def get_config(cache: ScriptCache = Depends(get_script_cache)) -> dict[str, Any]:
    """Current call configuration. `source` tells whether it came from the store, the cache or a fallback."""
    return _config_response(cache.fetch())


@router.put("")
async def save_config(
    config: CallConfiguration,
    cache: ScriptCache = Depends(get_script_cache),
) -> dict[str, Any]:
    """
    Replace the call configuration and refresh the cache.

    The response carries the saved value. `source` is the outcome of the
    refresh; when it is a fallback, reads keep serving that fallback until
    the store answers again.
    """
    try:
        saved = cache.store.save(config)
    except Exception as e:
        logger.error("Failed to save call configuration", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to save configuration: {e}")

    result = cache.refresh()
    logger.info("Call configuration saved", method=saved.method.value, source=result.outcome.value)

    if result.is_fallback:
        message = f"Configuration saved, but the cache refresh served the {result.outcome.value} configuration"
    else:
        message = "Configuration saved and cache refreshed"
    return _config_response(ConfigResult(saved, result.outcome), message=message)


@router.post("/refresh")
async def refresh_config(cache: ScriptCache = Depends(get_script_cache)) -> dict[str, Any]:
    """Drop the cached configuration and read it again."""
    return _config_response(cache.refresh(), message="Cache refreshed")
