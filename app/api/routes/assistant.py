"""
API routes for the interview assistant settings.

GET derives the assistant from the cached call configuration, so it never
hits the database during calls. POST stores new assistant settings next to
the current configuration and refreshes the cache.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.calling.script_cache import ScriptCache, get_script_cache
from app.vapi.assistant import AssistantRequest, apply_assistant_request, build_assistant_config

logger = structlog.get_logger()

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.get("")
async def get_assistant_config(cache: ScriptCache = Depends(get_script_cache)) -> dict[str, Any]:
    return build_assistant_config(cache.get_config())


@router.post("")
async def update_assistant_config(
    request: AssistantRequest,
    cache: ScriptCache = Depends(get_script_cache),
) -> dict[str, Any]:
    """Save assistant settings (keeping method, script and call settings) and refresh the cache."""
    updated = apply_assistant_request(cache.get_config(), request)

    try:
        cache.store.save(updated)
    except Exception as e:
        logger.error("Failed to update assistant config", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update configuration")

    cache.refresh()
    logger.info("Assistant configuration updated", name=updated.assistant.assistant_name)

    return {
        "success": True,
        "message": "Assistant configuration updated and cache refreshed",
    }
