"""
API routes for Vapi assistants.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.vapi.assistant import AssistantRequest, build_vapi_assistant_payload
from app.vapi.service import VapiError, VapiService, get_vapi_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/vapi/assistants", tags=["vapi"])


@router.post("")
async def create_assistant(
    request: AssistantRequest,
    vapi: VapiService = Depends(get_vapi_service),
) -> dict[str, Any]:
    try:
        assistant = await vapi.create_assistant(build_vapi_assistant_payload(request))
    except VapiError as e:
        logger.error("Error creating assistant", error=e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"success": True, "assistant": assistant, "message": "Assistant created successfully"}


@router.get("")
async def list_assistants(vapi: VapiService = Depends(get_vapi_service)) -> dict[str, Any]:
    try:
        assistants = await vapi.list_assistants()
    except VapiError as e:
        logger.error("Error getting assistants", error=e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"success": True, "assistants": assistants}


@router.get("/{assistant_id}")
async def get_assistant(assistant_id: str, vapi: VapiService = Depends(get_vapi_service)) -> dict[str, Any]:
    try:
        assistant = await vapi.get_assistant(assistant_id)
    except VapiError as e:
        logger.error("Error getting assistant", assistant_id=assistant_id, error=e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"success": True, "assistant": assistant}
