"""
API routes for the interview script library.

A small in-process library of reusable scripts for the dashboard. The
script actually used on calls is the one in the call configuration.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import APIRouter, HTTPException, Query

from app.calling.script_cache import DEFAULT_SCRIPT
from app.db.models import CamelModel

logger = structlog.get_logger()

router = APIRouter(prefix="/api/scripts", tags=["scripts"])


class ScriptCreate(CamelModel):
    name: str = ""
    content: str = ""
    is_default: bool = False


class ScriptUpdate(CamelModel):
    id: Optional[int] = None
    name: Optional[str] = None
    content: Optional[str] = None
    is_default: Optional[bool] = None


SALES_FOLLOW_UP_SCRIPT = """Hi! This is a follow-up call regarding our recent conversation about our services. Do you have a moment to discuss?

1. How are you doing with your current solution?
2. What challenges are you facing?
3. Would you be interested in a demo of our new features?
4. What would be the best time to schedule a meeting?

Thank you for your time!"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _seed_scripts() -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "name": "Basic Interview Script",
            "content": DEFAULT_SCRIPT,
            "isDefault": True,
            "createdAt": _now(),
        },
        {
            "id": 2,
            "name": "Sales Follow-up Script",
            "content": SALES_FOLLOW_UP_SCRIPT,
            "isDefault": False,
            "createdAt": _now(),
        },
    ]


# In-memory library (resets on restart)
scripts: list[dict[str, Any]] = _seed_scripts()


def reset_scripts() -> None:
    scripts[:] = _seed_scripts()


def _find(script_id: int) -> dict[str, Any]:
    script = next((s for s in scripts if s["id"] == script_id), None)
    if script is None:
        raise HTTPException(status_code=404, detail="Script not found")
    return script


@router.get("")
async def list_scripts(id: Optional[int] = Query(default=None)) -> dict[str, Any]:
    if id is not None:
        return {"script": _find(id)}
    return {"scripts": scripts}


@router.post("")
async def create_script(request: ScriptCreate) -> dict[str, Any]:
    if not request.name or not request.content:
        raise HTTPException(status_code=400, detail="Name and content are required")

    script = {
        "id": max((s["id"] for s in scripts), default=0) + 1,
        "name": request.name,
        "content": request.content,
        "isDefault": request.is_default,
        "createdAt": _now(),
    }
    scripts.append(script)
    logger.info("Script created", script_id=script["id"], name=script["name"])

    return {"success": True, "script": script, "message": "Script created successfully"}


@router.put("")
async def update_script(request: ScriptUpdate) -> dict[str, Any]:
    if request.id is None:
        raise HTTPException(status_code=400, detail="Script ID is required")

    script = _find(request.id)
    script.update(
        name=request.name or script["name"],
        content=request.content or script["content"],
        isDefault=request.is_default if request.is_default is not None else script["isDefault"],
        updatedAt=_now(),
    )

    return {"success": True, "script": script, "message": "Script updated successfully"}


@router.delete("")
async def delete_script(id: Optional[int] = Query(default=None)) -> dict[str, Any]:
    if id is None:
        raise HTTPException(status_code=400, detail="Script ID is required")

    script = _find(id)
    if script["isDefault"]:
        raise HTTPException(status_code=400, detail="Cannot delete default script")

    scripts.remove(script)
    logger.info("Script deleted", script_id=id)

    return {"success": True, "message": "Script deleted successfully"}
