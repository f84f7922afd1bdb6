"""
API routes for data export, import and reset.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from app.calling.script_cache import ScriptCache, get_script_cache
from app.db.models import CamelModel
from app.db.repository import (
    CandidateRepository,
    clear_all_data,
    export_data,
    get_candidate_repository,
    import_data,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/data", tags=["data"])


class DataAction(CamelModel):
    action: str
    data: Optional[dict[str, Any]] = None
    candidates: Optional[list[dict[str, Any]]] = None


@router.get("")
async def get_data(
    action: str = Query(default="export"),
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    try:
        if action == "export":
            return {
                "success": True,
                "data": export_data(repo.client, repo.memory),
                "message": "Data exported successfully",
            }

        if action == "candidates":
            return {
                "success": True,
                "candidates": repo.list_all(),
                "message": "Candidates retrieved successfully",
            }
    except Exception as e:
        logger.error("Error in data management", action=action, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process data request")

    raise HTTPException(status_code=400, detail="Invalid action")


@router.post("")
async def post_data(
    request: DataAction,
    repo: CandidateRepository = Depends(get_candidate_repository),
    cache: ScriptCache = Depends(get_script_cache),
) -> dict[str, Any]:
    """Actions: import, save_candidates, clear_all."""
    if request.action not in ("import", "save_candidates", "clear_all"):
        raise HTTPException(status_code=400, detail="Invalid action")
    if request.action == "import" and not request.data:
        raise HTTPException(status_code=400, detail="Data is required for import")
    if request.action == "save_candidates" and not request.candidates:
        raise HTTPException(status_code=400, detail="Candidates data is required")

    try:
        if request.action == "import":
            import_data(request.data, repo.client, repo.memory)
            # Imported config replaces the current one
            cache.refresh()
            return {"success": True, "message": "Data imported successfully"}

        if request.action == "save_candidates":
            repo.create_many(request.candidates)
            return {"success": True, "message": "Candidates saved successfully"}

        clear_all_data(repo.client, repo.memory)
        cache.refresh()
        return {"success": True, "message": "All data cleared successfully"}

    except ValueError as e:
        logger.warning("Rejected invalid data", action=request.action, error=str(e))
        raise HTTPException(status_code=400, detail=f"Invalid data: {e}")
    except Exception as e:
        logger.error("Error in data management", action=request.action, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process data request")
