"""
API routes for the call queue.

The queue is the set of pending candidates; history is the completed ones.
"""

from typing import Any, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.models import CamelModel, CandidateStatus
from app.db.repository import CandidateRepository, get_candidate_repository

logger = structlog.get_logger()

router = APIRouter(prefix="/api/queue", tags=["queue"])


class QueueAction(CamelModel):
    action: str
    candidates: Optional[list[dict[str, Any]]] = None
    candidate_id: Optional[int] = None
    call_result: Optional[str] = None
    call_notes: Optional[str] = None


@router.get("")
async def get_queue(
    type: Literal["queue", "history"] = Query(default="queue"),
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    if type == "history":
        return {"calls": repo.list_history()}

    queue = repo.list_queue()
    return {"queue": queue, "total": len(queue)}


@router.post("")
async def manage_queue(
    request: QueueAction,
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    """Queue actions: add_to_queue, start_call, end_call, clear_queue."""
    if request.action == "add_to_queue":
        if request.candidates is None:
            raise HTTPException(status_code=400, detail="Candidates must be an array")

        try:
            added = repo.add_to_queue(request.candidates)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid candidate: {e}")

        return {
            "success": True,
            "message": f"Added {len(added)} candidates to call queue",
            "queueLength": len(repo.list_queue()),
        }

    if request.action == "start_call":
        candidate = repo.get(request.candidate_id) if request.candidate_id is not None else None
        # Only pending candidates are in the queue
        if candidate is None or candidate.get("status") != CandidateStatus.PENDING.value:
            raise HTTPException(status_code=404, detail="Candidate not found in queue")

        candidate = repo.update_status(request.candidate_id, CandidateStatus.CALLING)
        return {"success": True, "candidate": candidate, "message": "Call started"}

    if request.action == "end_call":
        if request.candidate_id is None or repo.get(request.candidate_id) is None:
            raise HTTPException(status_code=404, detail="Candidate not found")

        repo.update_status(
            request.candidate_id,
            CandidateStatus.COMPLETED,
            call_result=request.call_result,
            call_notes=request.call_notes,
        )
        return {"success": True, "message": "Call completed and moved to history"}

    if request.action == "clear_queue":
        repo.clear_queue()
        logger.info("Call queue cleared")
        return {"success": True, "message": "Call queue cleared"}

    raise HTTPException(status_code=400, detail="Invalid action")
