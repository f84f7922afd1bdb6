"""
Webhook handlers for provider callbacks.

Vapi posts call events as JSON; Twilio posts call status as a form. Each
event type maps to at most one candidate update. Events are not
deduplicated or ordered.
"""

from typing import Any, Callable

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.middleware.auth import verify_webhook_token
from app.db.models import CandidateStatus
from app.db.repository import CandidateRepository, get_candidate_repository

logger = structlog.get_logger()

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

# Vapi call status -> candidate status
VAPI_STATUS_MAP = {
    "queued": CandidateStatus.CALLING,
    "ringing": CandidateStatus.CALLING,
    "in-progress": CandidateStatus.CALLING,
    "forwarding": CandidateStatus.CALLING,
    "ended": CandidateStatus.COMPLETED,
    "busy": CandidateStatus.FAILED,
    "no-answer": CandidateStatus.FAILED,
    "failed": CandidateStatus.FAILED,
}

# Twilio CallStatus -> candidate status
TWILIO_STATUS_MAP = {
    "initiated": CandidateStatus.CALLING,
    "queued": CandidateStatus.CALLING,
    "ringing": CandidateStatus.CALLING,
    "in-progress": CandidateStatus.CALLING,
    "answered": CandidateStatus.CALLING,
    "completed": CandidateStatus.COMPLETED,
    "busy": CandidateStatus.FAILED,
    "no-answer": CandidateStatus.FAILED,
    "failed": CandidateStatus.FAILED,
    "canceled": CandidateStatus.FAILED,
}


def _candidate_id(message: dict[str, Any]) -> int | None:
    metadata = (message.get("call") or {}).get("metadata") or {}
    raw = metadata.get("candidateId") or metadata.get("candidate_id")
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _handle_status_update(message: dict[str, Any], repo: CandidateRepository) -> dict[str, Any]:
    candidate_id = _candidate_id(message)
    status = VAPI_STATUS_MAP.get(message.get("status"))
    if candidate_id is None or status is None:
        return {"ok": True, "updated": False}

    updated = repo.update_status(candidate_id, status)
    return {"ok": True, "updated": updated is not None}


def _handle_end_of_call_report(message: dict[str, Any], repo: CandidateRepository) -> dict[str, Any]:
    candidate_id = _candidate_id(message)
    if candidate_id is None:
        return {"ok": True, "updated": False}

    analysis = message.get("analysis") or {}
    artifact = message.get("artifact") or {}
    summary = analysis.get("summary") or message.get("summary") or message.get("endedReason")
    transcript = message.get("transcript") or artifact.get("transcript")

    updated = repo.update_status(
        candidate_id,
        CandidateStatus.COMPLETED,
        call_result=summary,
        call_notes=transcript,
    )
    return {"ok": True, "updated": updated is not None}


def _log_only(message: dict[str, Any], repo: CandidateRepository) -> dict[str, Any]:
    return {"ok": True, "type": message.get("type")}


VAPI_HANDLERS: dict[str, Callable[[dict[str, Any], CandidateRepository], dict[str, Any]]] = {
    "status-update": _handle_status_update,
    "end-of-call-report": _handle_end_of_call_report,
    "transcript": _log_only,
    "function-call": _log_only,
}


@router.post("/vapi", dependencies=[Depends(verify_webhook_token)])
async def handle_vapi_webhook(
    request: Request,
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    """
    Handle incoming webhooks from Vapi.

    Vapi sends several types of webhooks:
    - status-update: Call status changes (ringing, in-progress, ended)
    - end-of-call-report: Summary and transcript once the call ends
    - transcript: Real-time transcript updates
    - function-call: When the assistant calls a function

    Payloads are usually wrapped as {"message": {...}}; flat payloads are
    accepted too.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        logger.error("Failed to parse webhook payload", error=str(e))
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    message = payload.get("message") if isinstance(payload.get("message"), dict) else payload
    message_type = message.get("type", "unknown")

    logger.info(
        "Received Vapi webhook",
        type=message_type,
        call_id=(message.get("call") or {}).get("id") or message.get("callId"),
        candidate_id=_candidate_id(message),
        data_keys=list(payload.keys()),
    )

    handler = VAPI_HANDLERS.get(message_type, _log_only)
    return handler(message, repo)


@router.post("/twilio")
async def handle_twilio_status(
    request: Request,
    repo: CandidateRepository = Depends(get_candidate_repository),
) -> dict[str, Any]:
    """Twilio status callback. Query string carries callType and, when known, candidateId."""
    form = await request.form()
    call_sid = form.get("CallSid")
    call_status = form.get("CallStatus")
    call_type = request.query_params.get("callType")
    raw_candidate_id = request.query_params.get("candidateId")

    logger.info(
        "Received Twilio status callback",
        call_sid=call_sid,
        status=call_status,
        call_type=call_type,
        candidate_id=raw_candidate_id,
    )

    status = TWILIO_STATUS_MAP.get(call_status)
    if not raw_candidate_id or not raw_candidate_id.isdigit() or status is None:
        return {"ok": True, "updated": False}

    extra = {}
    if status == CandidateStatus.COMPLETED and form.get("CallDuration"):
        extra["call_notes"] = f"Twilio call {call_sid} lasted {form.get('CallDuration')}s"

    updated = repo.update_status(int(raw_candidate_id), status, **extra)
    return {"ok": True, "updated": updated is not None}


@router.get("/vapi/health")
async def webhook_health() -> dict[str, str]:
    """Health check for webhook endpoint."""
    return {"status": "vapi-webhook-ok"}
