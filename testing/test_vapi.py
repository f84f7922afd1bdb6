"""
Tests for the Vapi integration: call payloads, assistant settings and the
REST service (against httpx.MockTransport, never the real API).
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.calling.script_cache import ScriptCache
from app.vapi.assistant import (
    DEFAULT_INSTRUCTIONS,
    AssistantRequest,
    apply_assistant_request,
    build_assistant_config,
    build_vapi_assistant_payload,
)
from app.vapi.call_context import CallContext
from app.vapi.config import VapiConfig, validate_vapi_config
from app.vapi.service import VapiError, VapiService
from testing.sample_inputs import get_sample_config


# ── Config ──


def test_validate_vapi_config():
    assert not validate_vapi_config(VapiConfig())
    assert validate_vapi_config(
        VapiConfig(vapi_private_key="k", vapi_phone_number_id="p", vapi_assistant_id="a")
    )


# ── Call context ──


def test_call_payload_shape():
    context = CallContext(
        phone_number="+14155550123",
        candidate_name="Sam",
        candidate_id=4,
        script="1. Why this role?",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    payload = context.to_vapi_call_payload(phone_number_id="phone_1", assistant_id="assistant_1")

    assert payload["phoneNumberId"] == "phone_1"
    assert payload["assistantId"] == "assistant_1"
    assert payload["customer"] == {"number": "+14155550123", "name": "Sam"}
    assert payload["customerId"] == "candidate_1767225600000"
    assert payload["assistantOverrides"]["variableValues"] == {
        "candidate_name": "Sam",
        "interview_script": "1. Why this role?",
    }
    assert payload["metadata"]["candidateId"] == 4
    assert payload["metadata"]["callType"] == "interview"
    assert "fallbackReason" not in payload["metadata"]


def test_call_payload_prefers_context_assistant():
    context = CallContext(phone_number="+14155550123", assistant_id="custom")

    payload = context.to_vapi_call_payload(phone_number_id=None, assistant_id="assistant_1")

    assert payload["assistantId"] == "custom"
    assert payload["customer"]["name"] == "Candidate"
    assert payload["assistantOverrides"]["variableValues"] == {"candidate_name": "there"}
    assert "phoneNumberId" not in payload


def test_call_payload_requires_phone():
    with pytest.raises(ValueError):
        CallContext(phone_number="").to_vapi_call_payload(phone_number_id="p", assistant_id="a")


# ── Assistant settings ──


def test_assistant_config_from_default():
    assistant = build_assistant_config(ScriptCache.get_default_config())

    assert assistant["name"] == "Interview Assistant"
    assert assistant["voice"]["voiceId"] == "adam"
    assert assistant["transcription"]["language"] == "multi"
    assert "Follow this script" in assistant["instructions"]


def test_assistant_request_is_stored_on_config():
    request = AssistantRequest.model_validate(
        {
            "name": "Screening Bot",
            "language": "hi",
            "voice": {"provider": "playht", "voiceId": "jennifer", "speed": 1.1},
            "instructions": "Be brief.",
            "maxDurationSeconds": 300,
        }
    )
    current = get_sample_config()

    updated = apply_assistant_request(current, request)

    assert updated.script == current.script
    assert current.assistant is None
    assert updated.assistant.assistant_name == "Screening Bot"
    assert updated.assistant.voice_id == "jennifer"
    assert updated.assistant.max_duration_seconds == 300

    assistant = build_assistant_config(updated)
    assert assistant["name"] == "Screening Bot"
    assert assistant["instructions"] == "Be brief."
    # Hindi forces a matching transcriber and voice
    assert assistant["transcription"] == {"provider": "deepgram", "model": "nova-2", "language": "hi"}
    assert assistant["voice"]["voiceId"] == "hindi-male-1"


def test_assistant_settings_survive_row_round_trip():
    updated = apply_assistant_request(get_sample_config(), AssistantRequest(name="Row Bot"))

    restored = type(updated).from_row(updated.to_row())

    assert restored == updated


def test_vapi_assistant_payload_defaults():
    payload = build_vapi_assistant_payload(AssistantRequest())

    assert payload["name"] == "Interview Assistant"
    assert payload["instructions"] == DEFAULT_INSTRUCTIONS
    assert payload["maxDurationSeconds"] == 600
    assert [f["name"] for f in payload["functions"]] == ["take_notes", "schedule_follow_up"]


# ── REST service ──


async def test_create_call_posts_payload(vapi_service, vapi_recorder):
    call = await vapi_service.create_call(CallContext(phone_number="+14155550123", candidate_name="Sam"))

    assert call == {"id": "vapi_call_1", "status": "queued"}

    request = vapi_recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.vapi.ai/call"
    assert request.headers["Authorization"] == "Bearer vapi-key"
    assert json.loads(request.content)["phoneNumberId"] == "phone_1"


async def test_provider_error_keeps_status_and_message(vapi_service, vapi_recorder):
    vapi_recorder.status_code = 400
    vapi_recorder.body = {"message": ["customer.number must be a valid phone number"]}

    with pytest.raises(VapiError) as exc_info:
        await vapi_service.create_call(CallContext(phone_number="+1"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "customer.number must be a valid phone number"


async def test_provider_error_without_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=b"bad gateway")

    service = VapiService(
        config=VapiConfig(vapi_private_key="k"),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(VapiError) as exc_info:
        await service.get_call("call_1")

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Vapi request failed (502)"


async def test_unconfigured_service_raises_without_request(vapi_recorder):
    service = VapiService(config=VapiConfig(), transport=httpx.MockTransport(vapi_recorder))

    with pytest.raises(VapiError) as exc_info:
        await service.create_call(CallContext(phone_number="+14155550123"))

    assert exc_info.value.status_code == 500
    assert vapi_recorder.requests == []


async def test_call_without_phone_number_only_needs_key(vapi_recorder):
    service = VapiService(
        config=VapiConfig(vapi_private_key="k", vapi_assistant_id="a"),
        transport=httpx.MockTransport(vapi_recorder),
    )

    await service.create_call(CallContext(phone_number="+14155550123"), use_phone_number=False)

    assert "phoneNumberId" not in json.loads(vapi_recorder.requests[0].content)


async def test_list_assistants(vapi_service, vapi_recorder):
    vapi_recorder.status_code = 200
    vapi_recorder.body = [{"id": "asst_1"}, {"id": "asst_2"}]

    assistants = await vapi_service.list_assistants()

    assert [a["id"] for a in assistants] == ["asst_1", "asst_2"]
    assert str(vapi_recorder.requests[0].url) == "https://api.vapi.ai/assistant"
