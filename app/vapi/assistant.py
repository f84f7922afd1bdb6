"""
Assistant configuration for Vapi.

Turns the cached CallConfiguration into the assistant settings the dashboard
shows, and builds the body for Vapi's create-assistant API.
"""

from typing import Any, Optional

from app.db.models import AssistantSettings, CallConfiguration, CamelModel
from app.vapi.config import get_vapi_config

DEFAULT_ASSISTANT_NAME = "Interview Assistant"
DEFAULT_LANGUAGE = "en"
DEFAULT_MODEL = {"provider": "openai", "model": "gpt-4o-mini"}
DEFAULT_TRANSCRIPTION = {"provider": "deepgram", "model": "nova-2", "language": "multi"}

DEFAULT_FIRST_MESSAGE = (
    "Hello! This is an automated call regarding your job application. "
    "Do you have a few minutes to answer some questions?"
)

DEFAULT_INSTRUCTIONS = """You are a professional interview assistant conducting phone interviews for job candidates.

Your role is to:
1. Greet the candidate professionally
2. Ask relevant interview questions
3. Listen actively to their responses
4. Take notes of key information
5. Be friendly but professional
6. If they ask to speak to a human, explain this is an automated screening
7. Thank them for their time at the end

Always be respectful, patient, and professional."""

END_CALL_PHRASES = ["goodbye", "thank you", "have a great day", "talk to you later"]

ASSISTANT_FUNCTIONS = [
    {
        "name": "take_notes",
        "description": "Take notes about the candidate's responses",
        "parameters": {
            "type": "object",
            "properties": {
                "question": {"type": "string", "description": "The question that was asked"},
                "response": {"type": "string", "description": "The candidate's response"},
                "key_points": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Key points from the response",
                },
            },
            "required": ["question", "response"],
        },
    },
    {
        "name": "schedule_follow_up",
        "description": "Schedule a follow-up call or meeting",
        "parameters": {
            "type": "object",
            "properties": {
                "candidate_name": {"type": "string", "description": "Name of the candidate"},
                "preferred_time": {"type": "string", "description": "Preferred time for follow-up"},
                "reason": {"type": "string", "description": "Reason for follow-up"},
            },
            "required": ["candidate_name", "reason"],
        },
    },
]


class AssistantRequest(CamelModel):
    """Assistant settings as sent by the dashboard."""

    name: Optional[str] = None
    language: Optional[str] = None
    model: Optional[dict[str, Any]] = None
    voice: Optional[dict[str, Any]] = None
    transcription: Optional[dict[str, Any]] = None
    instructions: Optional[str] = None
    first_message: Optional[str] = None
    max_duration_seconds: int = 600
    interruption_threshold: int = 1000
    background_sound: str = "office"
    silence_timeout_seconds: int = 5
    response_delay_seconds: float = 0.5


def script_instructions(script: str) -> str:
    return (
        "You are a professional interview assistant conducting phone interviews for job "
        f"candidates. Follow this script:\n\n{script}\n\n"
        "Always be professional, friendly, and take notes of their responses. If they ask to "
        "speak to a human, explain that this is an automated screening and provide contact "
        "information if available."
    )


def build_assistant_config(config: CallConfiguration) -> dict[str, Any]:
    """Assistant settings derived from the call configuration and its stored overrides."""
    stored = config.assistant or AssistantSettings()
    voice = config.voice_settings

    assistant = {
        "name": stored.assistant_name or DEFAULT_ASSISTANT_NAME,
        "language": stored.assistant_language or DEFAULT_LANGUAGE,
        "model": {
            "provider": stored.model_provider or DEFAULT_MODEL["provider"],
            "model": stored.model_name or DEFAULT_MODEL["model"],
        },
        "voice": {
            "provider": stored.voice_provider or voice.provider,
            "voiceId": stored.voice_id or voice.voice_id,
            "speed": stored.voice_speed or voice.speed,
            "pitch": stored.voice_pitch or voice.pitch,
        },
        "transcription": {
            "provider": stored.transcription_provider or DEFAULT_TRANSCRIPTION["provider"],
            "model": stored.transcription_model or DEFAULT_TRANSCRIPTION["model"],
            "language": stored.transcription_language or DEFAULT_TRANSCRIPTION["language"],
        },
        "instructions": stored.instructions or script_instructions(config.script),
    }

    if assistant["language"] == "hi":
        assistant["transcription"] = {"provider": "deepgram", "model": "nova-2", "language": "hi"}
        assistant["voice"] = {
            "provider": "elevenlabs",
            "voiceId": get_vapi_config().hindi_voice_id,
            "speed": 1.0,
            "pitch": 1.0,
        }

    return assistant


def apply_assistant_request(current: CallConfiguration, request: AssistantRequest) -> CallConfiguration:
    """New configuration: current method/script/settings plus the requested assistant fields."""
    model = request.model or {}
    voice = request.voice or {}
    transcription = request.transcription or {}

    assistant = AssistantSettings(
        assistant_name=request.name or DEFAULT_ASSISTANT_NAME,
        assistant_language=request.language or DEFAULT_LANGUAGE,
        model_provider=model.get("provider") or DEFAULT_MODEL["provider"],
        model_name=model.get("model") or DEFAULT_MODEL["model"],
        voice_provider=voice.get("provider") or "elevenlabs",
        voice_id=voice.get("voiceId") or "adam",
        voice_speed=voice.get("speed") or 1.0,
        voice_pitch=voice.get("pitch") or 1.0,
        transcription_provider=transcription.get("provider") or DEFAULT_TRANSCRIPTION["provider"],
        transcription_model=transcription.get("model") or DEFAULT_TRANSCRIPTION["model"],
        transcription_language=transcription.get("language") or DEFAULT_TRANSCRIPTION["language"],
        instructions=request.instructions or "",
        max_duration_seconds=request.max_duration_seconds,
        interruption_threshold=request.interruption_threshold,
        background_sound=request.background_sound,
        silence_timeout_seconds=request.silence_timeout_seconds,
        response_delay_seconds=request.response_delay_seconds,
    )
    return current.model_copy(update={"assistant": assistant}, deep=True)


def build_vapi_assistant_payload(request: AssistantRequest) -> dict[str, Any]:
    """Body for Vapi's POST /assistant."""
    return {
        "name": request.name or DEFAULT_ASSISTANT_NAME,
        "model": request.model or {**DEFAULT_MODEL, "temperature": 0.7, "maxTokens": 1000},
        "voice": request.voice or {"provider": "elevenlabs", "voiceId": "adam", "speed": 1.0, "pitch": 1.0},
        "transcription": request.transcription or dict(DEFAULT_TRANSCRIPTION),
        "firstMessage": request.first_message or DEFAULT_FIRST_MESSAGE,
        "instructions": request.instructions or DEFAULT_INSTRUCTIONS,
        "maxDurationSeconds": request.max_duration_seconds,
        "interruptionThreshold": request.interruption_threshold,
        "backgroundSound": request.background_sound,
        "silenceTimeoutSeconds": request.silence_timeout_seconds,
        "responseDelaySeconds": request.response_delay_seconds,
        "endCallMessage": "Thank you for your time! We'll be in touch soon.",
        "endCallPhrases": list(END_CALL_PHRASES),
        "functions": ASSISTANT_FUNCTIONS,
    }
