from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes camelCase over HTTP."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CallMethod(str, Enum):
    """Which provider(s) place an interview call."""

    VAPI = "vapi"
    TWILIO = "twilio"
    HYBRID = "hybrid"


class CandidateStatus(str, Enum):
    PENDING = "pending"
    CALLING = "calling"
    COMPLETED = "completed"
    FAILED = "failed"


# ══════════════════════════════════════════════════════════
# Call configuration
# ══════════════════════════════════════════════════════════


class VoiceSettings(CamelModel):
    provider: str
    voice_id: str
    speed: float = Field(gt=0)
    pitch: float = Field(gt=0)


class CallSettings(CamelModel):
    max_duration_minutes: int = Field(gt=0)
    retry_attempts: int = Field(ge=0)
    delay_between_calls_seconds: int = Field(ge=0)


class AssistantSettings(CamelModel):
    """Optional assistant overrides stored next to the call configuration."""

    assistant_name: Optional[str] = None
    assistant_language: Optional[str] = None
    model_provider: Optional[str] = None
    model_name: Optional[str] = None
    voice_provider: Optional[str] = None
    voice_id: Optional[str] = None
    voice_speed: Optional[float] = None
    voice_pitch: Optional[float] = None
    transcription_provider: Optional[str] = None
    transcription_model: Optional[str] = None
    transcription_language: Optional[str] = None
    instructions: Optional[str] = None
    max_duration_seconds: Optional[int] = None
    interruption_threshold: Optional[int] = None
    background_sound: Optional[str] = None
    silence_timeout_seconds: Optional[int] = None
    response_delay_seconds: Optional[float] = None


class CallConfiguration(CamelModel):
    """The single authoritative call configuration."""

    method: CallMethod
    script: str = Field(min_length=1)
    voice_settings: VoiceSettings
    call_settings: CallSettings
    assistant: Optional[AssistantSettings] = None

    def to_row(self) -> dict[str, Any]:
        """
        Flatten into the `call_configs` row layout.

        Every assistant column is present (None when unset) so an update
        overwrites the previous row completely.
        """
        row = self.model_dump(mode="json", exclude={"assistant"})
        row.update((self.assistant or AssistantSettings()).model_dump(mode="json"))
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CallConfiguration":
        assistant_fields = {
            name: row[name]
            for name in AssistantSettings.model_fields
            if row.get(name) is not None
        }
        return cls(
            method=row["method"],
            script=row["script"],
            voice_settings=row["voice_settings"],
            call_settings=row["call_settings"],
            assistant=AssistantSettings(**assistant_fields) if assistant_fields else None,
        )


# ══════════════════════════════════════════════════════════
# Candidates
# ══════════════════════════════════════════════════════════


class CandidateCreate(CamelModel):
    name: str
    phone: str
    email: str = ""
    position: str = ""
    status: CandidateStatus = CandidateStatus.PENDING


class Candidate(CamelModel):
    id: int
    name: str
    phone: str
    email: str = ""
    position: str = ""
    status: CandidateStatus = CandidateStatus.PENDING
    call_result: Optional[str] = None
    call_notes: Optional[str] = None
    call_time: Optional[datetime] = None
    added_at: Optional[datetime] = None
    call_start_time: Optional[datetime] = None
    call_end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
