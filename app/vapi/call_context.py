"""
Call context builder for Vapi voice calls.

Builds the payload for Vapi's create-call API, including the variables
substituted into the assistant prompt.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class CallContext:
    """Complete context for a single Vapi call."""

    phone_number: str
    candidate_name: str | None = None
    candidate_id: int | None = None
    assistant_id: str | None = None
    script: str | None = None
    fallback_reason: str | None = None
    call_type: str = "interview"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def build_assistant_variables(self) -> dict[str, str]:
        """
        Variable overrides for the Vapi assistant.

        These are substituted into the assistant's system prompt
        using {{variable_name}} syntax.
        """
        variables = {"candidate_name": self.candidate_name or "there"}
        if self.script:
            variables["interview_script"] = self.script
        return variables

    def build_metadata(self) -> dict[str, Any]:
        """Metadata echoed back on webhooks."""
        metadata: dict[str, Any] = {
            "candidateName": self.candidate_name,
            "callType": self.call_type,
            "timestamp": self.created_at.isoformat(),
        }
        if self.candidate_id is not None:
            metadata["candidateId"] = self.candidate_id
        if self.fallback_reason:
            metadata["fallbackReason"] = self.fallback_reason
        return metadata

    def to_vapi_call_payload(
        self,
        phone_number_id: str | None,
        assistant_id: str,
    ) -> dict[str, Any]:
        """
        Build the complete payload for Vapi's create call API.

        Args:
            phone_number_id: The Vapi phone number ID to call from. Omitted
                when Twilio places the call and Vapi only runs the assistant.
            assistant_id: Default assistant, used unless the context names one

        Returns:
            Dict ready to be sent to POST /call
        """
        if not self.phone_number:
            raise ValueError("Call context has no phone number")

        payload: dict[str, Any] = {
            "assistantId": self.assistant_id or assistant_id,
            "customer": {
                "number": self.phone_number,
                "name": self.candidate_name or "Candidate",
            },
            "customerId": f"candidate_{int(self.created_at.timestamp() * 1000)}",
            "assistantOverrides": {
                "variableValues": self.build_assistant_variables(),
            },
            "metadata": self.build_metadata(),
        }
        if phone_number_id:
            payload["phoneNumberId"] = phone_number_id
        return payload
