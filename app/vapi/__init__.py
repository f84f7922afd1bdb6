"""
Vapi voice module.

Places AI-driven interview calls and manages Vapi assistants.
"""

from app.vapi.assistant import (
    AssistantRequest,
    apply_assistant_request,
    build_assistant_config,
    build_vapi_assistant_payload,
)
from app.vapi.call_context import CallContext
from app.vapi.config import VapiConfig, get_vapi_config, validate_vapi_config
from app.vapi.service import VapiError, VapiService, get_vapi_service

__all__ = [
    # Config
    "VapiConfig",
    "get_vapi_config",
    "validate_vapi_config",
    # Context
    "CallContext",
    # Assistant
    "AssistantRequest",
    "apply_assistant_request",
    "build_assistant_config",
    "build_vapi_assistant_payload",
    # Service
    "VapiError",
    "VapiService",
    "get_vapi_service",
]
