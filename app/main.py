from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import assistant, assistants, call_config, calls, data, phone, queue, scripts, webhooks
from app.config import configure_logging, get_settings
from app.db.client import is_supabase_configured
from app.telephony.config import get_twilio_config, validate_twilio_config
from app.vapi.config import get_vapi_config, validate_vapi_config

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level, settings.debug)
    logger.info(
        "Starting Interview Caller...",
        supabase=is_supabase_configured(),
        vapi=validate_vapi_config(),
        twilio=validate_twilio_config(),
    )
    yield
    # Shutdown
    logger.info("Shutting down Interview Caller...")


app = FastAPI(
    title="Interview Caller",
    description="Outbound phone interviews through Vapi and Twilio",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(call_config.router)
app.include_router(assistant.router)
app.include_router(scripts.router)
app.include_router(calls.router)
app.include_router(queue.router)
app.include_router(data.router)
app.include_router(phone.router)
app.include_router(assistants.router)
app.include_router(webhooks.router)


def _flag(value: str) -> str:
    return "set" if value else "missing"


@app.get("/")
async def root():
    return {"message": "Interview Caller API", "version": VERSION}


@app.get("/health")
async def health():
    settings = get_settings()
    vapi = get_vapi_config()
    twilio = get_twilio_config()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "supabase": {"configured": is_supabase_configured()},
            "vapi": {
                "configured": validate_vapi_config(vapi),
                "privateKey": _flag(vapi.vapi_private_key),
                "publicKey": _flag(vapi.vapi_public_key),
                "phoneNumberId": _flag(vapi.vapi_phone_number_id),
                "assistantId": _flag(vapi.vapi_assistant_id),
            },
            "twilio": {
                "configured": validate_twilio_config(twilio),
                "accountSid": _flag(twilio.twilio_account_sid),
                "authToken": _flag(twilio.twilio_auth_token),
                "phoneNumber": _flag(twilio.twilio_phone_number),
            },
            "webhookAuth": bool(settings.webhook_secret),
        },
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port, reload=True)
