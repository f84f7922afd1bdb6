"""
Static bearer token check for inbound webhooks.

When WEBHOOK_SECRET is set, webhook requests must carry
`Authorization: Bearer <secret>`. When it is unset, webhooks are open.
"""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings, get_settings

# Optional bearer token - the check itself decides whether one is required
optional_security = HTTPBearer(auto_error=False)


async def verify_webhook_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Reject webhook calls without the configured secret.

    Usage:
        @router.post("/vapi", dependencies=[Depends(verify_webhook_token)])
        async def handle_vapi_webhook(request: Request):
            ...

    Raises:
        HTTPException(401): If a secret is configured and the token is missing or wrong
    """
    expected = settings.webhook_secret
    if not expected:
        return

    provided = credentials.credentials if credentials else ""
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
