"""API middleware modules."""

from .auth import verify_webhook_token

__all__ = ["verify_webhook_token"]
