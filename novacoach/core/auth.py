"""
Internal API authentication dependency.

The coaching endpoints are internal: they should only be callable by the
Nova front-end backend, not by anyone on the internet.

How it works:
  - Caller sends header: X-Internal-Secret: <INTERNAL_API_SECRET>
  - Service checks it matches the configured secret
  - Returns 403 if missing or wrong
"""
from fastapi import Header, HTTPException
from typing import Annotated

from novacoach.core.config import settings


def verify_internal_secret(x_internal_secret: Annotated[str, Header()] = "") -> None:
    """FastAPI dependency: validates the shared internal secret header."""
    if not settings.INTERNAL_API_SECRET:
        # If the secret is not set, block all requests to prevent accidental exposure
        raise HTTPException(
            status_code=503,
            detail="Service not configured (INTERNAL_API_SECRET not set)"
        )
    if x_internal_secret != settings.INTERNAL_API_SECRET:
        raise HTTPException(
            status_code=403,
            detail="Forbidden: invalid or missing internal secret"
        )
