"""
FastAPI dependencies for authentication.

``get_current_user_id`` walks each protected request through
Unauthenticated → TokenExtracted → TokenVerified → Authorized; any failed
step raises an ``AuthenticationError`` and the handler never runs.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from auth.jwt import TokenService
from auth.password import PasswordHasher
from core.errors import AuthenticationError

logger = logging.getLogger(__name__)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the credential from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("Credential required")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Credential required")
    return token


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    ``user_id`` (UUID string).
    """
    token = extract_bearer_token(authorization)
    try:
        user_id = tokens.verify(token)
    except AuthenticationError as exc:
        logger.debug("Rejected credential on %s %s: %s", request.method, request.url.path, exc.code)
        raise
    request.state.user_id = user_id
    return user_id
