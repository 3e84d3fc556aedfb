"""
Auth API routes — register, login.

Mounted at the application root: ``POST /register``, ``POST /login``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_credential_store
from auth.dependencies import get_password_hasher, get_token_service
from auth.jwt import TokenService
from auth.password import PasswordHasher
from core.errors import InvalidCredentialsError, NotFoundError
from database.stores import CredentialStore
from utils.schemas import LoginRequest, LoginResponse, RegisterRequest, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    store: CredentialStore = Depends(get_credential_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserOut:
    """Register a new user."""
    password_hash = await hasher.hash(req.password)
    user = await store.create(req.email, password_hash)
    logger.info("Registered user %s", user.user_id)
    return UserOut(id=str(user.user_id), email=user.email)


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    """Login with email + password."""
    try:
        user = await store.find_by_email(req.email)
    except NotFoundError:
        # Same cost and same answer as a wrong password.
        await hasher.verify_unknown_user(req.password)
        logger.warning("Login failed: unknown email")
        raise InvalidCredentialsError() from None

    if not await hasher.verify(req.password, user.password_hash):
        logger.warning("Login failed: bad password for user %s", user.user_id)
        raise InvalidCredentialsError()

    token = tokens.issue(str(user.user_id))
    logger.info("Login: %s", user.user_id)
    return LoginResponse(token=token, user=UserOut(id=str(user.user_id), email=user.email))
