"""
Authentication endpoints: login, registration and password reset.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.database import get_db
from app.models import UserRole
from app.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RequestResetRequest,
    ResetPasswordRequest,
)
from app.services import accounts

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/auth", tags=["Auth"])

RESET_SENT_MESSAGE = "If that email is registered, a reset link has been sent."


@router.post("/login", response_model=LoginResponse, summary="Log In")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange credentials for a bearer token."""
    user, token = await accounts.authenticate(db, body.email, body.password)
    return LoginResponse(
        token=token,
        id=user.id,
        name=user.name,
        role=user.role,
        status=user.status,
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=201,
    summary="Register Customer or Seller",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    user = await accounts.register_user(db, body)
    if user.role == UserRole.SELLER:
        return MessageResponse(message="Seller registered. Waiting for admin approval.")
    return MessageResponse(message="Registration successful")


@router.post("/request-reset", summary="Request Password Reset")
async def request_reset(
    body: RequestResetRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Issue a password reset token.

    The response is the same whether or not the email exists. Outside
    production there is no mail delivery, so development mode echoes the
    token back to the caller.
    """
    raw_token = await accounts.request_password_reset(db, body.email)

    response: dict[str, Any] = {"message": RESET_SENT_MESSAGE}
    if raw_token and settings.is_development:
        response["resetToken"] = raw_token
    return response


@router.post("/reset-password", response_model=MessageResponse, summary="Reset Password")
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await accounts.reset_password(db, body.token, body.newPassword)
    return MessageResponse(message="Password reset successful")
