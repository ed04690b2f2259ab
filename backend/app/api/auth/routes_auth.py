"""Authentication routes.

The wallet provider authenticates the user in the browser and hands us its
identity ({email, name}). Login maps that identity to a user row and issues our
own signed tokens; every other endpoint trusts only those tokens.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr

from app.api.deps import get_current_user, get_user_service, get_reward_service, get_notification_service
from app.domain.common.errors import NotFoundError
from app.domain.rewards.services import RewardService
from app.domain.users.models import User
from app.domain.users.services import UserService
from app.infra.security.jwt import create_access_token, create_refresh_token, user_id_from_token
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    """Identity returned by the wallet provider."""
    email: EmailStr
    name: Optional[str] = None


class RefreshRequest(BaseModel):
    """Refresh token request model."""
    refresh_token: str


class UserResponse(BaseModel):
    id: int
    email: str
    name: str


class TokenResponse(BaseModel):
    """Token response model."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class MeResponse(UserResponse):
    """Header display: who is logged in, their balance and unread count."""
    balance: float
    unread_notifications: int


def _tokens_for(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(data={"sub": user.id}),
        refresh_token=create_refresh_token(data={"sub": user.id}),
        user=UserResponse(id=user.id, email=user.email, name=user.name),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    users: UserService = Depends(get_user_service),
):
    """Log in with the wallet identity, creating the user on first login."""
    logger.info(f"🔵 [AUTH] Login request received for email: {request.email}")
    user = await users.get_or_create_user(request.email, request.name)
    logger.info(f"✅ [AUTH] Login successful for user: {user.id}")
    return _tokens_for(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    request: RefreshRequest,
    users: UserService = Depends(get_user_service),
):
    """Exchange a refresh token for a fresh token pair."""
    user_id = user_id_from_token(request.refresh_token, "refresh")
    if user_id is None:
        logger.warning("⚠️ [AUTH] Refresh rejected: invalid or expired token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user = await users.get_user(user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return _tokens_for(user)


@router.get("/me", response_model=MeResponse)
async def me(
    current_user: User = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Current user with balance and unread notification count."""
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        balance=await rewards.get_user_balance(current_user.id),
        unread_notifications=await notifications.count_unread(current_user.id),
    )
