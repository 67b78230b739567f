"""Authentication endpoints: register, login, profile, password change."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.deps import get_current_user
from store_rating.core.security import create_access_token
from store_rating.db.base import get_db
from store_rating.schemas.auth import LoginRequest, PasswordChangeRequest, Principal, TokenResponse
from store_rating.schemas.common import MessageResponse
from store_rating.schemas.user import UserRegister, UserResponse
from store_rating.services import users as user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: UserRegister, db: AsyncSession = Depends(get_db)):
    """Self-service sign-up as a normal user."""
    user = await user_service.register_user(db, body)
    return TokenResponse(
        access_token=create_access_token(user.id, user.role.value),
        user_id=user.id,
        role=user.role,
    )


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate via email + password, return JWT."""
    user = await user_service.authenticate(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return TokenResponse(
        access_token=create_access_token(user.id, user.role.value),
        user_id=user.id,
        role=user.role,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, current_user, current_user.id)


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChangeRequest,
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, current_user, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")
