"""User management endpoints (admin, plus own-profile read)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.api.params import list_params
from store_rating.core.deps import get_current_user, require_admin
from store_rating.db.base import get_db
from store_rating.db.query import ListParams
from store_rating.schemas.auth import Principal
from store_rating.schemas.common import MessageResponse
from store_rating.schemas.user import (
    DashboardStats,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from store_rating.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    role: str | None = None,
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List users with search, sort, role filter and pagination."""
    rows, pagination = await user_service.list_users(db, current_user, params, role=role)
    return {"users": rows, "pagination": pagination}


@router.get("/stats/dashboard", response_model=DashboardStats)
async def dashboard(
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.dashboard_stats(db, current_user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.create_user(db, current_user, body)
    return await user_service.get_user(db, current_user, user.id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins may read any user; everyone else only themselves."""
    return await user_service.get_user(db, current_user, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, current_user, user_id, body)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, current_user, user_id)
    return MessageResponse(message="User deleted successfully")
