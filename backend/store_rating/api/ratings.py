"""Rating endpoints: normal users rate stores, admins see statistics."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.api.params import list_params
from store_rating.core.deps import get_current_user, require_admin, require_normal_user
from store_rating.db.base import get_db
from store_rating.db.query import ListParams
from store_rating.schemas.auth import Principal
from store_rating.schemas.common import MessageResponse
from store_rating.schemas.rating import (
    RatingCreate,
    RatingResponse,
    RatingStats,
    RatingUpdate,
    StoreRatingsWithStats,
    UserRatingListResponse,
)
from store_rating.services import ratings as rating_service

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def submit_rating(
    body: RatingCreate,
    current_user: Principal = Depends(require_normal_user),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.submit_rating(db, current_user, body)


@router.get("/my-ratings", response_model=UserRatingListResponse)
async def list_my_ratings(
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(require_normal_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await rating_service.list_my_ratings(db, current_user, params)
    return {"ratings": rows, "pagination": pagination}


@router.get("/stats", response_model=RatingStats)
async def rating_stats(
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.rating_stats(db, current_user)


@router.get("/user/{user_id}", response_model=UserRatingListResponse)
async def list_user_ratings(
    user_id: int,
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await rating_service.list_user_ratings(db, current_user, user_id, params)
    return {"ratings": rows, "pagination": pagination}


@router.get("/store/{store_id}", response_model=StoreRatingsWithStats)
async def list_ratings_for_store(
    store_id: int,
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination, stats = await rating_service.list_ratings_for_store(db, store_id, params)
    return {"ratings": rows, "pagination": pagination, "stats": stats}


@router.put("/{store_id}", response_model=RatingResponse)
async def update_rating(
    store_id: int,
    body: RatingUpdate,
    current_user: Principal = Depends(require_normal_user),
    db: AsyncSession = Depends(get_db),
):
    return await rating_service.update_rating(db, current_user, store_id, body)


@router.delete("/{store_id}", response_model=MessageResponse)
async def delete_rating(
    store_id: int,
    current_user: Principal = Depends(require_normal_user),
    db: AsyncSession = Depends(get_db),
):
    await rating_service.delete_rating(db, current_user, store_id)
    return MessageResponse(message="Rating deleted successfully")
