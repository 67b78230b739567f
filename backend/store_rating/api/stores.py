"""Store endpoints with role/ownership enforcement."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.api.params import list_params
from store_rating.core.deps import get_current_user, require_admin, require_store_owner
from store_rating.db.base import get_db
from store_rating.db.query import ListParams
from store_rating.schemas.auth import Principal
from store_rating.schemas.common import MessageResponse
from store_rating.schemas.rating import StoreRatingListResponse
from store_rating.schemas.store import StoreCreate, StoreListResponse, StoreResponse, StoreUpdate
from store_rating.services import stores as store_service

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("", response_model=StoreListResponse)
async def list_stores(
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List stores. Store owners only see their own store."""
    rows, pagination = await store_service.list_stores(db, current_user, params)
    return {"stores": rows, "pagination": pagination}


@router.get("/my-store", response_model=StoreResponse)
async def get_my_store(
    current_user: Principal = Depends(require_store_owner),
    db: AsyncSession = Depends(get_db),
):
    return await store_service.get_owned_store(db, current_user)


@router.get("/my-store/ratings", response_model=StoreRatingListResponse)
async def list_my_store_ratings(
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(require_store_owner),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await store_service.list_owned_store_ratings(db, current_user, params)
    return {"ratings": rows, "pagination": pagination}


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    body: StoreCreate,
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await store_service.create_store(db, current_user, body)


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(
    store_id: int,
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await store_service.get_store(db, current_user, store_id)


@router.put("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: int,
    body: StoreUpdate,
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins may update any store; store owners only their own."""
    return await store_service.update_store(db, current_user, store_id, body)


@router.delete("/{store_id}", response_model=MessageResponse)
async def delete_store(
    store_id: int,
    current_user: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await store_service.delete_store(db, current_user, store_id)
    return MessageResponse(message="Store deleted successfully")


@router.get("/{store_id}/ratings", response_model=StoreRatingListResponse)
async def list_store_ratings(
    store_id: int,
    params: ListParams = Depends(list_params),
    current_user: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await store_service.list_store_ratings(db, current_user, store_id, params)
    return {"ratings": rows, "pagination": pagination}
