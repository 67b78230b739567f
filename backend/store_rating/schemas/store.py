"""Store schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from store_rating.schemas.common import Pagination


class StoreCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=20, max_length=60)
    email: EmailStr
    address: str = Field(..., max_length=400)
    owner_id: int | None = Field(None, alias="ownerId", gt=0)


class StoreUpdate(BaseModel):
    name: str | None = Field(None, min_length=20, max_length=60)
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=400)


class StoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    address: str
    owner_id: int | None = None
    owner_name: str | None = None
    average_rating: float
    total_ratings: int
    created_at: datetime
    user_rating: int | None = None


class StoreListResponse(BaseModel):
    stores: list[StoreResponse]
    pagination: Pagination
