"""User schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from store_rating.models.user import UserRole
from store_rating.schemas.common import Pagination


class UserBase(BaseModel):
    name: str = Field(..., min_length=20, max_length=60)
    email: EmailStr
    address: str = Field(..., max_length=400)


class UserRegister(UserBase):
    password: str = Field(..., min_length=8, max_length=16)


class UserCreate(UserRegister):
    role: UserRole = UserRole.NORMAL_USER


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=20, max_length=60)
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=400)
    role: UserRole | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    address: str
    role: UserRole
    created_at: datetime
    store_rating: float | None = None
    store_id: int | None = None


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class DashboardStats(BaseModel):
    total_users: int
    normal_users: int
    store_owners: int
    admin_users: int
    total_stores: int
    total_ratings: int
