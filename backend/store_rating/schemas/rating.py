"""Rating schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from store_rating.schemas.common import Pagination


class RatingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_id: int = Field(..., alias="storeId", gt=0)
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=1000)


class RatingUpdate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=1000)


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    store_id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime


class StoreRatingEntry(BaseModel):
    """A rating as seen from the store side."""

    id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime
    user_name: str
    user_email: str | None = None


class UserRatingEntry(BaseModel):
    """A rating as seen from the rater's side."""

    id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime
    store_id: int
    store_name: str
    store_address: str | None = None
    store_average_rating: float | None = None


class StoreRatingListResponse(BaseModel):
    ratings: list[StoreRatingEntry]
    pagination: Pagination


class UserRatingListResponse(BaseModel):
    ratings: list[UserRatingEntry]
    pagination: Pagination


class StoreRatingSummary(BaseModel):
    total_ratings: int = Field(serialization_alias="totalRatings")
    average_rating: float = Field(serialization_alias="averageRating")


class StoreRatingsWithStats(StoreRatingListResponse):
    stats: StoreRatingSummary


class RatingDistributionEntry(BaseModel):
    rating: int
    count: int


class RatingStats(BaseModel):
    total_ratings: int
    overall_average_rating: float
    stores_with_ratings: int
    users_who_rated: int
    distribution: list[RatingDistributionEntry]
