"""Shared list-response pieces."""

from pydantic import BaseModel, ConfigDict, Field


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total: int
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class MessageResponse(BaseModel):
    message: str
