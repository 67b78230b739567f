"""Rating model - one per (user, store) pair."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_rating.db.base import Base
from store_rating.models.mixins import IntegerPrimaryKeyMixin, TimestampMixin


class Rating(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
        Index("ix_ratings_user_store", "user_id", "store_id"),
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    store_id: Mapped[int] = mapped_column(
        ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user = relationship("User", back_populates="ratings")
    store = relationship("Store", back_populates="ratings")

    def __repr__(self) -> str:
        return f"<Rating user={self.user_id} store={self.store_id}: {self.rating}>"
