"""Store model."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_rating.db.base import Base
from store_rating.models.mixins import IntegerPrimaryKeyMixin, TimestampMixin


class Store(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "stores"
    __table_args__ = (
        CheckConstraint("length(name) >= 20 AND length(name) <= 60", name="ck_stores_name_length"),
    )

    name: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(400), nullable=False)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    # Derived from ratings; written only by store_rating.db.aggregates
    average_rating: Mapped[float] = mapped_column(
        Numeric(3, 1, asdecimal=False), nullable=False, default=0.0, server_default="0.0"
    )
    total_ratings: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    # Relationships
    owner = relationship("User", back_populates="stores")
    ratings = relationship("Rating", back_populates="store", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Store {self.id}: {self.name}>"
