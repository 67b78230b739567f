"""User model."""

import enum

from sqlalchemy import CheckConstraint, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_rating.db.base import Base
from store_rating.models.mixins import IntegerPrimaryKeyMixin, TimestampMixin


class UserRole(str, enum.Enum):
    SYSTEM_ADMIN = "system_admin"
    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"


class User(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("length(name) >= 20 AND length(name) <= 60", name="ck_users_name_length"),
    )

    name: Mapped[str] = mapped_column(String(60), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(400), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.NORMAL_USER,
        index=True,
    )

    # Relationships
    stores = relationship("Store", back_populates="owner", passive_deletes=True)
    ratings = relationship("Rating", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
