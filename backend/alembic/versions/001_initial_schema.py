"""Initial database schema - users, stores, ratings

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(60), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("address", sa.String(400), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'normal_user'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("length(name) >= 20 AND length(name) <= 60", name="ck_users_name_length"),
        sa.CheckConstraint(
            "role IN ('system_admin', 'normal_user', 'store_owner')", name="ck_users_role"
        ),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    # --- Stores ---
    op.create_table(
        "stores",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(60), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("address", sa.String(400), nullable=False),
        sa.Column("owner_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("average_rating", sa.Numeric(3, 1), nullable=False, server_default=sa.text("0.0")),
        sa.Column("total_ratings", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("length(name) >= 20 AND length(name) <= 60", name="ck_stores_name_length"),
    )
    op.create_index("ix_stores_name", "stores", ["name"])
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"])

    # --- Ratings ---
    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("store_id", sa.Integer, sa.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "store_id", name="uq_ratings_user_store"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
    )
    op.create_index("ix_ratings_user_store", "ratings", ["user_id", "store_id"])
    op.create_index("ix_ratings_store_id", "ratings", ["store_id"])


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("stores")
    op.drop_table("users")
