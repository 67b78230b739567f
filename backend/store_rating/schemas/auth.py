"""Auth request/response schemas."""

from pydantic import BaseModel, EmailStr, Field

from store_rating.models.user import UserRole


# ── Login ──────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: UserRole


# ── Password change ────────────────────────────────
class PasswordChangeRequest(BaseModel):
    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=8, max_length=16)


# ── Principal ──────────────────────────────────────
class Principal(BaseModel):
    """Authenticated identity attached to a request."""

    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.SYSTEM_ADMIN
