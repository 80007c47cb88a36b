"""Auth schemas for account and token endpoints."""

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=128)
    nickname: str = Field(..., min_length=1, max_length=50)

    @field_validator("email", "nickname", mode="before")
    @classmethod
    def strip_whitespace(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: int
    email: str
    nickname: str

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for a freshly issued token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
