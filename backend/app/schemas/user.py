"""
Todo Cards Backend — User Request/Response Schemas
====================================================

What:  API contract for registration and login.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """Body of POST /user/register."""
    name: str = Field(min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(description="Login email; must not be registered yet")
    password: str = Field(min_length=8, max_length=128, description="Plain-text password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class UserResponse(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class LoginResponse(BaseModel):
    """Returned on successful login; `token` is sent back as a bearer token."""
    author_id: int = Field(description="Id of the logged-in user")
    token: str = Field(description="Session token for the Authorization header")
