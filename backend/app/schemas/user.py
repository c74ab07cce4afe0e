"""
K12 Tutor - User Schemas
Pydantic schemas for registration, authentication and profiles
"""
import uuid
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.models.catalog import Subject
from app.models.user import UserRole
from app.schemas.common import UTCDateTime


# ============================================================================
# Base Schemas
# ============================================================================

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: Annotated[str, Field(min_length=1, max_length=100)]
    last_name: Annotated[str, Field(min_length=1, max_length=100)]


# ============================================================================
# Registration & Authentication
# ============================================================================

class UserCreate(UserBase):
    """
    Schema for self-registration.

    Only students and parents can sign up; teacher and admin accounts are
    provisioned out of band.
    """
    password: Annotated[str, Field(min_length=8, max_length=128)]
    role: UserRole = UserRole.STUDENT
    grade: Annotated[int, Field(ge=1, le=12)] | None = None
    subjects: list[Subject] | None = None
    parent_email: EmailStr | None = None

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isalpha() for c in v):
            raise ValueError("Password must contain at least one letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v

    @model_validator(mode="after")
    def validate_role_profile(self) -> "UserCreate":
        if self.role not in (UserRole.STUDENT, UserRole.PARENT):
            raise ValueError("Only student and parent accounts can self-register")
        if self.role == UserRole.STUDENT and self.grade is None:
            raise ValueError("Students must provide a grade")
        if self.role == UserRole.PARENT and self.parent_email:
            raise ValueError("Parent accounts cannot link a parent")
        return self


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for authentication token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600


# ============================================================================
# User Response Schemas
# ============================================================================

class UserResponse(UserBase):
    """Schema for user response (public data)."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role: UserRole
    grade: int | None = None
    subjects: list[str] | None = None
    parent_id: uuid.UUID | None = None
    is_active: bool
    created_at: UTCDateTime


class StudentSummary(BaseModel):
    """Minimal student identity embedded in reports."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    grade: int | None = None
