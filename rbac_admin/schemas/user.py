import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .role import RoleSummary


class UserProfileFields(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    bio: str | None = None
    website: str | None = Field(None, max_length=255)
    social_links: dict[str, str] | None = None
    preferences: dict[str, Any] | None = None


class UserProfileResponse(UserProfileFields):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    email: str | None = Field(None, max_length=255)
    password: str | None = None
    name: str | None = Field(None, max_length=255)
    role_id: uuid.UUID | None = None
    profile: UserProfileFields | None = None


class UserUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied.

    ``role_id`` adds a role if the user does not hold it yet; existing
    roles are never removed here.
    """

    email: str | None = Field(None, max_length=255)
    name: str | None = Field(None, max_length=255)
    password: str | None = None
    profile: UserProfileFields | None = None
    role_id: uuid.UUID | None = None


class UserPatch(BaseModel):
    is_active: bool | None = None
    role_id: uuid.UUID | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str | None = None
    image: str | None = None
    is_active: bool
    email_verified: datetime | None = None
    created_at: datetime
    updated_at: datetime
    roles: list[RoleSummary] = Field(default_factory=list)
    profile: UserProfileResponse | None = None

    @classmethod
    def from_user(cls, user: Any) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            image=user.image,
            is_active=user.is_active,
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
            roles=[RoleSummary.model_validate(ur.role) for ur in user.user_roles],
            profile=(
                UserProfileResponse.model_validate(user.profile)
                if user.profile is not None
                else None
            ),
        )
