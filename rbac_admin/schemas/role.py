import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RoleCreate(BaseModel):
    name: str | None = Field(None, max_length=100)
    description: str | None = None
    is_active: bool = True


class RoleUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    name: str | None = Field(None, max_length=100)
    description: str | None = None
    is_active: bool | None = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class RoleSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    is_active: bool


class RolePermissionsRequest(BaseModel):
    permission_ids: list[uuid.UUID]


class RolePermissionsResult(BaseModel):
    role_id: uuid.UUID
    count: int
