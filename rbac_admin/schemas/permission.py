import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PermissionCreate(BaseModel):
    name: str | None = Field(None, max_length=100)
    resource: str | None = Field(None, max_length=100)
    action: str | None = Field(None, max_length=100)
    description: str | None = None
    is_active: bool = True


class PermissionUpdate(BaseModel):
    name: str | None = Field(None, max_length=100)
    resource: str | None = Field(None, max_length=100)
    action: str | None = Field(None, max_length=100)
    description: str | None = None
    is_active: bool | None = None


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    resource: str
    action: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
