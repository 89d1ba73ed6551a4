from __future__ import annotations

import uuid
from typing import Protocol


class RoleData(Protocol):
    id: uuid.UUID
    name: str
    is_active: bool


class PermissionData(Protocol):
    id: uuid.UUID
    name: str
    resource: str
    action: str
    is_active: bool


class RbacReadPort(Protocol):
    """Read side of the store consumed by role resolution."""

    async def get_user_roles(self, user_id: uuid.UUID) -> list[RoleData]:
        ...

    async def get_user_permissions(self, user_id: uuid.UUID) -> list[PermissionData]:
        ...

    async def has_capability(
        self, user_id: uuid.UUID, resource: str, action: str
    ) -> bool:
        ...
