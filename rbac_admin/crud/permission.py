import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.permission import Permission
from ..models.role_permission import RolePermission


class PermissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        name: str,
        resource: str,
        action: str,
        description: str | None = None,
        is_active: bool = True,
    ) -> Permission:
        permission = Permission(
            name=name,
            resource=resource,
            action=action,
            description=description,
            is_active=is_active,
        )
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def get_by_id(self, permission_id: uuid.UUID) -> Permission | None:
        return await self.session.get(Permission, permission_id)

    async def list_all(self) -> list[Permission]:
        result = await self.session.execute(
            select(Permission).order_by(Permission.resource, Permission.action)
        )
        return list(result.scalars().all())

    async def find_missing_ids(self, permission_ids: list[uuid.UUID]) -> list[uuid.UUID]:
        if not permission_ids:
            return []
        result = await self.session.execute(
            select(Permission.id).where(Permission.id.in_(permission_ids))
        )
        found = set(result.scalars().all())
        return [pid for pid in permission_ids if pid not in found]

    async def update(self, permission: Permission, changes: dict[str, Any]) -> Permission:
        for field, value in changes.items():
            setattr(permission, field, value)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def delete(self, permission_id: uuid.UUID) -> bool:
        # RolePermission rows go with it via ON DELETE CASCADE.
        result = await self.session.execute(
            delete(Permission).where(Permission.id == permission_id)
        )
        return result.rowcount > 0

    async def get_role_permissions(self, role_id: uuid.UUID) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.name)
        )
        return list(result.scalars().all())
