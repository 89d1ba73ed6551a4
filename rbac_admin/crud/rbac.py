import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.permission import Permission
from ..models.role import Role
from ..models.role_permission import RolePermission
from ..models.user_role import UserRole


class RbacReadRepository:
    """Role and capability lookups for a principal.

    Role activity is deliberately not filtered: a user linked to an inactive
    role still holds it. Permission activity is filtered.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_roles(self, user_id: uuid.UUID) -> list[Role]:
        result = await self.session.execute(
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list(result.scalars().unique().all())

    async def get_user_permissions(self, user_id: uuid.UUID) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
            .where(Permission.is_active.is_(True))
            .distinct()
        )
        return list(result.scalars().all())

    async def has_capability(self, user_id: uuid.UUID, resource: str, action: str) -> bool:
        result = await self.session.execute(
            select(Permission.id)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
            .where(Permission.resource == resource, Permission.action == action)
            .where(Permission.is_active.is_(True))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
