import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ._dialect import insert_for
from ..models.role import Role
from ..models.role_permission import RolePermission
from ..models.user_role import UserRole


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, description: str | None = None, is_active: bool = True) -> Role:
        role = Role(
            name=name,
            description=description,
            is_active=is_active,
        )
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: uuid.UUID) -> Role | None:
        return await self.session.get(Role, role_id)

    async def list_all(self) -> list[Role]:
        result = await self.session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def update(self, role: Role, changes: dict[str, Any]) -> Role:
        for field, value in changes.items():
            setattr(role, field, value)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def delete(self, role_id: uuid.UUID) -> bool:
        # UserRole and RolePermission rows go with it via ON DELETE CASCADE.
        result = await self.session.execute(delete(Role).where(Role.id == role_id))
        return result.rowcount > 0

    async def add_permissions(
        self, role_id: uuid.UUID, permission_ids: Iterable[uuid.UUID]
    ) -> int:
        rows = [
            {"id": uuid.uuid4(), "role_id": role_id, "permission_id": permission_id}
            for permission_id in dict.fromkeys(permission_ids)
        ]
        if not rows:
            return 0
        insert_fn = insert_for(self.session)
        stmt = insert_fn(RolePermission).values(rows)
        stmt = stmt.on_conflict_do_nothing(index_elements=["role_id", "permission_id"])
        result = await self.session.execute(stmt)
        return max(result.rowcount, 0)

    async def remove_permissions(
        self, role_id: uuid.UUID, permission_ids: Iterable[uuid.UUID]
    ) -> int:
        ids = list(dict.fromkeys(permission_ids))
        if not ids:
            return 0
        result = await self.session.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id.in_(ids),
            )
        )
        return result.rowcount

    async def assign_to_user(
        self, user_id: uuid.UUID, role_id: uuid.UUID, granted_by: uuid.UUID | None = None
    ) -> bool:
        insert_fn = insert_for(self.session)
        stmt = insert_fn(UserRole).values(
            id=uuid.uuid4(), user_id=user_id, role_id=role_id, granted_by=granted_by
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "role_id"])
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def remove_from_user(self, user_id: uuid.UUID, role_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            delete(UserRole).where(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id
            )
        )
        return result.rowcount > 0
