import logging
import uuid
from collections.abc import Sequence

from ...crud.permission import PermissionRepository
from ...crud.role import RoleRepository
from ...errors import NotFoundError, ValidationError
from ...models.permission import Permission
from ...models.role import Role
from ...schemas.role import RoleCreate, RoleUpdate
from ._base import AdminService, require_fields, supplied_changes
from ._transaction import store_transaction

logger = logging.getLogger("rbac_admin.admin")


class RoleAdminService(AdminService):
    """Role management and role <-> permission assignment."""

    def __init__(self, session, authorization=None):
        super().__init__(session, authorization)
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)

    async def list_roles(self, principal_id: uuid.UUID | None) -> list[Role]:
        await self._authorize(principal_id, "role.list")
        return await self.role_repo.list_all()

    async def get_role(self, principal_id: uuid.UUID | None, role_id: uuid.UUID) -> Role:
        await self._authorize(principal_id, "role.read")
        return await self._get_role(role_id)

    async def create_role(self, principal_id: uuid.UUID | None, payload: RoleCreate) -> Role:
        actor_id = await self._authorize(principal_id, "role.create")
        require_fields(payload, "name")

        async with store_transaction(self.session, "role.create"):
            role = await self.role_repo.create(
                name=payload.name,
                description=payload.description,
                is_active=payload.is_active,
            )

        logger.info("Role created role=%s name=%s by=%s", role.id, role.name, actor_id)
        return role

    async def update_role(
        self, principal_id: uuid.UUID | None, role_id: uuid.UUID, payload: RoleUpdate
    ) -> Role:
        actor_id = await self._authorize(principal_id, "role.update")
        changes = supplied_changes(payload, non_nullable=("name", "is_active"))

        async with store_transaction(self.session, "role.update"):
            role = await self._get_role(role_id)
            if changes:
                role = await self.role_repo.update(role, changes)

        logger.info("Role updated role=%s fields=%s by=%s", role_id, sorted(changes), actor_id)
        return role

    async def delete_role(self, principal_id: uuid.UUID | None, role_id: uuid.UUID) -> None:
        """Hard delete. The store drops the role's user and permission links."""
        actor_id = await self._authorize(principal_id, "role.delete")
        async with store_transaction(self.session, "role.delete"):
            if not await self.role_repo.delete(role_id):
                raise NotFoundError("Role not found", details={"role_id": str(role_id)})
        logger.info("Role deleted role=%s by=%s", role_id, actor_id)

    async def list_role_permissions(
        self, principal_id: uuid.UUID | None, role_id: uuid.UUID
    ) -> list[Permission]:
        await self._authorize(principal_id, "role.permissions.list")
        await self._get_role(role_id)
        return await self.permission_repo.get_role_permissions(role_id)

    async def assign_permissions(
        self,
        principal_id: uuid.UUID | None,
        role_id: uuid.UUID,
        permission_ids: Sequence[uuid.UUID] | None,
    ) -> int:
        """Link permissions to a role, skipping links that already exist.

        Returns the number of links actually created.
        """
        actor_id = await self._authorize(principal_id, "role.permissions.assign")
        ids = self._validate_ids(permission_ids)

        async with store_transaction(self.session, "role.permissions.assign"):
            await self._get_role(role_id)
            missing = await self.permission_repo.find_missing_ids(ids)
            if missing:
                raise NotFoundError(
                    "Permission not found",
                    details={"permission_ids": [str(pid) for pid in missing]},
                )
            created = await self.role_repo.add_permissions(role_id, ids)

        logger.info(
            "Permissions assigned role=%s requested=%d created=%d by=%s",
            role_id,
            len(ids),
            created,
            actor_id,
        )
        return created

    async def unassign_permissions(
        self,
        principal_id: uuid.UUID | None,
        role_id: uuid.UUID,
        permission_ids: Sequence[uuid.UUID] | None,
    ) -> int:
        """Remove role -> permission links. Links that do not exist are ignored.

        Returns the number of links actually removed.
        """
        actor_id = await self._authorize(principal_id, "role.permissions.unassign")
        ids = self._validate_ids(permission_ids)

        async with store_transaction(self.session, "role.permissions.unassign"):
            await self._get_role(role_id)
            removed = await self.role_repo.remove_permissions(role_id, ids)

        logger.info(
            "Permissions unassigned role=%s requested=%d removed=%d by=%s",
            role_id,
            len(ids),
            removed,
            actor_id,
        )
        return removed

    async def _get_role(self, role_id: uuid.UUID) -> Role:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found", details={"role_id": str(role_id)})
        return role

    @staticmethod
    def _validate_ids(permission_ids: Sequence[uuid.UUID] | None) -> list[uuid.UUID]:
        if permission_ids is None or isinstance(permission_ids, (str, bytes)):
            raise ValidationError(
                "permission_ids must be a list", details={"fields": ["permission_ids"]}
            )
        ids = list(dict.fromkeys(permission_ids))
        if not all(isinstance(pid, uuid.UUID) for pid in ids):
            raise ValidationError(
                "permission_ids must contain UUIDs", details={"fields": ["permission_ids"]}
            )
        return ids
