import logging
import uuid

from ...crud.permission import PermissionRepository
from ...errors import NotFoundError
from ...models.permission import Permission
from ...schemas.permission import PermissionCreate, PermissionUpdate
from ._base import AdminService, require_fields, supplied_changes
from ._transaction import store_transaction

logger = logging.getLogger("rbac_admin.admin")


class PermissionAdminService(AdminService):
    """Permission rows are managed here as data.

    They are not what gates this console: every operation only requires the
    admin role.
    """

    def __init__(self, session, authorization=None):
        super().__init__(session, authorization)
        self.permission_repo = PermissionRepository(session)

    async def list_permissions(self, principal_id: uuid.UUID | None) -> list[Permission]:
        await self._authorize(principal_id, "permission.list")
        return await self.permission_repo.list_all()

    async def get_permission(
        self, principal_id: uuid.UUID | None, permission_id: uuid.UUID
    ) -> Permission:
        await self._authorize(principal_id, "permission.read")
        return await self._get_permission(permission_id)

    async def create_permission(
        self, principal_id: uuid.UUID | None, payload: PermissionCreate
    ) -> Permission:
        actor_id = await self._authorize(principal_id, "permission.create")
        require_fields(payload, "name", "resource", "action")

        async with store_transaction(self.session, "permission.create"):
            permission = await self.permission_repo.create(
                name=payload.name,
                resource=payload.resource,
                action=payload.action,
                description=payload.description,
                is_active=payload.is_active,
            )

        logger.info(
            "Permission created permission=%s name=%s by=%s",
            permission.id,
            permission.name,
            actor_id,
        )
        return permission

    async def update_permission(
        self,
        principal_id: uuid.UUID | None,
        permission_id: uuid.UUID,
        payload: PermissionUpdate,
    ) -> Permission:
        actor_id = await self._authorize(principal_id, "permission.update")
        changes = supplied_changes(
            payload, non_nullable=("name", "resource", "action", "is_active")
        )

        async with store_transaction(self.session, "permission.update"):
            permission = await self._get_permission(permission_id)
            if changes:
                permission = await self.permission_repo.update(permission, changes)

        logger.info(
            "Permission updated permission=%s fields=%s by=%s",
            permission_id,
            sorted(changes),
            actor_id,
        )
        return permission

    async def delete_permission(
        self, principal_id: uuid.UUID | None, permission_id: uuid.UUID
    ) -> None:
        actor_id = await self._authorize(principal_id, "permission.delete")
        async with store_transaction(self.session, "permission.delete"):
            if not await self.permission_repo.delete(permission_id):
                raise NotFoundError(
                    "Permission not found", details={"permission_id": str(permission_id)}
                )
        logger.info("Permission deleted permission=%s by=%s", permission_id, actor_id)

    async def _get_permission(self, permission_id: uuid.UUID) -> Permission:
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise NotFoundError(
                "Permission not found", details={"permission_id": str(permission_id)}
            )
        return permission
