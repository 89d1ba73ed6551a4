import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from ...auth import rbac
from ...crud.rbac import RbacReadRepository
from ...domain.ports.rbac import RbacReadPort
from ...errors import AuthError, PermissionError

logger = logging.getLogger("rbac_admin.authz")


class AuthorizationService:
    """Answers "is this principal an admin" and "does it hold capability X".

    Every check re-reads the store. The principal id is always passed in
    explicitly; there is no ambient "current user".
    """

    def __init__(self, session: AsyncSession, rbac_port: RbacReadPort | None = None):
        self.session = session
        self.rbac_port = rbac_port or RbacReadRepository(session)

    async def resolve(self, principal_id: uuid.UUID | None) -> rbac.Resolution:
        return await rbac.resolve(self.rbac_port, principal_id)

    async def is_admin(self, principal_id: uuid.UUID | None) -> bool:
        if principal_id is None:
            return False
        role_names = await rbac.resolve_role_names(self.rbac_port, principal_id)
        return rbac.is_admin_role_set(role_names)

    async def has_capability(
        self, principal_id: uuid.UUID | None, resource: str, action: str
    ) -> bool:
        """True iff one of the principal's roles links to an active
        permission with exactly this (resource, action)."""
        if principal_id is None:
            return False
        return await self.rbac_port.has_capability(principal_id, resource, action)

    async def require_admin(self, principal_id: uuid.UUID | None, operation: str) -> uuid.UUID:
        """Gate for every admin console operation.

        Raises:
            AuthError: no principal on the request
            PermissionError: principal is not an admin
        """
        if principal_id is None:
            logger.warning("Unauthenticated request denied operation=%s", operation)
            raise AuthError()
        if not await self.is_admin(principal_id):
            logger.warning(
                "Admin role required principal=%s operation=%s", principal_id, operation
            )
            raise PermissionError(f"Admin role required for {operation}")
        return principal_id

    async def require_capability(
        self, principal_id: uuid.UUID | None, resource: str, action: str
    ) -> uuid.UUID:
        if principal_id is None:
            logger.warning(
                "Unauthenticated request denied capability=%s:%s", resource, action
            )
            raise AuthError()
        if not await self.has_capability(principal_id, resource, action):
            logger.warning(
                "Capability missing principal=%s capability=%s:%s",
                principal_id,
                resource,
                action,
            )
            raise PermissionError(f"Permission denied: {resource}:{action} required")
        return principal_id
