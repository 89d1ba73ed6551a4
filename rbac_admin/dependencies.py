import logging
import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .crud.user import UserRepository
from .database import get_session
from .domain.ports.user import UserPort
from .services.admin import (
    AuthorizationService,
    PermissionAdminService,
    RoleAdminService,
    UserAdminService,
)

logger = logging.getLogger("rbac_admin.auth")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_current_principal_id(request: Request) -> uuid.UUID | None:
    """Principal id established by the upstream session layer.

    Returns None when the request carries no principal, which the
    authorization engine turns into an authentication error.
    """
    raw = request.headers.get(get_settings().principal_header)
    if raw is None or not raw.strip():
        return None
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed principal id path=%s", request.url.path)
        return None


def get_user_port(db: AsyncSession = Depends(get_db)) -> UserPort:
    return UserRepository(db)


def get_authorization_service(db: AsyncSession = Depends(get_db)) -> AuthorizationService:
    return AuthorizationService(db)


def get_user_admin_service(db: AsyncSession = Depends(get_db)) -> UserAdminService:
    return UserAdminService(db, bcrypt_rounds=get_settings().bcrypt_rounds)


def get_role_admin_service(db: AsyncSession = Depends(get_db)) -> RoleAdminService:
    return RoleAdminService(db)


def get_permission_admin_service(db: AsyncSession = Depends(get_db)) -> PermissionAdminService:
    return PermissionAdminService(db)
