from .authorization_service import AuthorizationService
from .permission_service import PermissionAdminService
from .role_service import RoleAdminService
from .user_service import UserAdminService

__all__ = [
    "AuthorizationService",
    "PermissionAdminService",
    "RoleAdminService",
    "UserAdminService",
]
