from .base import Base
from .user import User, UserProfile
from .role import Role
from .permission import Permission
from .role_permission import RolePermission
from .user_role import UserRole

__all__ = [
    "Base",
    "User",
    "UserProfile",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
]
