from .user import UserData, UserPort
from .rbac import PermissionData, RbacReadPort, RoleData

__all__ = [
    "PermissionData",
    "RbacReadPort",
    "RoleData",
    "UserData",
    "UserPort",
]
