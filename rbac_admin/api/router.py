from fastapi import APIRouter

from . import auth
from .admin import permissions as admin_permissions
from .admin import roles as admin_roles
from .admin import users as admin_users

router = APIRouter(prefix="/api/v1")

_auth_routers = [
    auth.router,
]

_admin_routers = [
    admin_users.router,
    admin_roles.router,
    admin_permissions.router,
]

for _router in [*_auth_routers, *_admin_routers]:
    router.include_router(_router)
