"""
Role and permission resolution for a principal.

Resolution is recomputed from the store on every call. Nothing here caches
role or permission sets between requests.

Role activity is NOT taken into account: a principal linked to an inactive
role named "admin" still resolves as admin. This mirrors the behaviour the
admin console has always had and is kept until product decides otherwise.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from ..domain.ports.rbac import RbacReadPort

ADMIN_ROLE: Final[str] = "admin"


@dataclass(frozen=True)
class Resolution:
    role_names: frozenset[str]
    permission_names: frozenset[str]

    @property
    def is_admin(self) -> bool:
        return is_admin_role_set(self.role_names)


EMPTY_RESOLUTION: Final[Resolution] = Resolution(frozenset(), frozenset())


def is_admin_role_set(role_names: Iterable[str]) -> bool:
    # Exact, case-sensitive match on the role name.
    return ADMIN_ROLE in set(role_names)


async def resolve_role_names(port: RbacReadPort, principal_id: uuid.UUID) -> frozenset[str]:
    roles = await port.get_user_roles(principal_id)
    return frozenset(role.name for role in roles)


async def resolve(port: RbacReadPort, principal_id: uuid.UUID | None) -> Resolution:
    if principal_id is None:
        return EMPTY_RESOLUTION
    role_names = await resolve_role_names(port, principal_id)
    permissions = await port.get_user_permissions(principal_id)
    return Resolution(
        role_names=role_names,
        permission_names=frozenset(permission.name for permission in permissions),
    )
