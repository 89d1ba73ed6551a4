"""
Default roles, permissions and role grants for a fresh database.

Seeding is idempotent: rows are inserted with ON CONFLICT DO NOTHING keyed by
their unique names, so running it again leaves existing rows (including any
edits an administrator made to them) untouched.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .auth.rbac import ADMIN_ROLE
from .crud._dialect import insert_for
from .crud.role import RoleRepository
from .crud.user import UserRepository
from .models.permission import Permission
from .models.role import Role
from .utils.security import DEFAULT_BCRYPT_ROUNDS, hash_password

logger = logging.getLogger("rbac_admin.bootstrap")

DEFAULT_ROLES = [
    {"name": ADMIN_ROLE, "description": "Administrator with full access"},
    {"name": "user", "description": "Standard user with limited access"},
    {"name": "moderator", "description": "Moderator with elevated permissions"},
]

DEFAULT_PERMISSIONS = [
    {"name": "user:create", "resource": "user", "action": "create", "description": "Create new users"},
    {"name": "user:read", "resource": "user", "action": "read", "description": "Read user information"},
    {"name": "user:update", "resource": "user", "action": "update", "description": "Update user information"},
    {"name": "user:delete", "resource": "user", "action": "delete", "description": "Delete users"},
    {"name": "role:create", "resource": "role", "action": "create", "description": "Create new roles"},
    {"name": "role:read", "resource": "role", "action": "read", "description": "Read role information"},
    {"name": "role:update", "resource": "role", "action": "update", "description": "Update role information"},
    {"name": "role:delete", "resource": "role", "action": "delete", "description": "Delete roles"},
    {"name": "dashboard:access", "resource": "dashboard", "action": "access", "description": "Access dashboard"},
    {"name": "dashboard:admin", "resource": "dashboard", "action": "admin", "description": "Admin dashboard access"},
]

# Admin gets every default permission.
ROLE_PERMISSION_GRANTS: dict[str, tuple[str, ...]] = {
    ADMIN_ROLE: tuple(permission["name"] for permission in DEFAULT_PERMISSIONS),
    "user": ("user:read", "user:update", "dashboard:access"),
    "moderator": ("user:read", "user:update", "role:read", "dashboard:access"),
}


@dataclass
class SeedReport:
    role_ids: dict[str, uuid.UUID] = field(default_factory=dict)
    permission_ids: dict[str, uuid.UUID] = field(default_factory=dict)
    grants_created: int = 0
    admin_user_id: uuid.UUID | None = None


async def _upsert_by_name(session: AsyncSession, model, rows: list[dict]) -> dict[str, uuid.UUID]:
    insert_fn = insert_for(session)
    stmt = insert_fn(model).values(
        [{"id": uuid.uuid4(), "is_active": True, **row} for row in rows]
    )
    stmt = stmt.on_conflict_do_nothing(index_elements=["name"])
    await session.execute(stmt)
    names = [row["name"] for row in rows]
    result = await session.execute(select(model.id, model.name).where(model.name.in_(names)))
    return {row.name: row.id for row in result}


async def seed_defaults(
    session: AsyncSession,
    *,
    admin_email: str | None = None,
    admin_password: str | None = None,
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> SeedReport:
    """Create the default role set, permission catalog and grants.

    When ``admin_email`` and ``admin_password`` are given, also make sure an
    account with that email exists and holds the admin role. An existing
    account keeps its current password.
    """
    report = SeedReport()
    role_repo = RoleRepository(session)

    try:
        report.role_ids = await _upsert_by_name(session, Role, DEFAULT_ROLES)
        report.permission_ids = await _upsert_by_name(session, Permission, DEFAULT_PERMISSIONS)

        for role_name, permission_names in ROLE_PERMISSION_GRANTS.items():
            report.grants_created += await role_repo.add_permissions(
                report.role_ids[role_name],
                [report.permission_ids[name] for name in permission_names],
            )

        if admin_email and admin_password:
            user_repo = UserRepository(session)
            admin = await user_repo.get_by_email(admin_email)
            if admin is None:
                admin = await user_repo.create(
                    email=admin_email,
                    password_hash=hash_password(admin_password, rounds=bcrypt_rounds),
                    name="Admin User",
                    email_verified=datetime.now(timezone.utc),
                )
                logger.info("Seeded admin account email=%s", admin_email)
            await role_repo.assign_to_user(admin.id, report.role_ids[ADMIN_ROLE])
            report.admin_user_id = admin.id

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Seed complete roles=%d permissions=%d grants_created=%d",
        len(report.role_ids),
        len(report.permission_ids),
        report.grants_created,
    )
    return report
