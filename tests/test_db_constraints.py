"""
UNIQUE and ON DELETE constraints on the RBAC tables.

These run against SQLite with foreign keys switched on, the same way the
application engine is configured for it.
"""
import uuid

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from rbac_admin.models import Permission, Role, RolePermission, User, UserRole


def _user(email: str) -> User:
    return User(id=uuid.uuid4(), email=email, password_hash="hash123")


class TestUserRoleUniqueConstraint:
    @pytest.mark.anyio
    async def test_duplicate_role_assignment_prevented(self, session):
        user = _user("test@example.com")
        role = Role(id=uuid.uuid4(), name="test_role")
        session.add_all([user, role])
        await session.commit()

        session.add(UserRole(id=uuid.uuid4(), user_id=user.id, role_id=role.id))
        await session.commit()

        session.add(UserRole(id=uuid.uuid4(), user_id=user.id, role_id=role.id))
        with pytest.raises(IntegrityError) as exc_info:
            await session.commit()

        assert "unique" in str(exc_info.value).lower()
        await session.rollback()

    @pytest.mark.anyio
    async def test_same_role_different_users_allowed(self, session):
        user1 = _user("user1@example.com")
        user2 = _user("user2@example.com")
        role = Role(id=uuid.uuid4(), name="admin")
        session.add_all([user1, user2, role])
        await session.commit()

        session.add_all(
            [
                UserRole(id=uuid.uuid4(), user_id=user1.id, role_id=role.id),
                UserRole(id=uuid.uuid4(), user_id=user2.id, role_id=role.id),
            ]
        )
        await session.commit()

        result = await session.execute(select(UserRole).where(UserRole.role_id == role.id))
        assert len(result.scalars().all()) == 2


class TestRolePermissionUniqueConstraint:
    @pytest.mark.anyio
    async def test_duplicate_permission_assignment_prevented(self, session):
        role = Role(id=uuid.uuid4(), name="test_role")
        permission = Permission(
            id=uuid.uuid4(), name="test:read", resource="test", action="read"
        )
        session.add_all([role, permission])
        await session.commit()

        session.add(RolePermission(id=uuid.uuid4(), role_id=role.id, permission_id=permission.id))
        await session.commit()

        session.add(RolePermission(id=uuid.uuid4(), role_id=role.id, permission_id=permission.id))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()


class TestUniqueNames:
    @pytest.mark.anyio
    async def test_role_name_unique(self, session):
        session.add(Role(name="editor"))
        await session.commit()

        session.add(Role(name="editor"))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()

    @pytest.mark.anyio
    async def test_user_email_unique(self, session):
        session.add(_user("dup@example.com"))
        await session.commit()

        session.add(_user("dup@example.com"))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()


class TestCascades:
    @pytest.mark.anyio
    async def test_deleting_granter_keeps_assignment(self, session):
        granter = _user("granter@example.com")
        grantee = _user("grantee@example.com")
        role = Role(id=uuid.uuid4(), name="user")
        session.add_all([granter, grantee, role])
        await session.commit()
        link_id = uuid.uuid4()
        session.add(
            UserRole(id=link_id, user_id=grantee.id, role_id=role.id, granted_by=granter.id)
        )
        await session.commit()

        await session.execute(delete(User).where(User.id == granter.id))
        await session.commit()

        result = await session.execute(
            select(UserRole.granted_by).where(UserRole.id == link_id)
        )
        assert result.scalar_one() is None

    @pytest.mark.anyio
    async def test_deleting_permission_removes_role_links(self, session):
        role = Role(id=uuid.uuid4(), name="user")
        permission = Permission(
            id=uuid.uuid4(), name="test:read", resource="test", action="read"
        )
        session.add_all([role, permission])
        await session.commit()
        session.add(RolePermission(role_id=role.id, permission_id=permission.id))
        await session.commit()

        await session.execute(delete(Permission).where(Permission.id == permission.id))
        await session.commit()

        result = await session.execute(
            select(RolePermission).where(RolePermission.role_id == role.id)
        )
        assert result.scalars().all() == []
