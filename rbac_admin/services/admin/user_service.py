import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.role import RoleRepository
from ...crud.user import UserRepository
from ...errors import NotFoundError, ValidationError
from ...models.user import User
from ...schemas.user import UserCreate, UserPatch, UserUpdate
from ...utils.security import (
    DEFAULT_BCRYPT_ROUNDS,
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
)
from ._base import AdminService, require_fields, supplied_changes
from ._transaction import store_transaction
from .authorization_service import AuthorizationService

logger = logging.getLogger("rbac_admin.admin")


class UserAdminService(AdminService):
    def __init__(
        self,
        session: AsyncSession,
        authorization: AuthorizationService | None = None,
        *,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        super().__init__(session, authorization)
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.bcrypt_rounds = bcrypt_rounds

    async def list_users(self, principal_id: uuid.UUID | None) -> list[User]:
        await self._authorize(principal_id, "user.list")
        return await self.user_repo.list_all()

    async def get_user(self, principal_id: uuid.UUID | None, user_id: uuid.UUID) -> User:
        await self._authorize(principal_id, "user.read")
        return await self._get_detail(user_id)

    async def create_user(self, principal_id: uuid.UUID | None, payload: UserCreate) -> User:
        """Create a user together with its first role.

        The user row, optional profile and role link are written in one
        transaction; if any of them fails nothing is kept.
        """
        actor_id = await self._authorize(principal_id, "user.create")
        require_fields(payload, "email", "password", "role_id")
        self._check_password(payload.password)

        async with store_transaction(self.session, "user.create"):
            await self._get_role(payload.role_id)
            user = await self.user_repo.create(
                email=payload.email,
                password_hash=self._hash(payload.password),
                name=payload.name,
                email_verified=datetime.now(timezone.utc),
            )
            if payload.profile is not None:
                await self.user_repo.upsert_profile(
                    user.id, payload.profile.model_dump(exclude_unset=True)
                )
            await self.role_repo.assign_to_user(user.id, payload.role_id, granted_by=actor_id)
            created = await self._get_detail(user.id)

        logger.info("User created user=%s role=%s by=%s", created.id, payload.role_id, actor_id)
        return created

    async def update_user(
        self, principal_id: uuid.UUID | None, user_id: uuid.UUID, payload: UserUpdate
    ) -> User:
        actor_id = await self._authorize(principal_id, "user.update")
        changes = supplied_changes(payload, non_nullable=("email", "password"))
        changes.pop("profile", None)
        role_id = changes.pop("role_id", None)
        if "password" in changes:
            password = changes.pop("password")
            self._check_password(password)
            changes["password_hash"] = self._hash(password)

        async with store_transaction(self.session, "user.update"):
            user = await self.user_repo.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User not found", details={"user_id": str(user_id)})
            if changes:
                await self.user_repo.update(user, changes)
            if payload.profile is not None:
                await self.user_repo.upsert_profile(
                    user_id, payload.profile.model_dump(exclude_unset=True)
                )
            if role_id is not None:
                await self._grant_role(user_id, role_id, actor_id)
            updated = await self._get_detail(user_id)

        logger.info(
            "User updated user=%s fields=%s by=%s",
            user_id,
            sorted(payload.model_fields_set),
            actor_id,
        )
        return updated

    async def patch_user(
        self, principal_id: uuid.UUID | None, user_id: uuid.UUID, payload: UserPatch
    ) -> User:
        """Toggle activation and/or grant a role in one call."""
        actor_id = await self._authorize(principal_id, "user.patch")
        changes = supplied_changes(payload, non_nullable=("is_active",))

        async with store_transaction(self.session, "user.patch"):
            user = await self.user_repo.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User not found", details={"user_id": str(user_id)})
            if "is_active" in changes:
                await self.user_repo.update(user, {"is_active": changes["is_active"]})
            if changes.get("role_id") is not None:
                await self._grant_role(user_id, changes["role_id"], actor_id)
            patched = await self._get_detail(user_id)

        logger.info("User patched user=%s changes=%s by=%s", user_id, sorted(changes), actor_id)
        return patched

    async def delete_user(self, principal_id: uuid.UUID | None, user_id: uuid.UUID) -> None:
        actor_id = await self._authorize(principal_id, "user.delete")
        async with store_transaction(self.session, "user.delete"):
            if not await self.user_repo.delete(user_id):
                raise NotFoundError("User not found", details={"user_id": str(user_id)})
        logger.info("User deleted user=%s by=%s", user_id, actor_id)

    async def unassign_role(
        self, principal_id: uuid.UUID | None, user_id: uuid.UUID, role_id: uuid.UUID
    ) -> bool:
        actor_id = await self._authorize(principal_id, "user.unassign_role")
        async with store_transaction(self.session, "user.unassign_role"):
            removed = await self.role_repo.remove_from_user(user_id, role_id)
        logger.info(
            "Role unassigned user=%s role=%s removed=%s by=%s", user_id, role_id, removed, actor_id
        )
        return removed

    async def _get_detail(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_detail(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": str(user_id)})
        return user

    async def _get_role(self, role_id: uuid.UUID):
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found", details={"role_id": str(role_id)})
        return role

    async def _grant_role(self, user_id: uuid.UUID, role_id: uuid.UUID, actor_id: uuid.UUID) -> None:
        await self._get_role(role_id)
        await self.role_repo.assign_to_user(user_id, role_id, granted_by=actor_id)

    @staticmethod
    def _check_password(password: str) -> None:
        if password_too_long(password):
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                details={"fields": ["password"]},
            )

    def _hash(self, password: str) -> str:
        return hash_password(password, rounds=self.bcrypt_rounds)
