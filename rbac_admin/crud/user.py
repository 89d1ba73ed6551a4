import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.user import User, UserProfile
from ..models.user_role import UserRole


def _with_relations():
    return (
        selectinload(User.user_roles).selectinload(UserRole.role),
        selectinload(User.profile),
    )


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        email_verified: datetime | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            name=name,
            email_verified=email_verified,
            is_active=is_active,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_detail(self, user_id: uuid.UUID) -> User | None:
        result = await self.session.execute(
            select(User)
            .where(User.id == user_id)
            .options(*_with_relations())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[User]:
        result = await self.session.execute(
            select(User)
            .options(*_with_relations())
            .order_by(User.created_at, User.email)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        await self.session.flush()
        return user

    async def upsert_profile(self, user_id: uuid.UUID, fields: dict[str, Any]) -> UserProfile:
        result = await self.session.execute(
            select(UserProfile).where(UserProfile.user_id == user_id)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            profile = UserProfile(user_id=user_id, **fields)
            self.session.add(profile)
        else:
            for field, value in fields.items():
                setattr(profile, field, value)
        await self.session.flush()
        return profile

    async def delete(self, user_id: uuid.UUID) -> bool:
        # Profile and UserRole rows go with it via ON DELETE CASCADE.
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0
