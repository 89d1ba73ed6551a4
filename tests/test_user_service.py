import uuid

import pytest

from rbac_admin.crud.user import UserRepository
from rbac_admin.errors import (
    AuthError,
    ConflictError,
    CredentialError,
    CredentialFailure,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from rbac_admin.models import User, UserProfile, UserRole
from rbac_admin.schemas.user import (
    UserCreate,
    UserPatch,
    UserProfileFields,
    UserResponse,
    UserUpdate,
)
from rbac_admin.services.admin import UserAdminService
from rbac_admin.use_cases.auth.verify_credentials import verify_credentials
from rbac_admin.utils.security import verify_password
from tests.rbac_helpers import TEST_ROUNDS, count_rows, make_role, make_user


def _service(session) -> UserAdminService:
    return UserAdminService(session, bcrypt_rounds=TEST_ROUNDS)


async def _setup(session) -> tuple[uuid.UUID, uuid.UUID]:
    admin_role = await make_role(session, "admin")
    user_role = await make_role(session, "user")
    admin_id = await make_user(session, "admin@example.com", role_ids=(admin_role,))
    return admin_id, user_role


@pytest.mark.anyio
async def test_create_user_with_role_and_profile(session) -> None:
    admin_id, user_role = await _setup(session)

    user = await _service(session).create_user(
        admin_id,
        UserCreate(
            email="new@example.com",
            password="hunter22",
            name="New Person",
            role_id=user_role,
            profile=UserProfileFields(first_name="New", city="Oslo"),
        ),
    )

    assert user.email == "new@example.com"
    assert user.is_active is True
    assert user.email_verified is not None
    assert user.password_hash != "hunter22"
    assert verify_password("hunter22", user.password_hash)
    assert [link.role.name for link in user.user_roles] == ["user"]
    assert user.user_roles[0].granted_by == admin_id
    assert user.profile.first_name == "New"
    assert user.profile.city == "Oslo"

    response = UserResponse.from_user(user)
    assert [role.name for role in response.roles] == ["user"]


@pytest.mark.anyio
async def test_created_user_can_verify_credentials(session) -> None:
    admin_id, user_role = await _setup(session)
    user = await _service(session).create_user(
        admin_id, UserCreate(email="login@example.com", password="pw-123", role_id=user_role)
    )

    principal_id = await verify_credentials(UserRepository(session), "login@example.com", "pw-123")

    assert principal_id == user.id


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides",
    [
        {"role_id": None},
        {"email": None},
        {"email": ""},
        {"password": None},
        {"password": "  "},
    ],
)
async def test_create_user_missing_fields_writes_nothing(session, overrides) -> None:
    admin_id, user_role = await _setup(session)
    fields = {"email": "x@example.com", "password": "pw", "role_id": user_role, **overrides}

    with pytest.raises(ValidationError):
        await _service(session).create_user(admin_id, UserCreate(**fields))

    assert await count_rows(session, User) == 1


@pytest.mark.anyio
async def test_create_user_rejects_overlong_password(session) -> None:
    admin_id, user_role = await _setup(session)

    with pytest.raises(ValidationError):
        await _service(session).create_user(
            admin_id,
            UserCreate(email="long@example.com", password="x" * 73, role_id=user_role),
        )

    assert await count_rows(session, User) == 1


@pytest.mark.anyio
async def test_create_user_with_unknown_role_leaves_no_user(session) -> None:
    admin_id, _ = await _setup(session)

    with pytest.raises(NotFoundError):
        await _service(session).create_user(
            admin_id,
            UserCreate(email="orphan@example.com", password="pw", role_id=uuid.uuid4()),
        )

    assert await count_rows(session, User, User.email == "orphan@example.com") == 0


@pytest.mark.anyio
async def test_create_user_duplicate_email_conflicts(session) -> None:
    admin_id, user_role = await _setup(session)
    await make_user(session, "taken@example.com")

    with pytest.raises(ConflictError):
        await _service(session).create_user(
            admin_id, UserCreate(email="taken@example.com", password="pw", role_id=user_role)
        )

    assert await count_rows(session, User, User.email == "taken@example.com") == 1


@pytest.mark.anyio
async def test_email_is_not_case_folded(session) -> None:
    admin_id, user_role = await _setup(session)
    await make_user(session, "case@example.com")

    user = await _service(session).create_user(
        admin_id, UserCreate(email="Case@Example.com", password="pw", role_id=user_role)
    )

    assert user.email == "Case@Example.com"
    assert await count_rows(session, User) == 3


@pytest.mark.anyio
async def test_update_user_changes_only_supplied_fields(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com", password="old-pw")

    user = await _service(session).update_user(
        admin_id, user_id, UserUpdate(name="Renamed")
    )

    assert user.name == "Renamed"
    assert user.email == "u@example.com"
    assert verify_password("old-pw", user.password_hash)


@pytest.mark.anyio
async def test_update_user_rehashes_password(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com", password="old-pw")

    user = await _service(session).update_user(
        admin_id, user_id, UserUpdate(password="new-pw")
    )

    assert verify_password("new-pw", user.password_hash)
    assert not verify_password("old-pw", user.password_hash)


@pytest.mark.anyio
@pytest.mark.parametrize("field", ["email", "password"])
async def test_update_user_rejects_clearing_required_fields(session, field) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com")

    with pytest.raises(ValidationError):
        await _service(session).update_user(admin_id, user_id, UserUpdate(**{field: None}))


@pytest.mark.anyio
async def test_update_user_email_collision_conflicts(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com")

    with pytest.raises(ConflictError):
        await _service(session).update_user(
            admin_id, user_id, UserUpdate(email="admin@example.com")
        )

    assert await count_rows(session, User, User.email == "u@example.com") == 1


@pytest.mark.anyio
async def test_update_user_upserts_profile(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com")
    service = _service(session)

    await service.update_user(
        admin_id, user_id, UserUpdate(profile=UserProfileFields(first_name="Ada"))
    )
    user = await service.update_user(
        admin_id, user_id, UserUpdate(profile=UserProfileFields(last_name="Lovelace"))
    )

    assert user.profile.first_name == "Ada"
    assert user.profile.last_name == "Lovelace"
    assert await count_rows(session, UserProfile, UserProfile.user_id == user_id) == 1


@pytest.mark.anyio
async def test_update_user_role_grant_is_idempotent(session) -> None:
    admin_id, user_role = await _setup(session)
    moderator = await make_role(session, "moderator")
    user_id = await make_user(session, "u@example.com", role_ids=(user_role,))
    service = _service(session)

    await service.update_user(admin_id, user_id, UserUpdate(role_id=moderator))
    user = await service.update_user(admin_id, user_id, UserUpdate(role_id=moderator))

    assert sorted(link.role.name for link in user.user_roles) == ["moderator", "user"]
    assert await count_rows(session, UserRole, UserRole.user_id == user_id) == 2


@pytest.mark.anyio
async def test_update_missing_user_is_not_found(session) -> None:
    admin_id, _ = await _setup(session)

    with pytest.raises(NotFoundError):
        await _service(session).update_user(admin_id, uuid.uuid4(), UserUpdate(name="x"))


@pytest.mark.anyio
async def test_deactivated_user_cannot_verify(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com", password="pw")

    user = await _service(session).patch_user(admin_id, user_id, UserPatch(is_active=False))
    assert user.is_active is False

    with pytest.raises(CredentialError) as exc_info:
        await verify_credentials(UserRepository(session), "u@example.com", "pw")
    assert exc_info.value.reason is CredentialFailure.INACTIVE


@pytest.mark.anyio
async def test_patch_user_grants_role(session) -> None:
    admin_id, user_role = await _setup(session)
    user_id = await make_user(session, "u@example.com")

    user = await _service(session).patch_user(admin_id, user_id, UserPatch(role_id=user_role))

    assert [link.role.name for link in user.user_roles] == ["user"]
    assert user.is_active is True


@pytest.mark.anyio
async def test_patch_user_with_unknown_role_is_not_found(session) -> None:
    admin_id, _ = await _setup(session)
    user_id = await make_user(session, "u@example.com")

    with pytest.raises(NotFoundError):
        await _service(session).patch_user(
            admin_id, user_id, UserPatch(is_active=False, role_id=uuid.uuid4())
        )

    user = await UserRepository(session).get_detail(user_id)
    assert user.is_active is True


@pytest.mark.anyio
async def test_delete_user_cascades(session) -> None:
    admin_id, user_role = await _setup(session)
    created = await _service(session).create_user(
        admin_id,
        UserCreate(
            email="gone@example.com",
            password="pw",
            role_id=user_role,
            profile=UserProfileFields(bio="short lived"),
        ),
    )
    user_id = created.id

    await _service(session).delete_user(admin_id, user_id)

    assert await count_rows(session, User, User.id == user_id) == 0
    assert await count_rows(session, UserRole, UserRole.user_id == user_id) == 0
    assert await count_rows(session, UserProfile, UserProfile.user_id == user_id) == 0


@pytest.mark.anyio
async def test_delete_missing_user_is_not_found(session) -> None:
    admin_id, _ = await _setup(session)

    with pytest.raises(NotFoundError):
        await _service(session).delete_user(admin_id, uuid.uuid4())


@pytest.mark.anyio
async def test_unassign_role(session) -> None:
    admin_id, user_role = await _setup(session)
    user_id = await make_user(session, "u@example.com", role_ids=(user_role,))
    service = _service(session)

    assert await service.unassign_role(admin_id, user_id, user_role) is True
    assert await service.unassign_role(admin_id, user_id, user_role) is False
    assert await count_rows(session, UserRole, UserRole.user_id == user_id) == 0


@pytest.mark.anyio
async def test_list_and_get_users(session) -> None:
    admin_id, user_role = await _setup(session)
    user_id = await make_user(session, "u@example.com", role_ids=(user_role,))
    service = _service(session)

    users = await service.list_users(admin_id)
    user = await service.get_user(admin_id, user_id)

    assert {u.email for u in users} == {"admin@example.com", "u@example.com"}
    assert user.email == "u@example.com"
    assert [link.role.name for link in user.user_roles] == ["user"]
    with pytest.raises(NotFoundError):
        await service.get_user(admin_id, uuid.uuid4())


@pytest.mark.anyio
async def test_non_admin_is_forbidden(session) -> None:
    _, user_role = await _setup(session)
    user_id = await make_user(session, "a@x.com", role_ids=(user_role,))
    service = _service(session)

    with pytest.raises(PermissionError):
        await service.list_users(user_id)
    with pytest.raises(PermissionError):
        await service.create_user(
            user_id, UserCreate(email="b@x.com", password="pw", role_id=user_role)
        )

    assert await count_rows(session, User, User.email == "b@x.com") == 0


@pytest.mark.anyio
async def test_anonymous_is_unauthenticated(session) -> None:
    service = _service(session)

    with pytest.raises(AuthError):
        await service.list_users(None)
    with pytest.raises(AuthError):
        await service.delete_user(None, uuid.uuid4())
