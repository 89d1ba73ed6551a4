"""
Admin API endpoints for user accounts.

Every endpoint requires the admin role; the check happens in
UserAdminService before any store access.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ...dependencies import get_current_principal_id, get_user_admin_service
from ...schemas.user import UserCreate, UserPatch, UserResponse, UserUpdate
from ...services.admin import UserAdminService

router = APIRouter(prefix="/users", tags=["admin-users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
):
    users = await service.list_users(principal_id)
    return [UserResponse.from_user(user) for user in users]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
):
    user = await service.create_user(principal_id, payload)
    return UserResponse.from_user(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
):
    user = await service.get_user(principal_id, user_id)
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
):
    user = await service.update_user(principal_id, user_id, payload)
    return UserResponse.from_user(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def patch_user(
    user_id: UUID,
    payload: UserPatch,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Activate/deactivate a user and/or grant it a role."""
    user = await service.patch_user(principal_id, user_id, payload)
    return UserResponse.from_user(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
) -> Response:
    await service.delete_user(principal_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_user_role(
    user_id: UUID,
    role_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: UserAdminService = Depends(get_user_admin_service),
) -> Response:
    await service.unassign_role(principal_id, user_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
