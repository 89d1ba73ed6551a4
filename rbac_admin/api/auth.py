import uuid

from fastapi import APIRouter, Depends

from ..dependencies import (
    get_authorization_service,
    get_current_principal_id,
    get_user_port,
)
from ..domain.ports.user import UserPort
from ..errors import AuthError
from ..schemas.auth import CredentialsRequest, PrincipalResponse, ResolutionResponse
from ..services.admin import AuthorizationService
from ..use_cases.auth.verify_credentials import verify_credentials

router = APIRouter(tags=["auth"])


@router.post("/auth/verify", response_model=PrincipalResponse)
async def verify(
    payload: CredentialsRequest,
    user_port: UserPort = Depends(get_user_port),
) -> PrincipalResponse:
    """Check credentials for the session layer. No token is issued here."""
    principal_id = await verify_credentials(user_port, payload.email, payload.password)
    return PrincipalResponse(principal_id=principal_id)


@router.get("/me/roles", response_model=ResolutionResponse)
async def my_roles(
    principal_id: uuid.UUID | None = Depends(get_current_principal_id),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> ResolutionResponse:
    if principal_id is None:
        raise AuthError()
    resolution = await authorization.resolve(principal_id)
    return ResolutionResponse(
        principal_id=principal_id,
        roles=sorted(resolution.role_names),
        permissions=sorted(resolution.permission_names),
        is_admin=resolution.is_admin,
    )
