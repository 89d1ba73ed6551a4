import uuid

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class PrincipalResponse(BaseModel):
    principal_id: uuid.UUID


class ResolutionResponse(BaseModel):
    principal_id: uuid.UUID
    roles: list[str]
    permissions: list[str]
    is_admin: bool
