import uuid
from typing import Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import ValidationError
from .authorization_service import AuthorizationService


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def require_fields(payload: BaseModel, *fields: str) -> None:
    missing = [field for field in fields if _is_blank(getattr(payload, field))]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})


def supplied_changes(payload: BaseModel, *, non_nullable: tuple[str, ...] = ()) -> dict[str, Any]:
    """Fields the caller actually sent, as attribute -> value.

    A field left out of the payload is left alone. Sending null or an empty
    string for a column that cannot hold it is rejected.
    """
    changes = {field: getattr(payload, field) for field in payload.model_fields_set}
    empty = sorted(field for field in non_nullable if field in changes and _is_blank(changes[field]))
    if empty:
        raise ValidationError("Fields cannot be empty", details={"fields": empty})
    return changes


class AdminService:
    """Base for admin console services.

    Every public method must call ``_authorize`` before touching the store.
    """

    def __init__(self, session: AsyncSession, authorization: AuthorizationService | None = None):
        self.session = session
        self.authorization = authorization or AuthorizationService(session)

    async def _authorize(self, principal_id: uuid.UUID | None, operation: str) -> uuid.UUID:
        return await self.authorization.require_admin(principal_id, operation)
