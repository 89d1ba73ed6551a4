import logging
import uuid
from typing import NoReturn

from ...domain.ports.user import UserPort
from ...errors import CredentialError, CredentialFailure, ValidationError
from ...utils.security import verify_password

logger = logging.getLogger("rbac_admin.auth")


async def verify_credentials(user_port: UserPort, email: str | None, password: str | None) -> uuid.UUID:
    """Check an email/password pair and return the principal id.

    The lookup is an exact, case-sensitive match on email. An inactive
    account is rejected before its password is compared. No token or
    session is created here.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await user_port.get_by_email(email)
    if user is None:
        _reject(email, CredentialFailure.NOT_FOUND)
    if not user.is_active:
        _reject(email, CredentialFailure.INACTIVE)
    if not verify_password(password, user.password_hash):
        _reject(email, CredentialFailure.BAD_CREDENTIAL)

    logger.info("Credentials verified principal=%s", user.id)
    return user.id


def _reject(email: str, reason: CredentialFailure) -> NoReturn:
    logger.warning("Credential verification failed email=%s reason=%s", email, reason.value)
    raise CredentialError(reason)
