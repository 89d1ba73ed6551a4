import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import AppError, ConflictError, OperationFailedError

logger = logging.getLogger("rbac_admin.admin")

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == UNIQUE_VIOLATION_SQLSTATE:
            return True
    # sqlite: "UNIQUE constraint failed"; postgres: "duplicate key ... unique constraint"
    return "unique" in str(orig).lower()


@asynccontextmanager
async def store_transaction(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Run one admin operation as a single store transaction.

    Commits on success. On any failure the transaction is rolled back and
    store errors are translated: unique violations become ConflictError,
    everything else OperationFailedError. No retries.
    """
    try:
        yield
        await session.commit()
    except AppError:
        await session.rollback()
        raise
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            logger.warning("Unique constraint violated operation=%s: %s", operation, exc.orig)
            raise ConflictError(
                f"{operation} conflicts with an existing record",
                details=str(exc.orig),
            ) from exc
        logger.error("Integrity error operation=%s: %s", operation, exc.orig)
        raise OperationFailedError(
            f"{operation} failed", details=str(exc.orig)
        ) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Store failure operation=%s", operation, exc_info=exc)
        raise OperationFailedError(f"{operation} failed", details=str(exc)) from exc
