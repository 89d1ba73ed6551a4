"""Shared test fixtures and configuration."""
import os

# Settings are read lazily; these defaults keep module imports and the app
# factory working without a real database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rbac_admin.database import build_sessionmaker, enable_sqlite_foreign_keys  # noqa: E402
from rbac_admin.models import Base  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend():
    # SQLAlchemy's async engine runs on asyncio only.
    return "asyncio"


@pytest.fixture
async def engine(anyio_backend):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def session(session_factory, anyio_backend):
    async with session_factory() as session:
        yield session
