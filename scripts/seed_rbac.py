"""
Seed the default roles, permissions and role grants.

Safe to run repeatedly. Set SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD to also
create an administrator account.

Usage:
    python -m scripts.seed_rbac [--create-tables]
"""
import argparse
import asyncio
import logging

from rbac_admin.bootstrap import seed_defaults
from rbac_admin.config import get_settings
from rbac_admin.database import dispose_engine, get_engine, get_sessionmaker
from rbac_admin.models import Base

logger = logging.getLogger("rbac_admin.bootstrap")


async def main(create_tables: bool) -> None:
    settings = get_settings()
    try:
        if create_tables:
            async with get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created")

        async with get_sessionmaker()() as session:
            report = await seed_defaults(
                session,
                admin_email=settings.seed_admin_email,
                admin_password=settings.seed_admin_password,
                bcrypt_rounds=settings.bcrypt_rounds,
            )
    finally:
        await dispose_engine()

    print(f"Roles: {', '.join(sorted(report.role_ids))}")
    print(f"Permissions: {len(report.permission_ids)}")
    print(f"New role grants: {report.grants_created}")
    if report.admin_user_id is not None:
        print(f"Admin account: {settings.seed_admin_email} ({report.admin_user_id})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables before seeding",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    asyncio.run(main(args.create_tables))
