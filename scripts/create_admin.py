"""Create the initial super admin account.

Usage:
    ADMIN_PASSWORD='S3cure!pass' python scripts/create_admin.py

The email and username come from ADMIN_EMAIL / ADMIN_USERNAME settings.
Does nothing if an account with that email already exists.
"""

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load env file (defaults to .env) before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[1]
sys.path.append(str(project_root))
load_dotenv(project_root / os.environ.get("ENV_FILE", ".env"))

from libs.auth.models import Role  # noqa: E402
from libs.common.config import get_settings  # noqa: E402
from libs.db.config import AsyncSessionLocal  # noqa: E402
from services.store_service.repositories import UserRepository  # noqa: E402
from services.store_service.services.user_ops import create_user  # noqa: E402

settings = get_settings()


async def create_admin_user() -> int:
    password = os.environ.get("ADMIN_PASSWORD")
    if not password:
        print("ADMIN_PASSWORD is not set")
        return 1

    async with AsyncSessionLocal() as db:
        if await UserRepository(db).get_by_email(settings.ADMIN_EMAIL):
            print(f"Admin {settings.ADMIN_EMAIL} already exists, nothing to do")
            return 0

        user = await create_user(
            db,
            email=settings.ADMIN_EMAIL,
            username=settings.ADMIN_USERNAME,
            password=password,
            role=Role.SUPER_ADMIN,
            first_name="Super",
            last_name="Admin",
        )
        print(f"Created super admin {user.username} ({user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(create_admin_user()))
