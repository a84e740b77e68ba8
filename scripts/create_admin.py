#!/usr/bin/env python3
"""
Create the first admin account for TheSync.

Reads credentials from .env:
    ADMIN_USERNAME   — admin login name (required)
    ADMIN_PASSWORD   — admin password (required)
    ADMIN_EMAIL      — contact email (optional)
    DATABASE_URL     — target database (required)

Usage:
    python -m scripts.create_admin
"""
from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from sqlalchemy import select  # noqa: E402

from thesync.auth.models import Admin  # noqa: E402
from thesync.auth.utils import hash_password  # noqa: E402
from thesync_shared.database.postgres import get_async_session_factory  # noqa: E402


async def main() -> None:
    username = os.getenv("ADMIN_USERNAME")
    password = os.getenv("ADMIN_PASSWORD")
    if not username or not password:
        print("Error: ADMIN_USERNAME and ADMIN_PASSWORD must be set in .env")
        sys.exit(1)
    db_url = os.environ["DATABASE_URL"]

    session_factory = get_async_session_factory(db_url, expire_on_commit=False)

    async with session_factory() as session:
        result = await session.execute(select(Admin).where(Admin.username == username))
        existing = result.scalar_one_or_none()
        if existing is not None:
            print(f"Admin {username} already exists (id={existing.id}). Nothing to do.")
            return

        admin = Admin(
            username=username,
            email=os.getenv("ADMIN_EMAIL") or None,
            password_hash=hash_password(password),
        )
        session.add(admin)
        await session.commit()
        print(f"Admin created: {username} (id={admin.id})")


if __name__ == "__main__":
    asyncio.run(main())
