#!/usr/bin/env python3
"""
Create (or upgrade) the first admin account for the social service.

Reads ADMIN_* from the environment; the database URL comes from Settings
(environment or .env):
    ADMIN_ACCOUNT_ID:  identity-layer user id (required for a new account)
    ADMIN_USERNAME:    account username (required)
    ADMIN_NAME:        display name (optional, defaults to "Administrator")
    SOCIAL_DATABASE_URL

Usage:
    python scripts/create_admin.py
"""
from __future__ import annotations

import asyncio
import os
import sys
import uuid
from pathlib import Path

# Add source roots to path so imports resolve without an install
root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root / "services" / "social"))
sys.path.insert(0, str(root / "shared"))

from app.accounts.service import bootstrap_admin  # noqa: E402
from app.config import Settings  # noqa: E402
from app.database import init_db  # noqa: E402


async def main() -> None:
    username = os.getenv("ADMIN_USERNAME")
    if not username:
        print("Error: ADMIN_USERNAME must be set")
        sys.exit(1)
    raw_id = os.getenv("ADMIN_ACCOUNT_ID")
    account_id = uuid.UUID(raw_id) if raw_id else uuid.uuid4()
    name = os.getenv("ADMIN_NAME", "Administrator")

    session_factory = init_db(Settings().social_database_url)
    async with session_factory() as session:
        account, created = await bootstrap_admin(session, account_id, username, name)
    if created:
        print(f"Admin created: @{account.username} (id={account.id})")
    else:
        print(f"@{account.username} already exists (id={account.id}) -> role set to admin.")

    await session_factory.kw["bind"].dispose()


if __name__ == "__main__":
    asyncio.run(main())
