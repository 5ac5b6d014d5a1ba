#!/usr/bin/env python3
"""
Create a superadmin account.

Superadmins cannot self-register through the API; this is the only way to
create one. Does nothing if the email is already registered.

Usage:
    python scripts/create_superadmin.py --email admin@agentsport.app --password 'change-me'
"""

import argparse
import asyncio
import os
import sys

# Add apps/ to path so the agentsport package imports without installing
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(project_root, "apps"))

from agentsport.database.db import AsyncSessionLocal  # noqa: E402
from agentsport.database.models import UserRole  # noqa: E402
from agentsport.services import auth_service, user_service  # noqa: E402


async def create_superadmin(email: str, password: str):
    async with AsyncSessionLocal() as session:
        try:
            email = auth_service.normalize_email(email)
            user = await user_service.add_user(
                session, email, auth_service.hash_password(password), UserRole.SUPERADMIN
            )
            await session.commit()
            print(f"✅ Created superadmin {email} (user #{user.id})")
        except user_service.UserAlreadyExistsError:
            await session.rollback()
            print(f"⏭️  {email} is already registered")
        except ValueError as e:
            await session.rollback()
            print(f"❌ {e}")
            sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description="Create a superadmin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    if len(args.password) < 6:
        print("❌ Password must be at least 6 characters")
        sys.exit(1)

    asyncio.run(create_superadmin(args.email, args.password))


if __name__ == "__main__":
    main()
