#!/usr/bin/env python3
"""
Script to create, promote and list Secure Wallet users
"""

import asyncio
import sys
from pathlib import Path

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from app.core.database import AsyncSessionLocal, create_tables
from app.models.user import User, ROLE_ADMIN, ROLES
from app.services.auth_service import auth_service
from sqlalchemy import select
import getpass


def prompt_password() -> str:
    while True:
        password = getpass.getpass("Password: ")
        if len(password) < 6:
            print("❌ Password must be at least 6 characters long.")
            continue
        if password != getpass.getpass("Confirm Password: "):
            print("❌ Passwords do not match.")
            continue
        return password


async def create_admin_user():
    """Create a verified admin user interactively"""
    print("🔧 Secure Wallet - Admin User Creation")
    print("=" * 50)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.role == ROLE_ADMIN))
        existing_admins = result.scalars().all()

        if existing_admins:
            print(f"⚠️  Found {len(existing_admins)} existing admin user(s):")
            for admin in existing_admins:
                print(f"   - {admin.username} ({admin.email})")

            response = input("\nDo you want to create another admin user? (y/N): ").strip().lower()
            if response != 'y':
                print("❌ Admin user creation cancelled.")
                return

        print("\n📝 Please provide the following information:")

        while True:
            username = input("Username: ").strip()
            if len(username) < 3:
                print("❌ Username must be at least 3 characters long.")
                continue
            if await auth_service.get_user_by_username(username, db):
                print(f"❌ Username '{username}' already exists.")
                continue
            break

        while True:
            email = input("Email: ").strip()
            if "@" not in email:
                print("❌ Please enter a valid email address.")
                continue
            if await auth_service.get_user_by_email(email, db):
                print(f"❌ Email '{email}' already exists.")
                continue
            break

        password = prompt_password()

        print("\n🔄 Creating admin user...")
        try:
            admin_user, _ = await auth_service.create_user(
                username=username,
                email=email,
                password=password,
                db=db,
                role=ROLE_ADMIN,
                is_verified=True,
            )
        except ValueError as e:
            print(f"❌ Error creating admin user: {e}")
            return

        print("✅ Admin user created successfully!")
        print(f"   Username: {admin_user.username}")
        print(f"   Email: {admin_user.email}")
        print(f"   Role: {admin_user.role}")
        print(f"   User ID: {admin_user.id}")


async def set_role(identifier: str, role: str):
    """Change an existing user's role"""
    if role not in ROLES:
        print(f"❌ Unknown role '{role}'. Use one of: {', '.join(ROLES)}")
        sys.exit(1)

    async with AsyncSessionLocal() as db:
        user = await auth_service.get_user_by_login(identifier, db)
        if user is None:
            print(f"❌ No user matches '{identifier}'.")
            sys.exit(1)

        user.role = role
        user.is_verified = True
        await db.commit()
        print(f"✅ {user.username} is now {role}.")


async def list_users():
    """List all users in the system"""
    print("👥 Secure Wallet - User List")
    print("=" * 50)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        users = result.scalars().all()

        if not users:
            print("❌ No users found in the system.")
            return

        print(f"\nFound {len(users)} user(s):")
        print("-" * 80)
        print(f"{'Username':<20} {'Email':<30} {'Role':<10} {'Status':<10}")
        print("-" * 80)

        for user in users:
            status = "Active" if user.is_active else "Inactive"
            verified = "✓" if user.is_verified else "✗"
            print(f"{user.username:<20} {user.email:<30} {user.role:<10} {status} {verified}")

        print("-" * 80)


async def main():
    """Main function"""
    await create_tables()

    command = sys.argv[1].lower() if len(sys.argv) > 1 else ""

    if command == "admin":
        await create_admin_user()
    elif command == "promote" and len(sys.argv) == 3:
        await set_role(sys.argv[2], ROLE_ADMIN)
    elif command == "role" and len(sys.argv) == 4:
        await set_role(sys.argv[2], sys.argv[3].lower())
    elif command == "list":
        await list_users()
    else:
        print("🔧 Secure Wallet - User Management")
        print("=" * 50)
        print("Available commands:")
        print("  python create_admin.py admin                   - Create an admin user")
        print("  python create_admin.py promote <user|email>    - Make an existing user admin")
        print("  python create_admin.py role <user|email> <role> - Set a user's role")
        print("  python create_admin.py list                    - List all users")
        sys.exit(0 if not command else 1)


if __name__ == "__main__":
    asyncio.run(main())
