"""
Utility script to create an administrator account for the backoffice.
Run this script once after deploying to create the first login.

Usage:
    python create_admin_user.py
    python create_admin_user.py --username admin --password-env ADMIN_PASSWORD
"""
import argparse
import getpass
import os
import sys

from fastapi import HTTPException
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.logging_config import configure_logging
from backoffice.core.security import MIN_PASSWORD_LENGTH, ROLE_ADMIN, create_user
from backoffice.db.session import get_engine, init_database


def parse_args():
    parser = argparse.ArgumentParser(description="Create a backoffice administrator account.")
    parser.add_argument("--username", help="Login name for the new administrator.")
    parser.add_argument(
        "--password-env",
        help="Read the password from this environment variable instead of prompting.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("Backoffice - Create Admin User")
    print("=" * 60)
    print()

    init_database()
    print("✓ Database tables initialized")

    username = (args.username or input("Enter username: ")).strip()
    if not username:
        print("Error: Username is required")
        return 1

    if args.password_env:
        password = os.getenv(args.password_env, "")
    else:
        password = getpass.getpass("Enter password: ")
        if password != getpass.getpass("Confirm password: "):
            print("Error: Passwords do not match")
            return 1

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    with Session(get_engine()) as db:
        try:
            user = create_user(db=db, username=username, password=password, role=ROLE_ADMIN)
        except HTTPException as e:
            print(f"Error creating user: {e.detail}")
            return 1

    print()
    print("✓ User created successfully!")
    print(f"Username: {user.username}")
    print(f"Created: {user.created_at}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
