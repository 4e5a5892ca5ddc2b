"""
Create the first administrator account.

Usage:
  - python scripts/create_admin.py --email admin@city.gov --name "City Admin"
  - the password is read from ADMIN_PASSWORD or prompted for

Admins cannot self-register through the API, so the first one is created here.
Run `alembic upgrade head` before this so the tables exist.
"""

import argparse
import getpass
import os

from dotenv import load_dotenv

load_dotenv(override=True)

from app.core.errors import AppError  # noqa: E402
from app.db.base import import_models  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.services import accounts  # noqa: E402


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args()

    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters")
        raise SystemExit(1)

    import_models()
    db = SessionLocal()
    try:
        user = accounts.register(db, args.email, password, args.name, role=UserRole.admin)
        print(f"Created admin {user.email} (id={user.id})")
    except AppError as e:
        print(f"Could not create admin: {e.message}")
        raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
