"""Seed an administrator user."""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from services.auth_service import normalize_email  # noqa: E402

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin User")


def main() -> None:
    email = normalize_email(ADMIN_EMAIL)
    app = create_app()
    with app.app_context():
        rounds = app.config.get("BCRYPT_ROUNDS", 10)
        admin = User.query.filter_by(email=email).first()
        if admin is None:
            admin = User(email=email, full_name=ADMIN_NAME, role="admin")
            admin.set_password(ADMIN_PASSWORD, rounds=rounds)
            db.session.add(admin)
            action = "created"
        else:
            admin.role = "admin"
            admin.set_password(ADMIN_PASSWORD, rounds=rounds)
            action = "updated"
        db.session.commit()
        print(f"Admin user {action}: {email}")


if __name__ == "__main__":
    main()
