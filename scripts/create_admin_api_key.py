"""Create an admin user and an admin-scoped API key bound to it."""
from __future__ import annotations

import argparse

from sqlalchemy import select

from app.db import get_sessionmaker, init_engine
from app.models.admin_user import AdminUser
from app.models.api_key import ApiKey, ApiScope
from app.utils.apikey import gen_key


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--email", default="admin@youngachievers.local")
    parser.add_argument("--first-name", default="Dev")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--key-name", default="dev-admin-key")
    args = parser.parse_args()

    init_engine()
    SessionLocal = get_sessionmaker()
    db = SessionLocal()

    try:
        admin = db.scalars(select(AdminUser).where(AdminUser.email == args.email)).first()
        if admin is None:
            admin = AdminUser(first_name=args.first_name, last_name=args.last_name, email=args.email)
            db.add(admin)
            db.flush()

        raw_token, prefix, key_hash = gen_key()
        api_key = ApiKey(
            name=args.key_name,
            prefix=prefix,
            key_hash=key_hash,
            scope=ApiScope.admin,
            is_active=True,
            admin_user_id=admin.id,
        )
        db.add(api_key)
        db.commit()
        db.refresh(api_key)

        print("==========================================")
        print("Admin API key created")
        print("Use this key in your Authorization header:")
        print(f"    Authorization: Bearer {raw_token}")
        print(f"(DB id: {api_key.id}, scope: {api_key.scope.value}, admin: {admin.display_name})")
        print("==========================================")
    finally:
        db.close()


if __name__ == "__main__":
    main()
