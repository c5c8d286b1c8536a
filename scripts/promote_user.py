#!/usr/bin/env python3
"""
Promote an existing account to admin in the configured users file.

Usage:
  python scripts/promote_user.py --username alice [--users-file data/users.json]
"""
from __future__ import annotations

import argparse
import sys

from boxoffice.core.config import get_settings
from boxoffice.domain.errors import StoreError
from boxoffice.repositories.json_storage import DocumentStore
from boxoffice.services.reset_delivery import no_delivery
from boxoffice.services.user_service import UserStore


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Promote a user to admin")
    ap.add_argument("--username", required=True, help="Username to promote (case-insensitive)")
    ap.add_argument("--users-file", help="Users JSON file (default: USERS_FILE / DATA_DIR settings)")
    args = ap.parse_args(argv)

    path = args.users_file or get_settings().users_file
    users = UserStore(DocumentStore(path), deliver_reset=no_delivery)
    try:
        users.promote(args.username)
        user = users.get(args.username)
    except StoreError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    print("OK: user promoted")
    print(f"  Username: {user['username']}")
    print(f"  Role: {user['role']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
