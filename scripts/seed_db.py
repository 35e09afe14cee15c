from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.task_tracker.task_tracker.database.bootstrap import ensure_seed_admin


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    parser = argparse.ArgumentParser(description="Create or refresh an admin account.")
    parser.add_argument("--name", default=settings.SEED_ADMIN_NAME)
    parser.add_argument("--email", default=settings.SEED_ADMIN_EMAIL)
    parser.add_argument("--password", default=settings.SEED_ADMIN_PASSWORD)
    args = parser.parse_args()

    if not args.password:
        parser.error("an admin password is required (--password or SEED_ADMIN_PASSWORD)")

    ensure_seed_admin(db_config, name=args.name, email=args.email, password=args.password)

    print(
        f"OK: Admin {args.email} ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
