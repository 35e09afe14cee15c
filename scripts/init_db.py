"""Create the task tracker tables (and optionally the seed admin).

    python scripts/init_db.py                 # schema only
    python scripts/init_db.py --seed          # schema + admin from settings
    python scripts/init_db.py --dry-run       # print the statements
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.task_tracker.task_tracker.database import bootstrap
from src.task_tracker.task_tracker.logging_setup import setup_logging

logger = logging.getLogger("init_db")

DEFAULT_SCHEMA = REPO_ROOT / "database" / "schema.sql"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql to the configured MySQL database.")
    parser.add_argument("--schema", type=Path, default=DEFAULT_SCHEMA, help="schema file to apply")
    parser.add_argument("--seed", action="store_true", help="also create or refresh the seed admin")
    parser.add_argument("--dry-run", action="store_true", help="print the statements without connecting")
    return parser


def main(argv: Optional[Sequence[str]] = None, settings=None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if not args.schema.is_file():
        logger.error("Schema file not found: %s", args.schema)
        return 2

    if args.dry_run:
        for stmt in bootstrap.split_sql_statements(args.schema.read_text(encoding="utf-8")):
            print(stmt + ";\n")
        return 0

    db_config = dict(settings.DB_CONFIG)
    bootstrap.apply_schema(db_config, schema_path=args.schema)
    if args.seed:
        bootstrap.ensure_seed_admin(
            db_config,
            name=settings.SEED_ADMIN_NAME,
            email=settings.SEED_ADMIN_EMAIL,
            password=settings.SEED_ADMIN_PASSWORD,
        )

    tables = bootstrap.list_tables(db_config)
    logger.info(
        "Schema ready on %s@%s/%s: %s",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("database"),
        ", ".join(sorted(tables)),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
