"""Create the database (if missing) and apply database/schema.sql.

Usage: python scripts/init_db.py [path/to/schema.sql]
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

import mysql.connector

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.face_checkin.face_checkin.core.exceptions import PersistenceError
from src.face_checkin.face_checkin.database.bootstrap import apply_schema, list_tables
from src.face_checkin.face_checkin.main import configure_logging

logger = logging.getLogger("init_db")


def main(argv: list[str]) -> int:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)
    schema_path = Path(argv[0]) if argv else REPO_ROOT / "database" / "schema.sql"

    try:
        apply_schema(db_config, schema_path=schema_path)
        tables = list_tables(db_config)
    except (PersistenceError, mysql.connector.Error, FileNotFoundError) as e:
        logger.error("Schema not applied: %s", e)
        return 1

    logger.info(
        "Applied %s -> %s@%s:%s/%s",
        schema_path.name,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )
    for name in tables:
        logger.info("  table %s", name)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
