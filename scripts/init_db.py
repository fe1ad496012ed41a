from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.database.bootstrap import (
    EXPECTED_TABLES,
    apply_schema,
    list_tables,
    missing_tables,
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)

    missing = missing_tables(list_tables(db_config))
    if missing:
        raise SystemExit(f"FAIL: {target} is missing attendance tables: {', '.join(missing)}")
    print(f"OK: {target} has {', '.join(EXPECTED_TABLES)}")


if __name__ == "__main__":
    main()
