from __future__ import annotations

import importlib

from dotenv import load_dotenv

from school_records.config import get_settings_module
from school_records.core.logging import configure_logging
from school_records.database.bootstrap import DEMO_USERS, apply_schema, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    configure_logging("INFO")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    ensure_demo_users(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    for full_name, email, password, role in DEMO_USERS:
        print(f"  {role:<8} {email} / {password}  ({full_name})")


if __name__ == "__main__":
    main()
