from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.fieldops.fieldops.core.logging import configure_logging
from src.fieldops.fieldops.database.bootstrap import DEMO_ACCOUNTS, apply_seed_sql, ensure_demo_users

logger = logging.getLogger("fieldops.seed_db")


def main() -> None:
    configure_logging("INFO")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    for email, _, _, role, password, _ in DEMO_ACCOUNTS:
        logger.info("demo login %-32s role=%-12s password=%s", email, role, password)


if __name__ == "__main__":
    main()
