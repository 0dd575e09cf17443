"""Create missing user profiles for accounts that signed up before provisioning ran."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_spaces.attendance_spaces.common.logging_setup import configure_logging
from src.attendance_spaces.attendance_spaces.container import build_container


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    container = build_container(db_config=dict(settings.DB_CONFIG))

    created = container.profile_service.backfill_profiles()
    print(f"OK: Backfilled {created} profile(s)")


if __name__ == "__main__":
    main()
