from __future__ import annotations

import logging
import sys

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Safe to call more than once (app factory runs per test).
    """

    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if getattr(handler, "_attendance_spaces", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    handler._attendance_spaces = True
    root.addHandler(handler)
