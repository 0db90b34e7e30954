"""
log_utils.py - Logging setup with icons
"""

import logging

from quizmend.icons import LEVEL_ICONS, INFO

# Message-only; no per-line timestamps
LOG_FORMAT = "%(message)s"


class IconLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        icon = LEVEL_ICONS.get(record.levelno, INFO)
        base = super().format(record)
        return f"{icon} {base}"


def setup_logging(verbosity: int) -> None:
    level = logging.INFO
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity < 0:
        level = logging.WARNING

    handler = logging.StreamHandler()
    formatter = IconLogFormatter(LOG_FORMAT)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)
