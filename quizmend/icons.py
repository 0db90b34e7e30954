#!/usr/bin/env python3
"""
icons.py - Centralized icon/emoji definitions for quizmend output

Usage:
    from quizmend.icons import SUCCESS, WARNING, ERROR
    print(f"{SUCCESS} Done!")

All unicode characters are defined here once.
"""

import logging
from dataclasses import dataclass


@dataclass(frozen=True)
class Icons:
    """
    Centralized icon definitions.

    Categories:
    - Status: SUCCESS, ERROR, WARNING, INFO, SKIP, HINT
    - Actions: EDIT
    - Log levels: DEBUG, CRITICAL
    """

    SUCCESS: str = "✅"
    ERROR: str = "❌"
    WARNING: str = "⚠️"
    INFO: str = "ℹ️"
    SKIP: str = "⏭️"
    HINT: str = "💡"

    EDIT: str = "✏️"

    DEBUG: str = "🔍"
    CRITICAL: str = "💥"


icons = Icons()

SUCCESS = icons.SUCCESS
ERROR = icons.ERROR
WARNING = icons.WARNING
INFO = icons.INFO
SKIP = icons.SKIP
HINT = icons.HINT
EDIT = icons.EDIT

# Used by IconLogFormatter
LEVEL_ICONS = {
    logging.DEBUG: icons.DEBUG,
    logging.INFO: icons.INFO,
    logging.WARNING: icons.WARNING,
    logging.ERROR: icons.ERROR,
    logging.CRITICAL: icons.CRITICAL,
}
