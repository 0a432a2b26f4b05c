"""Diagnostic assertions."""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)


def cson_assert(condition: object, expression: str) -> bool:
    """Log a failed precondition with the caller's file and line.

    Returns the truth value of *condition* so the call site decides what to
    do on failure, usually ``return None``::

        if not cson_assert(text, "json_str"):
            return
    """
    if not condition:
        caller = sys._getframe(1)
        logger.error(
            "%s assert failed at file: %s, line: %d",
            expression,
            caller.f_code.co_filename,
            caller.f_lineno,
        )
        return False
    return True
