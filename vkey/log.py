"""Custom logging levels for VKey.

Levels (ascending):
    TRACE =  5  - every keystroke, token and render
    DEBUG = 10  - state transitions, context focus/eviction, mode changes
    INFO  = 20  - startup/shutdown (default)

Usage:
    import vkey.log  # must be imported once before any logger is used
    logger = logging.getLogger(__name__)
    logger.trace("very noisy message")
"""

import logging

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, message: object, *args: object, **kwargs: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)  # type: ignore[attr-defined]


# Patch Logger class once at import time
logging.Logger.trace = _trace  # type: ignore[attr-defined]
