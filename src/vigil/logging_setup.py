"""Idempotent stderr logging setup driven by LoggingConfig."""

from __future__ import annotations

import logging
import sys

from vigil.config import LoggingConfig

_CONFIGURED = False


def setup_logging(
    config: LoggingConfig | None = None, level: int | str | None = None
) -> None:
    """Attach one stderr handler to the vigil logger. Safe to call multiple times.

    An explicit level overrides config.level. Unknown level names raise
    ConfigError before anything is installed.
    """
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return

    config = config or LoggingConfig()
    if isinstance(level, int):
        resolved = level
    else:
        resolved = LoggingConfig(level=level or config.level).level_number()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.format))

    logger = logging.getLogger("vigil")
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True
