"""Logging (structlog sobre logging estándar).

Por qué structlog:
- Eventos key-value (`operation=...`, `path=...`) fáciles de filtrar.
- Se envuelve un logger de `logging` estándar, así que la app que usa la
  librería sigue controlando handlers y niveles.
"""

from __future__ import annotations

import logging
import sys

import structlog

ROOT_LOGGER_NAME = "witai"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.dev.ConsoleRenderer(colors=False),
]


def setup_logging(level: str = "WARNING") -> None:
    """Configura el handler de consola para los loggers `witai.*` (uso CLI)."""

    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers = [handler]
    root.setLevel(log_level)
    root.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(
        logging.getLogger(name or ROOT_LOGGER_NAME),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
