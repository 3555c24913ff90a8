"""
Structured Logging

Every ledger mutation and export is logged as a structured event.
This gives:
1. Traceability of what changed a person's balance
2. Debugging capability when an export fails

Library modules only call get_logger(). Entry points call
configure_logging() once at startup.
"""

import logging
import sys
from typing import Optional

import structlog


_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

_configured = False


def _configure_structlog(json_logs: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Library default: JSON events routed through stdlib logging.
_configure_structlog(json_logs=True)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = False,
) -> None:
    """
    Configure the package logging exactly once.

    Args:
        level: Log level name for the "financeio" stdlib logger.
        json_logs: Render JSON lines instead of console output.
        force: Reconfigure even if already configured.
    """
    global _configured
    if _configured and not force:
        return

    root = logging.getLogger("financeio")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    _configure_structlog(json_logs)
    _configured = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, namespaced under "financeio"."""
    if name and not name.startswith("financeio"):
        name = f"financeio.{name}"
    return structlog.get_logger(name or "financeio")
