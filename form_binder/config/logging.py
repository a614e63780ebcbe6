"""structlog rendering for applications embedding the binder.

The binder itself only logs through stdlib ``logging``; this routes those
records to stderr as console lines or, with ``log_json=True``, JSON lines.
"""

from __future__ import annotations

import logging
import sys

import structlog


_QUIET_LOGGERS = ("asyncio", "asyncpg", "nats", "redis")


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Render stdlib log records through structlog on stderr.

    Args:
        verbose: Show the binder's DEBUG records (issues, per-call summaries).
        log_json: Emit JSON lines instead of console output.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if log_json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("form_binder").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
