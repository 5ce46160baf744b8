"""
Logging setup for chromalink.

Library modules log through ``structlog.get_logger(__name__)`` with keyword
fields (operation, collection, attempt). ``setup_logging`` only decides how
those events are rendered: one JSON object per line in production, a
readable console line otherwise. Output goes to stderr so CLI results on
stdout stay machine-readable.

Fields bound with ``structlog.contextvars`` (the retry governor binds
``operation``, the CLI binds ``command``) are merged into every event.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from chromalink.config.settings import Settings, get_settings

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _render_processors(json_logs: bool) -> list[Processor]:
    if json_logs:
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(
    settings: Settings | None = None,
    json_logs: bool | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        settings: Source of the log level and environment (cached settings if None)
        json_logs: Force JSON (True) or console (False) rendering.
            Defaults to JSON in production.
    """
    settings = settings or get_settings()
    if json_logs is None:
        json_logs = settings.is_production

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        *_render_processors(json_logs),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
