"""
Core Logging Configuration
Structured logging setup based on structlog

Application loggers and the loggers of uvicorn and python-multipart all go
through one root handler, rendered by structlog.
"""

import logging
import sys
from typing import Any, List, Optional

import structlog
from asgi_correlation_id import correlation_id

from cadriciel.core.config import Settings, settings as default_settings

# Loggers that propagate to the root handler instead of printing their own lines
SERVER_LOGGERS = ["uvicorn", "uvicorn.error", "uvicorn.access"]

# Chatty third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "python_multipart": logging.WARNING,
    "multipart": logging.WARNING,
}

_configured = False


def add_request_id(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Attach the current request correlation id, if any"""
    request_id = correlation_id.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def shared_processors() -> List[Any]:
    """Processors applied to structlog and standard logging records alike"""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        add_request_id,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.processors.StackInfoRenderer(),
    ]


def renderers(json_format: bool) -> List[Any]:
    if json_format:
        # JSON lines carry the traceback as a field
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=True, pad_event=20)]


def configure_logging(settings: Optional[Settings] = None, force: bool = False) -> None:
    """
    Configure structlog and standard logging

    Args:
        settings: settings to read the level and renderer from
        force: reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or default_settings
    processors = shared_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers(settings.log_json_format),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level.upper())

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    _configured = True


def get_logger(name: Optional[str] = None) -> Any:
    """Return a structured logger"""
    return structlog.get_logger(name)
