"""Structured logging for the swap terminal.

The interactive console owns the tty, so log records go to a file by
default. stderr is only used when no log file is configured (API-only or
scripted runs), where nothing else is drawing on the terminal.
"""

import logging
from pathlib import Path

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _renderer(log_format: str, to_file: bool) -> structlog.types.Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    # ANSI colour codes are noise in a log file
    return structlog.dev.ConsoleRenderer(colors=not to_file)


def _handler(log_file: str | Path | None) -> logging.Handler:
    if not log_file:
        return logging.StreamHandler()
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    log_format: str = "console",
) -> logging.Handler:
    """Route structlog events through one stdlib handler.

    Args:
        log_level: Root level name ("DEBUG", "INFO", ...).
        log_file: Destination file. Empty or None logs to stderr.
        log_format: "json" or "console".

    Returns:
        The installed handler, replacing any previous root handlers.
    """
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = _handler(log_file)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format, to_file=bool(log_file)),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
