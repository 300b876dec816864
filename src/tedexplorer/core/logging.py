"""
Logging infrastructure for TED Explorer.

Everything logs under the ``tedexplorer`` namespace. ``setup_logging``
attaches two sinks:
- a Rich console handler for the terminal
- a JSON-lines file handler, one object per record

Search code logs through a ContextualLogger so each line carries the
endpoint and search session it belongs to.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from rich.console import Console

ROOT_LOGGER = "tedexplorer"

# Record attributes copied into JSON log lines when present
CONTEXT_FIELDS = ("endpoint", "session", "phase", "page", "owner")

LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "default",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that are chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def json_dumps(obj: Any) -> str:
    return orjson.dumps(obj, default=str).decode("utf-8")


# =============================================================================
# Formatters and Handlers
# =============================================================================


class JSONFormatter(logging.Formatter):
    """One JSON object per record, stamped with the record's own time."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key)) for key in CONTEXT_FIELDS if hasattr(record, key)
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json_dumps(entry)


class RichConsoleHandler(logging.Handler):
    """Prints records to a Rich console, tagged with query phase and page."""

    def __init__(self, console: "Console | None" = None, level: int = logging.INFO):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    @staticmethod
    def _tag(record: logging.LogRecord) -> str:
        parts = []
        if hasattr(record, "phase"):
            parts.append(str(record.phase))
        if hasattr(record, "page"):
            parts.append(f"p{record.page}")
        return f"[cyan]\\[{' '.join(parts)}][/cyan] " if parts else ""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            from rich.markup import escape

            style = LEVEL_STYLES.get(record.levelno, "default")
            text = escape(self.format(record))
            self.console.print(f"{self._tag(record)}[{style}]{text}[/{style}]", highlight=False)
            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


def _console_handler(level: int, rich_console: bool) -> logging.Handler:
    handler: logging.Handler
    if rich_console:
        handler = RichConsoleHandler(level=level)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    handler.setLevel(level)
    return handler


def _file_handler(path: Path, json_format: bool) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    # The file keeps everything, including query text at DEBUG
    handler.setLevel(logging.DEBUG)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


# =============================================================================
# Logger Configuration
# =============================================================================


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the ``tedexplorer`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR)
        log_file: JSON/plain log file; None disables file output
        json_format: Write JSON lines instead of plain text to the file
        rich_console: Use Rich for console output

    Returns:
        The ``tedexplorer`` logger
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(numeric_level, rich_console))
    if log_file:
        logger.addHandler(_file_handler(Path(log_file), json_format))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger ``tedexplorer.<name>``, or the package logger when no name is given."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


# =============================================================================
# Contextual Logging Adapter
# =============================================================================


class ContextualLogger(logging.LoggerAdapter):
    """Adds fixed context fields (endpoint, session, ...) to every record.

    Fields passed through ``extra`` on a single call win over the fixed ones.
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, {k: v for k, v in context.items() if v is not None})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    @property
    def endpoint(self) -> str | None:
        return self.extra.get("endpoint")

    @property
    def session(self) -> int | None:
        return self.extra.get("session")

    def with_context(self, **context: Any) -> "ContextualLogger":
        """Copy of this logger with more (or overriding) context."""
        return ContextualLogger(self.logger, **{**self.extra, **context})


def get_contextual_logger(
    name: str | None = None,
    endpoint: str | None = None,
    session: int | None = None,
) -> ContextualLogger:
    """Get a logger that tags records with endpoint and session.

    Args:
        name: Logger name under ``tedexplorer``
        endpoint: SPARQL endpoint URL
        session: Search session generation
    """
    return ContextualLogger(get_logger(name), endpoint=endpoint, session=session)
