from __future__ import annotations

import logging
import sys
import warnings
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Deque, Optional

import structlog

if TYPE_CHECKING:
    from chatify.settings import LoggingSettings

LOG_FILE_NAME = "log.txt"

# Loggers owned by this package; default_level from LoggingSettings applies to these.
PRIMARY_LOGGERS = ("chatify",)


@dataclass
class LogRecordEntry:
    logger_name: str
    level: int
    level_name: str
    message: str
    created: float

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogRecordEntry":
        return cls(
            logger_name=record.name,
            level=record.levelno,
            level_name=record.levelname,
            message=record.getMessage(),
            created=record.created,
        )


class LogManager:
    """Bounded in-memory buffer of log records (oldest dropped first)."""

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._records: Deque[LogRecordEntry] = deque(maxlen=max_entries)

    def add_record(self, record: logging.LogRecord) -> None:
        self._records.append(LogRecordEntry.from_record(record))

    def get_logs(self) -> list[LogRecordEntry]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()


class _InMemoryLogHandler(logging.Handler):
    def __init__(self, manager: LogManager) -> None:
        super().__init__()
        self._manager = manager

    def emit(self, record: logging.LogRecord) -> None:
        self._manager.add_record(record)


_log_manager: Optional[LogManager] = None
_log_handler: Optional[_InMemoryLogHandler] = None


def _is_tty_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and getattr(
        handler, "stream", None
    ) in (sys.stdout, sys.stderr)


def init_log_manager(max_entries: Optional[int] = None) -> LogManager:
    """
    Capture all log records in memory and detach console handlers.
    Tools run inside a host that owns stdout, so nothing may be printed there.
    """
    global _log_manager, _log_handler
    if _log_manager is None:
        _log_manager = LogManager(max_entries=max_entries)
        _log_handler = _InMemoryLogHandler(_log_manager)

    root_logger = logging.getLogger()
    if _log_handler is not None and _log_handler not in root_logger.handlers:
        root_logger.addHandler(_log_handler)
    if root_logger.level > logging.INFO or root_logger.level == logging.NOTSET:
        root_logger.setLevel(logging.INFO)

    for handler in list(root_logger.handlers):
        if _is_tty_handler(handler):
            root_logger.removeHandler(handler)

    for logger_obj in list(logging.root.manager.loggerDict.values()):
        if not isinstance(logger_obj, logging.Logger):
            continue
        for handler in list(logger_obj.handlers):
            if _is_tty_handler(handler):
                logger_obj.removeHandler(handler)
        if (
            _log_handler is not None
            and not logger_obj.propagate
            and _log_handler not in logger_obj.handlers
        ):
            logger_obj.addHandler(_log_handler)

    def _showwarning(
        message: warnings.WarningMessage | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: object | None = None,
        line: str | None = None,
    ) -> None:
        text = warnings.formatwarning(message, category, filename, lineno, line)
        logging.getLogger("py.warnings").warning(text.strip())

    warnings.showwarning = _showwarning
    return _log_manager


def get_log_manager() -> Optional[LogManager]:
    return _log_manager


def configure_logging(
    settings: Optional["LoggingSettings"] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """Apply logger levels from settings and optionally log to <log_dir>/log.txt."""
    if settings is not None:
        default_level = getattr(logging, settings.default_level.value.upper())
        for name in PRIMARY_LOGGERS:
            logging.getLogger(name).setLevel(default_level)
        for name, level in settings.enabled_loggers.items():
            logging.getLogger(name).setLevel(getattr(logging, level.value.upper()))

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = (log_dir / LOG_FILE_NAME).resolve()
        root_logger = logging.getLogger()
        for handler in root_logger.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and Path(handler.baseFilename) == log_path
            ):
                return
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)
        if root_logger.level == logging.NOTSET or root_logger.level > logging.INFO:
            root_logger.setLevel(logging.INFO)


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger("chatify")
