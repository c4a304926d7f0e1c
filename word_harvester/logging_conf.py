"""JSON logging for word-harvester.

structlog events are handed to stdlib logging as ``msg`` plus ``extra`` and
rendered by python-json-logger, so every bound key becomes a JSON field.
Files live under ``<WORD_HARVESTER_HOME>/logs``: ``harvester.log``,
``error.log`` and one ``sources/<kind>.log`` per dictionary.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path

import structlog
from pythonjsonlogger import jsonlogger

_LOGGING_INITIALISED = False

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def log_dir() -> Path:
    env_root = os.environ.get("WORD_HARVESTER_HOME")
    if env_root:
        return Path(env_root).expanduser().resolve() / "logs"
    return Path(__file__).resolve().parents[1] / "logs"


def main_log_path() -> Path:
    return log_dir() / "harvester.log"


def source_log_path(kind: str) -> Path:
    return log_dir() / "sources" / f"{kind}.log"


def configure_logging(verbose: bool = False) -> None:
    """Install the stdlib handlers and route structlog through them once per process."""

    global _LOGGING_INITIALISED
    if _LOGGING_INITIALISED:
        return
    (log_dir() / "sources").mkdir(parents=True, exist_ok=True)
    level = "DEBUG" if verbose else "INFO"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": jsonlogger.JsonFormatter,
                    "fmt": JSON_FORMAT,
                }
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
                "harvester_file": {
                    "class": "logging.FileHandler",
                    "level": "INFO",
                    "filename": str(main_log_path()),
                    "formatter": "json",
                    "encoding": "utf-8",
                },
                "error_file": {
                    "class": "logging.FileHandler",
                    "level": "ERROR",
                    "filename": str(log_dir() / "error.log"),
                    "formatter": "json",
                    "encoding": "utf-8",
                },
            },
            "loggers": {
                "word_harvester": {
                    "handlers": ["console", "harvester_file", "error_file"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _LOGGING_INITIALISED = True


def source_logger(kind: str, verbose: bool = False) -> structlog.BoundLogger:
    """Logger bound to one dictionary; its records also go to ``sources/<kind>.log``."""

    configure_logging(verbose)
    path = source_log_path(kind)
    logger_name = f"word_harvester.source.{kind}"
    py_logger = logging.getLogger(logger_name)
    if not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(path)
        for handler in py_logger.handlers
    ):
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
        handler.setLevel(logging.INFO)
        py_logger.addHandler(handler)
    return structlog.get_logger(logger_name).bind(source=kind)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_source_logs() -> list[Path]:
    return sorted((log_dir() / "sources").glob("*.log"))


__all__ = [
    "available_source_logs",
    "configure_logging",
    "log_dir",
    "main_log_path",
    "source_log_path",
    "source_logger",
    "tail_log",
]
