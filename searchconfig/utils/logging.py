"""Centralized logging configuration using Loguru.

Every module logs through the same configured logger:

Usage:
    from searchconfig.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if SEARCHCONFIG_LOG_LEVEL=DEBUG or --verbose

Environment Variables:
    SEARCHCONFIG_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: WARNING)
    SEARCHCONFIG_LOG_JSON: 0|1 (default: 0, human-readable)
    SEARCHCONFIG_LOG_FILE: path to an NDJSON log file (optional)
    SEARCHCONFIG_REQUEST_ID: correlation ID shared with audit records
"""

import json
import os
import sys
import uuid

from loguru import logger

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("SEARCHCONFIG_LOG_LEVEL", "WARNING").upper()
_json_mode = os.environ.get("SEARCHCONFIG_LOG_JSON", "0") == "1"
_log_file = os.environ.get("SEARCHCONFIG_LOG_FILE")
_request_id = os.environ.get("SEARCHCONFIG_REQUEST_ID") or str(uuid.uuid4())


def _to_pino(record) -> str:
    """Render a loguru record as one Pino-style NDJSON line."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            pino_log[key] = value

    if record["exception"]:
        exc = record["exception"]
        pino_log["err"] = {
            "type": exc.type.__name__ if exc.type else "Error",
            "message": str(exc.value) if exc.value else "",
        }

    return json.dumps(pino_log, default=str)


def pino_compatible_sink(message):
    """Write Pino-format NDJSON to stdout."""
    # Never call logger.* inside a sink
    sys.stdout.write(_to_pino(message.record) + "\n")
    sys.stdout.flush()


# No emojis - Windows CP1252 consoles
_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

_console_handler_id: int | None = None


def _add_console_handler(level: str) -> int:
    if _json_mode:
        return logger.add(pino_compatible_sink, level=level, colorize=False)
    return logger.add(
        sys.stderr,
        level=level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )


_console_handler_id = _add_console_handler(_log_level)

if _log_file:
    def _file_pino_sink(message):
        """Append Pino-format JSON to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_to_pino(message.record) + "\n")

    logger.add(_file_pino_sink, level="DEBUG")


def set_console_level(level: str) -> None:
    """Replace the console handler with one at ``level``.

    Used by ``--verbose`` to surface the DEBUG trail of a registration run.
    """
    global _console_handler_id, _log_level

    if _console_handler_id is not None:
        try:
            logger.remove(_console_handler_id)
        except ValueError:
            pass  # Already removed

    _log_level = level.upper()
    _console_handler_id = _add_console_handler(_log_level)


def get_request_id() -> str:
    """Get the current request ID for correlation."""
    return _request_id


__all__ = [
    "logger",
    "set_console_level",
    "get_request_id",
]
