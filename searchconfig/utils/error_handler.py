"""Centralized error handler for searchconfig commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any

import click

from searchconfig.utils.logging import logger

from .constants import ERROR_LOG_NAME, STATE_DIR


def _state_dir() -> Path:
    """State directory of the running command: ``paths.state_dir`` when configured."""
    ctx = click.get_current_context(silent=True)
    config = getattr(ctx.find_root().obj, "config", None) if ctx else None
    if config:
        return Path(config["paths"]["state_dir"])
    return STATE_DIR


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that turns unexpected command failures into a logged ClickException.

    ``click.exceptions.Exit`` and other click control-flow exceptions pass
    through untouched so commands can still set their own exit codes.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.Exit, click.ClickException, click.Abort):
            raise
        except Exception as e:
            error_type = type(e).__name__
            error_msg = str(e)
            tb = traceback.format_exc()

            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            state_dir = _state_dir()
            error_log = state_dir / ERROR_LOG_NAME
            log_note = ""
            try:
                state_dir.mkdir(parents=True, exist_ok=True)
                with open(error_log, "a", encoding="utf-8") as f:
                    f.write("\n" + "=" * 80 + "\n")
                    f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                    f.write("=" * 80 + "\n")
                    f.write(f"{error_type}: {error_msg}\n\n")
                    f.write(tb)
                    f.write("=" * 80 + "\n\n")
                log_note = f"\n\nFull traceback logged to: {error_log}"
            except OSError as log_err:
                logger.warning("Could not write error log {path}: {err}", path=error_log, err=log_err)

            raise click.ClickException(f"{error_type}: {error_msg}{log_note}") from e

    return wrapper
