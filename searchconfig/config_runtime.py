"""Runtime configuration for searchconfig - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from searchconfig.utils.constants import (
    AUDIT_DIR,
    CONFIG_FILE_NAME,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_PREFIX,
    REGISTRATION_TOOL,
    STATE_DIR,
)
from searchconfig.utils.logging import logger

DEFAULTS = {
    "paths": {
        "state_dir": str(STATE_DIR),
        "audit_dir": str(AUDIT_DIR),
    },
    "registration": {
        "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        "tool": REGISTRATION_TOOL,
        "silent": True,
    },
}


def _coerce(value: str, default: Any) -> Any:
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    return value


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .searchconfig/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (SEARCHCONFIG_<SECTION>_<KEY>)
    2. .searchconfig/config.json file
    3. Built-in defaults

    Command-line flags are applied on top of the returned dictionary by the CLI.

    Args:
        root: Root directory to look for the config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / ".searchconfig" / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and type(value) is type(cfg[section][key]):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {path}: {err}", path=path, err=e)
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except ValueError as e:
                    logger.warning(
                        "Invalid value for environment variable {var}: '{value}' - {err}",
                        var=env_var,
                        value=value,
                        err=e,
                    )

    return cfg
