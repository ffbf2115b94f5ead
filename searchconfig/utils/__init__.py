"""searchconfig utilities package."""

from .constants import (
    AUDIT_DIR,
    REGISTRATION_TOOL,
    SEARCH_MANAGER_CLSID,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .logging import logger

__all__ = [
    "STATE_DIR",
    "AUDIT_DIR",
    "SEARCH_MANAGER_CLSID",
    "REGISTRATION_TOOL",
    "handle_exceptions",
    "logger",
]
