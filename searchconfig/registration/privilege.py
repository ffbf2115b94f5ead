"""Elevation checks for the current process."""

import ctypes
import getpass
import os
import platform

from searchconfig.utils.logging import logger


class PrivilegeChecker:
    """Answers whether the process may write HKEY_CLASSES_ROOT. No side effects."""

    def is_elevated(self) -> bool:
        try:
            if platform.system() == "Windows":
                return bool(ctypes.windll.shell32.IsUserAnAdmin())
            return os.geteuid() == 0
        except Exception as e:
            logger.debug("Elevation check failed, assuming not elevated: {err}", err=e)
            return False

    def current_user(self) -> str:
        try:
            return getpass.getuser()
        except Exception:
            return os.environ.get("USERNAME") or os.environ.get("USER") or "unknown"
