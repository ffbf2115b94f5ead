"""Read-only access to the COM class registration under HKEY_CLASSES_ROOT.

Lookups return ``RegistryLookup`` values; permission and not-found errors are
translated into the result instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from searchconfig.utils.constants import CLSID_KEY_TEMPLATE, INPROC_SERVER_KEY_TEMPLATE
from searchconfig.utils.logging import logger


@dataclass(frozen=True)
class RegistryLookup:
    """Outcome of one registry read."""

    found: bool
    value: str | None = None
    error: str | None = None


def clsid_key(clsid: str) -> str:
    return CLSID_KEY_TEMPLATE.format(clsid=normalize_clsid(clsid))


def inproc_server_key(clsid: str) -> str:
    return INPROC_SERVER_KEY_TEMPLATE.format(clsid=normalize_clsid(clsid))


def normalize_clsid(clsid: str) -> str:
    """Return the braced, upper-case registry spelling of a CLSID."""
    bare = clsid.strip().strip("{}").upper()
    return "{" + bare + "}"


class RegistryReader(Protocol):
    def key_exists(self, subkey: str) -> RegistryLookup: ...

    def read_default_value(self, subkey: str) -> RegistryLookup: ...


class WinRegistryReader:
    """RegistryReader backed by ``winreg`` on HKEY_CLASSES_ROOT."""

    def _open(self, subkey: str):
        import winreg

        return winreg.OpenKey(winreg.HKEY_CLASSES_ROOT, subkey, 0, winreg.KEY_READ)

    def key_exists(self, subkey: str) -> RegistryLookup:
        try:
            with self._open(subkey):
                return RegistryLookup(found=True)
        except FileNotFoundError:
            return RegistryLookup(found=False)
        except PermissionError as e:
            logger.debug("Access denied opening HKCR\\{key}: {err}", key=subkey, err=e)
            return RegistryLookup(found=False, error=f"Access denied reading registry key {subkey}")
        except Exception as e:
            logger.debug("Registry read failed for HKCR\\{key}: {err}", key=subkey, err=e)
            return RegistryLookup(found=False, error=f"Registry read failed for {subkey}: {e}")

    def read_default_value(self, subkey: str) -> RegistryLookup:
        try:
            import winreg

            with self._open(subkey) as key:
                value, _value_type = winreg.QueryValueEx(key, "")
        except FileNotFoundError:
            return RegistryLookup(found=False)
        except PermissionError:
            return RegistryLookup(found=False, error=f"Access denied reading registry key {subkey}")
        except Exception as e:
            logger.debug("Registry value read failed for HKCR\\{key}: {err}", key=subkey, err=e)
            return RegistryLookup(found=False, error=f"Registry read failed for {subkey}: {e}")

        if not isinstance(value, str) or not value.strip():
            return RegistryLookup(found=False)
        return RegistryLookup(found=True, value=value)
