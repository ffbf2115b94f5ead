"""Instantiate-then-release probe for a registered COM class."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from searchconfig.registration.models import ValidationState
from searchconfig.utils.logging import logger

# HRESULT for "Class not registered"
REGDB_E_CLASSNOTREG = -2147221164


@dataclass(frozen=True)
class ProbeResult:
    state: ValidationState
    message: str | None = None


class ComponentProbe(Protocol):
    def probe(self, clsid: str) -> ProbeResult: ...


class Win32ComProbe:
    """Probe a CLSID through ``pythoncom.CoCreateInstance``.

    The created interface is released immediately; no handle leaves this class.
    """

    def probe(self, clsid: str) -> ProbeResult:
        try:
            import pythoncom
            import pywintypes
        except Exception as e:
            return ProbeResult(ValidationState.UNKNOWN_ERROR, f"COM runtime unavailable: {e}")

        initialized = False
        try:
            pythoncom.CoInitialize()
            initialized = True
            instance = pythoncom.CoCreateInstance(
                pywintypes.IID(clsid),
                None,
                pythoncom.CLSCTX_INPROC_SERVER | pythoncom.CLSCTX_LOCAL_SERVER,
                pythoncom.IID_IUnknown,
            )
            if instance is None:
                return ProbeResult(
                    ValidationState.INSTANTIATION_FAILED, "CoCreateInstance returned no object"
                )
            del instance
            return ProbeResult(ValidationState.VALID)
        except pywintypes.com_error as e:
            hresult = e.args[0] if e.args else None
            if hresult == REGDB_E_CLASSNOTREG:
                return ProbeResult(ValidationState.IDENTITY_NOT_FOUND, "Class not registered")
            logger.debug("COM probe for {clsid} raised {err}", clsid=clsid, err=e)
            return ProbeResult(ValidationState.NATIVE_EXCEPTION, f"COM error: {e}")
        except Exception as e:
            logger.debug("COM probe for {clsid} failed unexpectedly: {err}", clsid=clsid, err=e)
            return ProbeResult(ValidationState.UNKNOWN_ERROR, f"Unexpected probe error: {e}")
        finally:
            if initialized:
                pythoncom.CoUninitialize()
