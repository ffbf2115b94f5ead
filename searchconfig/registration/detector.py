"""Side-effect-free detection of the Windows Search COM API registration.

Every call recomputes from live system state; nothing is cached between calls,
so two detections without an intervening registration agree with each other.
None of the public methods raise.
"""

from __future__ import annotations

import ntpath
import os

from searchconfig.registration.models import RegistrationStatus, ValidationState, utc_now
from searchconfig.registration.probe import ComponentProbe, ProbeResult, Win32ComProbe
from searchconfig.registration.registry import (
    RegistryLookup,
    RegistryReader,
    WinRegistryReader,
    clsid_key,
    inproc_server_key,
)
from searchconfig.utils.constants import DEFAULT_SYSTEM_ROOT, SEARCH_API_DLL, SEARCH_MANAGER_CLSID
from searchconfig.utils.logging import logger


def expand_binary_path(raw: str) -> str:
    """Expand ``%VAR%`` references and strip quoting from a registry path."""
    return ntpath.expandvars(raw.strip().strip('"'))


class StatusDetector:
    """Builds ``RegistrationStatus`` snapshots for one COM class."""

    def __init__(
        self,
        registry: RegistryReader | None = None,
        probe: ComponentProbe | None = None,
        clsid: str = SEARCH_MANAGER_CLSID,
        file_exists=os.path.isfile,
    ):
        self.registry = registry or WinRegistryReader()
        self.component_probe = probe or Win32ComProbe()
        self.clsid = clsid
        self._file_exists = file_exists

    def get_status(self) -> RegistrationStatus:
        detected_at = utc_now()
        errors: list[str] = []

        try:
            identity = self._lookup_identity(self.clsid)
            if identity.error:
                errors.append(identity.error)

            binary_path = None
            binary_exists = False
            # A failed read says nothing about whether the key exists
            state = (
                ValidationState.UNKNOWN_ERROR
                if identity.error
                else ValidationState.IDENTITY_NOT_FOUND
            )

            if identity.found:
                binary_lookup = self._lookup_binary(self.clsid)
                if binary_lookup.error:
                    errors.append(binary_lookup.error)
                if binary_lookup.found and binary_lookup.value:
                    binary_path = expand_binary_path(binary_lookup.value)
                    binary_exists = self._binary_exists(binary_path, errors)

                result = self._probe(self.clsid)
                state = result.state
                if result.message and state is not ValidationState.VALID:
                    errors.append(result.message)

            is_registered = (
                identity.found and binary_exists and state is ValidationState.VALID
            )
            status = RegistrationStatus(
                is_registered=is_registered,
                identity_key_exists=identity.found,
                resolved_binary_path=binary_path,
                binary_exists=binary_exists,
                validation_state=state,
                detection_timestamp=detected_at,
                error_message="; ".join(errors) or None,
            )
        except Exception as e:
            logger.opt(exception=True).debug("Detection failed")
            status = RegistrationStatus(
                is_registered=False,
                identity_key_exists=False,
                resolved_binary_path=None,
                binary_exists=False,
                validation_state=ValidationState.UNKNOWN_ERROR,
                detection_timestamp=detected_at,
                error_message=f"Detection failed: {e}",
            )

        logger.debug(
            "COM status: registered={reg} key={key} binary={path} exists={exists} state={state}",
            reg=status.is_registered,
            key=status.identity_key_exists,
            path=status.resolved_binary_path,
            exists=status.binary_exists,
            state=status.validation_state.value,
        )
        return status

    def is_identity_registered(self, clsid: str | None = None) -> bool:
        return self._lookup_identity(clsid or self.clsid).found

    def resolve_binary_path(self, clsid: str | None = None) -> str | None:
        lookup = self._lookup_binary(clsid or self.clsid)
        if not lookup.found or not lookup.value:
            return None
        return expand_binary_path(lookup.value)

    def validate_component(self, clsid: str | None = None) -> ValidationState:
        """Probe the class: absent identity, failed instantiation and other errors differ."""
        target = clsid or self.clsid
        identity = self._lookup_identity(target)
        if identity.error:
            return ValidationState.UNKNOWN_ERROR
        if not identity.found:
            return ValidationState.IDENTITY_NOT_FOUND
        return self._probe(target).state

    def _lookup_identity(self, clsid: str) -> RegistryLookup:
        try:
            return self.registry.key_exists(clsid_key(clsid))
        except Exception as e:
            return RegistryLookup(found=False, error=f"Registry read failed: {e}")

    def _lookup_binary(self, clsid: str) -> RegistryLookup:
        try:
            return self.registry.read_default_value(inproc_server_key(clsid))
        except Exception as e:
            return RegistryLookup(found=False, error=f"Registry read failed: {e}")

    def _probe(self, clsid: str) -> ProbeResult:
        try:
            return self.component_probe.probe(clsid)
        except Exception as e:
            return ProbeResult(ValidationState.UNKNOWN_ERROR, f"Unexpected probe error: {e}")

    def _binary_exists(self, path: str, errors: list[str]) -> bool:
        try:
            return bool(self._file_exists(path))
        except OSError as e:
            errors.append(f"Could not check {path}: {e}")
            return False


def default_binary_path() -> str:
    """``%SystemRoot%\\System32\\SearchAPI.dll``, the stock install location."""
    system_root = os.environ.get("SystemRoot") or DEFAULT_SYSTEM_ROOT
    return ntpath.join(system_root, "System32", SEARCH_API_DLL)
