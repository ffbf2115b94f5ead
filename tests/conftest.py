"""Pytest configuration and fixtures.

Collaborator doubles for the registration workflow live here so that tests
never touch the real registry, COM runtime or regsvr32.
"""

import pytest

from searchconfig.registration.invoker import InvocationResult, InvocationStatus
from searchconfig.registration.models import RegistrationStatus, ValidationState
from searchconfig.registration.probe import ProbeResult
from searchconfig.registration.registry import RegistryLookup, clsid_key, inproc_server_key
from searchconfig.utils.constants import SEARCH_MANAGER_CLSID

DLL_PATH = r"C:\Windows\System32\SearchAPI.dll"


class FakeRegistry:
    """In-memory HKCR: ``keys`` maps subkey -> default value (or None)."""

    def __init__(self, keys=None, errors=None):
        self.keys = dict(keys or {})
        self.errors = dict(errors or {})
        self.reads = 0

    def key_exists(self, subkey):
        self.reads += 1
        if subkey in self.errors:
            return RegistryLookup(found=False, error=self.errors[subkey])
        return RegistryLookup(found=subkey in self.keys)

    def read_default_value(self, subkey):
        self.reads += 1
        if subkey in self.errors:
            return RegistryLookup(found=False, error=self.errors[subkey])
        value = self.keys.get(subkey)
        if value is None:
            return RegistryLookup(found=False)
        return RegistryLookup(found=True, value=value)


def registered_keys(dll_value=DLL_PATH):
    return {
        clsid_key(SEARCH_MANAGER_CLSID): None,
        inproc_server_key(SEARCH_MANAGER_CLSID): dll_value,
    }


class FakeProbe:
    def __init__(self, state=ValidationState.VALID, message=None):
        self.result = ProbeResult(state, message)
        self.calls = 0

    def probe(self, clsid):
        self.calls += 1
        return self.result


class FakePrivilegeChecker:
    def __init__(self, elevated=True, user="tester"):
        self.elevated = elevated
        self.user = user
        self.calls = 0

    def is_elevated(self):
        self.calls += 1
        return self.elevated

    def current_user(self):
        return self.user


class FakeInvoker:
    """Records invocations and replays a canned result."""

    mechanism = "regsvr32"

    def __init__(self, result=None):
        self.result = result or InvocationResult(
            status=InvocationStatus.COMPLETED, elapsed_ms=12, exit_code=0
        )
        self.calls = []

    def invoke(self, path, timeout_seconds):
        self.calls.append((path, timeout_seconds))
        return self.result


class SequenceDetector:
    """Returns queued statuses in order, repeating the last one."""

    def __init__(self, *statuses):
        self.statuses = list(statuses)
        self.calls = 0

    def get_status(self):
        index = min(self.calls, len(self.statuses) - 1)
        self.calls += 1
        return self.statuses[index]

    def resolve_binary_path(self, clsid=None):
        return self.statuses[0].resolved_binary_path


def make_status(
    registered=False,
    key=True,
    binary_exists=True,
    state=None,
    path=DLL_PATH,
    error=None,
):
    if state is None:
        state = ValidationState.VALID if registered else ValidationState.INSTANTIATION_FAILED
    if not key:
        path = None
        state = ValidationState.IDENTITY_NOT_FOUND if state is not ValidationState.VALID else state
    return RegistrationStatus(
        is_registered=registered,
        identity_key_exists=key,
        resolved_binary_path=path,
        binary_exists=binary_exists,
        validation_state=state,
        error_message=error,
    )


@pytest.fixture
def registered_status():
    return make_status(registered=True)


@pytest.fixture
def missing_status():
    """CLSID key absent altogether."""
    return make_status(key=False, binary_exists=False)


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def unprivileged():
    return FakePrivilegeChecker(elevated=False)


@pytest.fixture(autouse=True)
def _system_root(monkeypatch):
    """Pin %SystemRoot% so default DLL paths are deterministic on any host."""
    monkeypatch.setenv("SystemRoot", r"C:\Windows")
