"""Tests for StatusDetector against in-memory registry and probe doubles."""

import dataclasses

import pytest

from conftest import DLL_PATH, FakeProbe, FakeRegistry, registered_keys
from searchconfig.registration.detector import (
    StatusDetector,
    default_binary_path,
    expand_binary_path,
)
from searchconfig.registration.models import ValidationState
from searchconfig.registration.presentation import describe_status
from searchconfig.registration.registry import clsid_key, inproc_server_key, normalize_clsid
from searchconfig.utils.constants import SEARCH_MANAGER_CLSID


def _detector(keys=None, probe=None, existing=(DLL_PATH,), errors=None):
    return StatusDetector(
        registry=FakeRegistry(keys if keys is not None else registered_keys(), errors=errors),
        probe=probe or FakeProbe(),
        file_exists=lambda path: path in existing,
    )


def test_fully_registered():
    status = _detector().get_status()
    assert status.is_registered
    assert status.identity_key_exists
    assert status.resolved_binary_path == DLL_PATH
    assert status.binary_exists
    assert status.validation_state is ValidationState.VALID
    assert status.error_message is None


def test_missing_identity_key_skips_probe():
    probe = FakeProbe()
    status = _detector(keys={}, probe=probe).get_status()
    assert not status.is_registered
    assert not status.identity_key_exists
    assert status.resolved_binary_path is None
    assert status.validation_state is ValidationState.IDENTITY_NOT_FOUND
    assert probe.calls == 0


def test_partial_registration_binary_missing():
    status = _detector(existing=()).get_status()
    assert not status.is_registered
    assert status.identity_key_exists
    assert not status.binary_exists
    assert status.is_partial


def test_key_without_inproc_server_value():
    keys = {clsid_key(SEARCH_MANAGER_CLSID): None}
    status = _detector(keys=keys).get_status()
    assert status.identity_key_exists
    assert status.resolved_binary_path is None
    assert not status.binary_exists
    assert not status.is_registered


@pytest.mark.parametrize(
    "state",
    [
        ValidationState.INSTANTIATION_FAILED,
        ValidationState.NATIVE_EXCEPTION,
        ValidationState.UNKNOWN_ERROR,
    ],
)
def test_probe_failure_is_not_registered(state):
    status = _detector(probe=FakeProbe(state, "probe said no")).get_status()
    assert not status.is_registered
    assert status.validation_state is state
    assert "probe said no" in status.error_message


def test_registry_permission_error_folded_into_message():
    errors = {clsid_key(SEARCH_MANAGER_CLSID): "Access denied reading registry key"}
    status = _detector(errors=errors).get_status()
    assert not status.is_registered
    assert not status.identity_key_exists
    assert "Access denied" in status.error_message
    assert status.validation_state is ValidationState.UNKNOWN_ERROR


def test_raising_registry_never_escapes():
    class ExplodingRegistry:
        def key_exists(self, subkey):
            raise OSError("registry hive unavailable")

        def read_default_value(self, subkey):
            raise OSError("registry hive unavailable")

    detector = StatusDetector(registry=ExplodingRegistry(), probe=FakeProbe())
    status = detector.get_status()
    assert not status.is_registered
    assert "registry hive unavailable" in status.error_message
    assert detector.is_identity_registered() is False
    assert detector.resolve_binary_path() is None
    assert status.validation_state is ValidationState.UNKNOWN_ERROR
    assert detector.validate_component() is ValidationState.UNKNOWN_ERROR


def test_raising_probe_maps_to_unknown_error():
    class ExplodingProbe:
        def probe(self, clsid):
            raise RuntimeError("boom")

    detector = StatusDetector(
        registry=FakeRegistry(registered_keys()),
        probe=ExplodingProbe(),
        file_exists=lambda path: True,
    )
    assert detector.validate_component() is ValidationState.UNKNOWN_ERROR
    status = detector.get_status()
    assert status.validation_state is ValidationState.UNKNOWN_ERROR
    assert "boom" in status.error_message


def test_raising_file_check_is_folded():
    def broken_exists(path):
        raise PermissionError("denied")

    detector = StatusDetector(
        registry=FakeRegistry(registered_keys()),
        probe=FakeProbe(),
        file_exists=broken_exists,
    )
    status = detector.get_status()
    assert not status.binary_exists
    assert not status.is_registered
    assert "denied" in status.error_message


def test_detection_is_idempotent():
    detector = _detector()
    first = detector.get_status()
    second = detector.get_status()
    assert dataclasses.replace(first, detection_timestamp=second.detection_timestamp) == second


def test_detection_is_idempotent_when_missing():
    detector = _detector(keys={})
    first = detector.get_status()
    second = detector.get_status()
    assert first.is_registered == second.is_registered
    assert first.validation_state == second.validation_state


def test_environment_variables_are_expanded(monkeypatch):
    monkeypatch.setenv("SystemRoot", r"D:\Win")
    keys = registered_keys(r'"%SystemRoot%\System32\SearchAPI.dll"')
    detector = _detector(keys=keys, existing=(r"D:\Win\System32\SearchAPI.dll",))
    status = detector.get_status()
    assert status.resolved_binary_path == r"D:\Win\System32\SearchAPI.dll"
    assert status.is_registered


def test_sub_operations_on_registered_system():
    detector = _detector()
    assert detector.is_identity_registered(SEARCH_MANAGER_CLSID)
    assert detector.resolve_binary_path(SEARCH_MANAGER_CLSID) == DLL_PATH
    assert detector.validate_component(SEARCH_MANAGER_CLSID) is ValidationState.VALID


def test_expand_binary_path_strips_quotes():
    assert expand_binary_path('  "C:\\x\\y.dll" ') == "C:\\x\\y.dll"


def test_default_binary_path_uses_system_root(monkeypatch):
    monkeypatch.setenv("SystemRoot", r"E:\Windows")
    assert default_binary_path() == r"E:\Windows\System32\SearchAPI.dll"


def test_default_binary_path_without_system_root(monkeypatch):
    monkeypatch.delenv("SystemRoot", raising=False)
    assert default_binary_path() == r"C:\Windows\System32\SearchAPI.dll"


def test_clsid_key_spelling():
    assert normalize_clsid("7d096c5f-ac08-4f1f-beb7-5c22c517ce39") == SEARCH_MANAGER_CLSID
    assert clsid_key(SEARCH_MANAGER_CLSID) == "CLSID\\" + SEARCH_MANAGER_CLSID
    assert inproc_server_key(SEARCH_MANAGER_CLSID).endswith("\\InprocServer32")


def test_unreadable_key_is_not_reported_as_missing():
    errors = {clsid_key(SEARCH_MANAGER_CLSID): "Access denied reading registry key"}
    detector = _detector(errors=errors)
    assert detector.validate_component() is ValidationState.UNKNOWN_ERROR

    status = detector.get_status()
    assert describe_status(status) == "Could not read the CLSID registry key"


def test_absent_key_still_reports_identity_not_found():
    detector = _detector(keys={})
    assert detector.validate_component() is ValidationState.IDENTITY_NOT_FOUND
    assert describe_status(detector.get_status()) == "CLSID not found in registry"
