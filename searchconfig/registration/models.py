"""Value objects for COM API registration detection and orchestration.

``RegistrationStatus`` is a detection snapshot, ``RegistrationOptions`` is the
validated configuration of a run and ``RegistrationAttempt`` is the audit
record a run produces. All three are frozen; invariants are checked on
construction.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from searchconfig.utils.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
)


class ConfigurationError(ValueError):
    """Invalid registration options, rejected before touching the system."""

    def __init__(self, message: str, conflicting: bool = False):
        super().__init__(message)
        self.conflicting = conflicting


class ValidationState(str, Enum):
    """Result of the instantiate-then-release probe."""

    NOT_CHECKED = "not_checked"
    VALID = "valid"
    IDENTITY_NOT_FOUND = "identity_not_found"
    INSTANTIATION_FAILED = "instantiation_failed"
    NATIVE_EXCEPTION = "native_exception"
    UNKNOWN_ERROR = "unknown_error"


class RegistrationMode(str, Enum):
    INTERACTIVE = "interactive"
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    DECLINED = "declined"


class RegistrationOutcome(str, Enum):
    """Terminal outcome of one orchestration run."""

    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    INSUFFICIENT_PRIVILEGES = "insufficient_privileges"
    BINARY_NOT_FOUND = "binary_not_found"
    CANCELLED = "cancelled"
    VALIDATION_FAILED = "validation_failed"


class Decision(str, Enum):
    """Answer collected at the interactive decision point."""

    PROCEED = "proceed"
    DECLINE = "decline"
    ABORT = "abort"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class RegistrationStatus:
    """Snapshot of the COM registration state at ``detection_timestamp``."""

    is_registered: bool
    identity_key_exists: bool
    resolved_binary_path: str | None
    binary_exists: bool
    validation_state: ValidationState
    detection_timestamp: datetime = field(default_factory=utc_now)
    error_message: str | None = None

    def __post_init__(self):
        if self.is_registered and self.validation_state is not ValidationState.VALID:
            raise ValueError("A registered component must have validation_state VALID")
        if not self.identity_key_exists and self.resolved_binary_path:
            raise ValueError("resolved_binary_path requires the identity key to exist")

    @property
    def is_partial(self) -> bool:
        """Key present in the registry but the binary it points at is missing."""
        return self.identity_key_exists and not self.binary_exists

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["validation_state"] = self.validation_state.value
        data["detection_timestamp"] = self.detection_timestamp.isoformat()
        return data


@dataclass(frozen=True)
class RegistrationOptions:
    """How a registration run is allowed to proceed.

    ``auto_register`` and ``refuse_register`` are mutually exclusive; with
    neither set the run is interactive (or manual when no prompt is wired).
    """

    auto_register: bool = False
    refuse_register: bool = False
    silent: bool = False
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    binary_path_override: str | None = None

    def validate(self) -> None:
        """Raise ConfigurationError if the options cannot be acted on."""
        if self.auto_register and self.refuse_register:
            raise ConfigurationError(
                "--auto-register-com and --no-register-com are mutually exclusive",
                conflicting=True,
            )
        if isinstance(self.timeout_seconds, bool) or not isinstance(self.timeout_seconds, int):
            raise ConfigurationError(
                f"timeout_seconds must be an integer, got {self.timeout_seconds!r}"
            )
        if not MIN_TIMEOUT_SECONDS <= self.timeout_seconds <= MAX_TIMEOUT_SECONDS:
            raise ConfigurationError(
                f"timeout_seconds must be between {MIN_TIMEOUT_SECONDS} and "
                f"{MAX_TIMEOUT_SECONDS}, got {self.timeout_seconds}"
            )


def new_attempt_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RegistrationAttempt:
    """Audit record for one orchestration run. Written once, then only read."""

    mode: RegistrationMode
    acting_user: str
    is_privileged: bool
    binary_path: str
    outcome: RegistrationOutcome
    post_validation: ValidationState
    duration_ms: int
    mechanism: str = "regsvr32"
    exit_code: int | None = None
    error_message: str | None = None
    attempt_id: str = field(default_factory=new_attempt_id)
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        succeeded = self.outcome is RegistrationOutcome.SUCCESS
        valid = self.post_validation is ValidationState.VALID
        if succeeded != valid:
            raise ValueError(
                f"outcome {self.outcome.value} is inconsistent with "
                f"post_validation {self.post_validation.value}"
            )
        if self.outcome is RegistrationOutcome.FAILED and not self.error_message:
            raise ValueError("A failed attempt must carry an error_message")
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")

    @property
    def succeeded(self) -> bool:
        return self.outcome is RegistrationOutcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form used by the audit trail."""
        data = asdict(self)
        data["mode"] = self.mode.value
        data["outcome"] = self.outcome.value
        data["post_validation"] = self.post_validation.value
        data["timestamp"] = self.timestamp.isoformat()
        return data
