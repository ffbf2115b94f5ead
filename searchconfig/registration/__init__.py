"""COM API registration: detection, orchestration and audit."""

from .models import (
    ConfigurationError,
    Decision,
    RegistrationAttempt,
    RegistrationMode,
    RegistrationOptions,
    RegistrationOutcome,
    RegistrationStatus,
    ValidationState,
)

__all__ = [
    "ConfigurationError",
    "Decision",
    "RegistrationAttempt",
    "RegistrationMode",
    "RegistrationOptions",
    "RegistrationOutcome",
    "RegistrationStatus",
    "ValidationState",
]
