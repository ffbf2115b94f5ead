"""Centralized exit codes for the searchconfig CLI."""

from searchconfig.registration.models import RegistrationOutcome


class ExitCodes:
    """Standard exit codes for searchconfig commands."""

    SUCCESS = 0

    FAILURE = 1
    ELEVATION_REQUIRED = 2

    CONFLICTING_OPTIONS = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - COM API registered and functional",
            cls.FAILURE: "COM API unavailable - registration failed, declined or not attempted",
            cls.ELEVATION_REQUIRED: "Administrator privileges required for COM registration",
            cls.CONFLICTING_OPTIONS: "Invalid registration options (conflicting flags or bad timeout)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def for_outcome(cls, outcome: RegistrationOutcome) -> int:
        """Map a terminal registration outcome onto a process exit code."""
        if outcome is RegistrationOutcome.SUCCESS:
            return cls.SUCCESS
        if outcome is RegistrationOutcome.INSUFFICIENT_PRIVILEGES:
            return cls.ELEVATION_REQUIRED
        return cls.FAILURE
