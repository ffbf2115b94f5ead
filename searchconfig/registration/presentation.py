"""Human-facing messages for registration status and attempts.

Message selection is driven only by ``RegistrationOutcome``, ``ValidationState``
and the recorded error text.
"""

from __future__ import annotations

import click
from rich.markup import escape
from rich.table import Table

from searchconfig.registration.models import (
    Decision,
    RegistrationAttempt,
    RegistrationMode,
    RegistrationOutcome,
    RegistrationStatus,
    ValidationState,
)
from searchconfig.ui import console, print_error, print_header, print_status_panel, print_success

REMEDIATION: dict[RegistrationOutcome, list[str]] = {
    RegistrationOutcome.INSUFFICIENT_PRIVILEGES: [
        "Run this tool as Administrator (right-click -> Run as Administrator)",
        "Or use manual registration with an elevated Command Prompt",
    ],
    RegistrationOutcome.BINARY_NOT_FOUND: [
        "Verify Windows Search is installed",
        "Check that SearchAPI.dll exists in System32",
        "Re-install the Windows Search feature if necessary",
    ],
    RegistrationOutcome.TIMEOUT: [
        "Try manual registration with regsvr32",
        "Check that the Windows Search service is running",
    ],
    RegistrationOutcome.VALIDATION_FAILED: [
        "Registration command completed but the COM object cannot be instantiated",
        "Try restarting the Windows Search service",
        "Try manual registration with regsvr32",
    ],
    RegistrationOutcome.CANCELLED: [
        "Re-run the command and accept registration, or register manually",
    ],
}

DEFAULT_REMEDIATION = [
    "Try manual registration (see: searchconfig com instructions)",
    "Check Windows Event Viewer for additional details",
]

VALIDATION_DETAILS: dict[ValidationState, str] = {
    ValidationState.IDENTITY_NOT_FOUND: "CLSID not found in registry",
    ValidationState.INSTANTIATION_FAILED: "COM object could not be instantiated",
    ValidationState.NATIVE_EXCEPTION: "COM runtime raised an error while instantiating the object",
    ValidationState.UNKNOWN_ERROR: "Unexpected error while validating the COM object",
    ValidationState.NOT_CHECKED: "COM object was not validated",
}

PROMPT_CHOICES = {
    "a": Decision.PROCEED,
    "accept": Decision.PROCEED,
    "d": Decision.DECLINE,
    "decline": Decision.DECLINE,
    "q": Decision.ABORT,
    "quit": Decision.ABORT,
}


def remediation_for(outcome: RegistrationOutcome) -> list[str]:
    return REMEDIATION.get(outcome, DEFAULT_REMEDIATION)


def describe_status(status: RegistrationStatus) -> str:
    """One-line reason why a component is (not) usable."""
    if status.is_registered:
        return "COM API is registered and functional"
    if not status.identity_key_exists:
        if status.validation_state is ValidationState.UNKNOWN_ERROR:
            return "Could not read the CLSID registry key"
        return VALIDATION_DETAILS[ValidationState.IDENTITY_NOT_FOUND]
    if not status.binary_exists:
        return f"DLL not found at path: {status.resolved_binary_path or '(no InprocServer32 value)'}"
    return f"COM object validation failed ({status.validation_state.value})"


def _key_state(status: RegistrationStatus) -> str:
    if status.identity_key_exists:
        return "present"
    if status.validation_state is ValidationState.UNKNOWN_ERROR:
        return "unknown"
    return "missing"


def show_status(status: RegistrationStatus) -> None:
    print_header("COM API REGISTRATION STATUS")
    table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
    table.add_column("Field", style="info")
    table.add_column("Value")
    table.add_row("Registered", "yes" if status.is_registered else "no")
    table.add_row("CLSID key", _key_state(status))
    table.add_row("DLL path", escape(status.resolved_binary_path or "-"))
    table.add_row("DLL exists", "yes" if status.binary_exists else "no")
    table.add_row("Validation", status.validation_state.value)
    table.add_row("Checked at", status.detection_timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"))
    if status.error_message:
        table.add_row("Error", escape(status.error_message))
    console.print(table)


def show_not_registered(status: RegistrationStatus) -> None:
    print_error("Microsoft Windows Search COM API is not registered.")
    console.print()
    console.print("This tool requires the API to talk to the Windows Search service. It is")
    console.print("normally installed with Windows Search but may not be registered on this system.")
    console.print()
    console.print(f"Details: {escape(describe_status(status))}")
    if status.error_message:
        console.print(f"Error: {escape(status.error_message)}")


def prompt_registration(status: RegistrationStatus) -> Decision:
    """Tri-state decision point. Ctrl-C, EOF or unknown input abort."""
    show_not_registered(status)
    console.print()
    console.print("Would you like to attempt automatic registration?")
    console.print()
    console.print("  \\[A] Accept  - Attempt automatic registration (requires admin privileges)")
    console.print("  \\[D] Decline - Show manual registration instructions")
    console.print("  \\[Q] Quit    - Exit without registering")
    console.print()
    try:
        choice = click.prompt("Your choice [A/D/Q]", default="q", show_default=False)
    except (click.Abort, EOFError, KeyboardInterrupt):
        return Decision.ABORT
    return PROMPT_CHOICES.get(str(choice).strip().lower(), Decision.ABORT)


def show_registration_in_progress(binary_path: str) -> None:
    console.print(f"[info]Registering COM API[/info] ([path]{escape(binary_path)}[/path])...")


def show_manual_instructions(binary_path: str) -> None:
    print_header("MANUAL COM REGISTRATION")
    console.print("1. Open an elevated Command Prompt (Run as Administrator)")
    console.print("2. Run the following command:")
    console.print()
    console.print(f'   [cmd]regsvr32 "{escape(binary_path)}"[/cmd]')
    console.print()
    console.print('3. You should see: "DllRegisterServer in \\[path] succeeded."')
    console.print("4. Re-run this tool to verify registration.")


def show_elevation_instructions() -> None:
    print_header("ADMINISTRATOR PRIVILEGES REQUIRED")
    console.print("COM registration requires administrator privileges.")
    console.print()
    console.print("1. Close this window")
    console.print("2. Right-click Command Prompt or PowerShell and select 'Run as Administrator'")
    console.print("3. Re-run this tool - it will offer registration again")


def show_attempt(attempt: RegistrationAttempt) -> None:
    """Report a finished run, with troubleshooting for anything but success."""
    if attempt.succeeded:
        print_success("COM API is registered and functional.")
        return

    if attempt.mode is RegistrationMode.DECLINED:
        show_manual_instructions(attempt.binary_path)
        if attempt.outcome is RegistrationOutcome.FAILED:
            console.print()
            console.print("[dim]Registration was not attempted because --no-register-com was given.[/dim]")
        return

    if attempt.outcome is RegistrationOutcome.CANCELLED:
        console.print("[dim]Registration cancelled.[/dim]")
        return

    detail = attempt.error_message or "No further details"
    if attempt.exit_code not in (None, 0):
        detail = f"{detail} (exit code {attempt.exit_code})"
    print_status_panel(
        attempt.outcome.value.upper(),
        "COM registration did not complete",
        detail,
        level="error",
    )

    console.print("Troubleshooting:")
    for line in remediation_for(attempt.outcome):
        console.print(f"  - {line}")

    if attempt.outcome is RegistrationOutcome.INSUFFICIENT_PRIVILEGES:
        console.print()
        show_elevation_instructions()
