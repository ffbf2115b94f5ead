"""COM API registration commands: status, register, instructions and the ensure gate."""

import json
import sys

import click

from searchconfig.registration.audit import FileAuditSink
from searchconfig.registration.detector import StatusDetector, default_binary_path
from searchconfig.registration.invoker import SubprocessInvoker
from searchconfig.registration.models import ConfigurationError, RegistrationOptions
from searchconfig.registration.presentation import (
    prompt_registration,
    show_attempt,
    show_manual_instructions,
    show_not_registered,
    show_registration_in_progress,
    show_status,
)
from searchconfig.registration.privilege import PrivilegeChecker
from searchconfig.registration.service import RegistrationService
from searchconfig.ui import console, print_error, print_success
from searchconfig.utils.error_handler import handle_exceptions
from searchconfig.utils.exit_codes import ExitCodes
from searchconfig.utils.logging import logger


def build_detector() -> StatusDetector:
    return StatusDetector()


def build_service(config: dict, options: RegistrationOptions) -> RegistrationService:
    """Wire the production collaborators for one registration run."""
    return RegistrationService(
        detector=build_detector(),
        privilege_checker=PrivilegeChecker(),
        invoker=SubprocessInvoker(tool=config["registration"]["tool"], silent=options.silent),
        audit_sink=FileAuditSink(config["paths"]["audit_dir"]),
    )


def _run_registration(state, decide=None) -> int:
    """Run the engine once, report, and return the process exit code."""
    options = state.options
    service = build_service(state.config, options)

    if options.auto_register:
        console.print("[info]INFO:[/info] Attempting automatic COM API registration...")

    try:
        attempt = service.register(options, decide=decide)
    except ConfigurationError as e:
        print_error(str(e))
        return ExitCodes.CONFLICTING_OPTIONS

    show_attempt(attempt)
    exit_code = ExitCodes.for_outcome(attempt.outcome)
    logger.debug(
        "Attempt {id}: {outcome} -> exit {code} ({meaning})",
        id=attempt.attempt_id,
        outcome=attempt.outcome.value,
        code=exit_code,
        meaning=ExitCodes.get_description(exit_code),
    )
    return exit_code


@click.group("com")
def com():
    """Inspect and register the Windows Search COM API.

    \b
    SUBCOMMANDS:
      status        Show the current registration snapshot (read-only)
      register      Register SearchAPI.dll with regsvr32 (admin)
      instructions  Print manual registration steps
    """


@com.command("status")
@handle_exceptions
@click.option("--json", "as_json", is_flag=True, help="Emit the snapshot as JSON")
def status(as_json):
    """Show whether the COM API is registered and functional.

    Reads the CLSID registry key, resolves InprocServer32, checks the DLL on
    disk and probes the class with a create-then-release call. Never modifies
    the system.

    \b
    EXIT CODES:
      0 = Registered and functional
      1 = Missing, partial or not instantiable
    """
    snapshot = build_detector().get_status()

    if as_json:
        console.print(json.dumps(snapshot.to_dict(), indent=2), markup=False)
    else:
        show_status(snapshot)

    sys.exit(ExitCodes.SUCCESS if snapshot.is_registered else ExitCodes.FAILURE)


@com.command("register")
@handle_exceptions
@click.pass_obj
def register(state):
    """Register the COM API now (requires administrator privileges).

    Runs once, with no retry. The DLL comes from --dll-path, else the
    registry InprocServer32 value, else %SystemRoot%\\System32\\SearchAPI.dll.
    Every run is appended to the audit trail in .searchconfig/audit/.

    \b
    EXIT CODES:
      0 = Registered (or already registered)
      1 = Failed, timed out, DLL missing or not functional after registration
      2 = Administrator privileges required
    """
    show_registration_in_progress(state.options.binary_path_override or "registry/default DLL")
    sys.exit(_run_registration(state))


@com.command("instructions")
@handle_exceptions
@click.pass_obj
def instructions(state):
    """Print the steps to register the COM API manually with regsvr32."""
    path = (
        state.options.binary_path_override
        or build_detector().resolve_binary_path()
        or default_binary_path()
    )
    show_manual_instructions(path)


@click.command("ensure")
@handle_exceptions
@click.pass_obj
def ensure(state):
    """Make sure the COM API is usable, registering it if allowed.

    \b
    MODES:
      (no flag)             Prompt: Accept / Decline / Quit
      --auto-register-com   Register without prompting
      --no-register-com     Fail immediately when missing

    \b
    EXIT CODES:
      0 = COM API registered and functional
      1 = Failed, timed out, declined, cancelled or not functional
      2 = Administrator privileges required
      3 = Conflicting flags
    """
    detector = build_detector()
    snapshot = detector.get_status()

    if snapshot.is_registered:
        print_success("COM API is registered and functional.")
        sys.exit(ExitCodes.SUCCESS)

    logger.info(
        "COM API not registered. CLSID exists: {key}, DLL exists: {dll}, validation: {state}",
        key=snapshot.identity_key_exists,
        dll=snapshot.binary_exists,
        state=snapshot.validation_state.value,
    )

    options = state.options
    if options.auto_register or options.refuse_register:
        show_not_registered(snapshot)
        console.print()
        sys.exit(_run_registration(state))

    sys.exit(_run_registration(state, decide=prompt_registration))
