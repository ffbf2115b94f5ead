"""searchconfig CLI - main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import platform
import subprocess
import sys
from dataclasses import dataclass
from typing import Any

import click

from searchconfig import __version__
from searchconfig.config_runtime import load_runtime_config
from searchconfig.registration.models import ConfigurationError, RegistrationOptions
from searchconfig.ui import console, print_error
from searchconfig.utils.exit_codes import ExitCodes
from searchconfig.utils.logging import logger, set_console_level

if platform.system() == "Windows":
    subprocess.run(["cmd", "/c", "chcp", "65001"], shell=False, capture_output=True, timeout=1)


@dataclass
class CliState:
    """Resolved settings shared by every subcommand through ``ctx.obj``."""

    options: RegistrationOptions
    config: dict[str, Any]


@click.group()
@click.version_option(version=__version__, prog_name="searchconfig")
@click.help_option("-h", "--help")
@click.option(
    "--auto-register-com",
    "auto_register",
    is_flag=True,
    help="Register the COM API without prompting if it is missing",
)
@click.option(
    "--no-register-com",
    "refuse_register",
    is_flag=True,
    help="Fail immediately if the COM API is missing (never register)",
)
@click.option(
    "--silent/--no-silent",
    default=None,
    help="Run regsvr32 with /s (no message boxes). Default from config: on",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=int,
    default=None,
    help="Seconds to wait for regsvr32 (1-60, default 30)",
)
@click.option("--dll-path", default=None, help="Register this DLL instead of the registry/default path")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose diagnostic output")
@click.pass_context
def cli(ctx, auto_register, refuse_register, silent, timeout_seconds, dll_path, verbose):
    """Windows Search Configurator - manage the Windows Search COM API registration.

    \b
    QUICK START:
      searchconfig com status                  # Is the COM API usable?
      searchconfig ensure                      # Detect, offer to register if missing
      searchconfig --auto-register-com ensure  # Register without prompting (admin)
      searchconfig --no-register-com ensure    # Never register, fail if missing

    \b
    EXIT CODES:
      0 = COM API registered and functional
      1 = Registration failed, timed out, declined or not attempted
      2 = Administrator privileges required
      3 = Conflicting or invalid registration options"""
    if verbose:
        set_console_level("DEBUG")

    config = load_runtime_config()
    reg_cfg = config["registration"]

    options = RegistrationOptions(
        auto_register=auto_register,
        refuse_register=refuse_register,
        silent=reg_cfg["silent"] if silent is None else silent,
        timeout_seconds=reg_cfg["timeout_seconds"] if timeout_seconds is None else timeout_seconds,
        binary_path_override=dll_path,
    )

    try:
        options.validate()
    except ConfigurationError as e:
        print_error(str(e))
        if e.conflicting:
            console.print()
            console.print("Use --auto-register-com to register automatically if needed,")
            console.print("or --no-register-com to fail immediately if not registered.")
        logger.debug("Rejected registration options: {opts}", opts=options)
        sys.exit(ExitCodes.CONFLICTING_OPTIONS)

    ctx.obj = CliState(options=options, config=config)


from searchconfig.commands.com import com, ensure

cli.add_command(com)
cli.add_command(ensure)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
