"""Bounded execution of the external registration tool."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from searchconfig.utils.constants import REGISTRATION_TOOL
from searchconfig.utils.logging import logger

# Seconds to wait for a killed child to be reaped
KILL_GRACE_SECONDS = 5


class InvocationStatus(str, Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    NOT_STARTED = "not_started"


@dataclass(frozen=True)
class InvocationResult:
    """What happened to one tool invocation. ``exit_code`` is set only when COMPLETED."""

    status: InvocationStatus
    elapsed_ms: int
    exit_code: int | None = None
    error_output: str | None = None


class ProcessInvoker(Protocol):
    mechanism: str

    def invoke(self, path: str, timeout_seconds: int) -> InvocationResult: ...


def regsvr32_command(tool: str, path: str, silent: bool) -> list[str]:
    """Argument vector for regsvr32; ``/s`` suppresses its message boxes."""
    if silent:
        return [tool, "/s", path]
    return [tool, path]


class SubprocessInvoker:
    """Runs the registration tool and kills it if it outlives the timeout."""

    def __init__(
        self,
        tool: str = REGISTRATION_TOOL,
        silent: bool = True,
        command_builder: Callable[[str, str, bool], list[str]] = regsvr32_command,
    ):
        self.tool = tool
        self.silent = silent
        self.command_builder = command_builder

    @property
    def mechanism(self) -> str:
        return self.tool.rsplit("\\", 1)[-1].rsplit("/", 1)[-1].removesuffix(".exe")

    def invoke(self, path: str, timeout_seconds: int) -> InvocationResult:
        cmd = self.command_builder(self.tool, path, self.silent)
        logger.debug("Executing: {cmd}", cmd=" ".join(cmd))
        start = time.monotonic()

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                shell=False,
            )
        except (FileNotFoundError, PermissionError, OSError) as e:
            return InvocationResult(
                status=InvocationStatus.NOT_STARTED,
                elapsed_ms=_elapsed_ms(start),
                error_output=f"Could not start {self.tool}: {e}",
            )

        try:
            _stdout, stderr = process.communicate(timeout=timeout_seconds)
        except subprocess.TimeoutExpired:
            process.kill()
            try:
                process.communicate(timeout=KILL_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                logger.warning("Registration tool (pid {pid}) did not exit after kill", pid=process.pid)
            return InvocationResult(
                status=InvocationStatus.TIMED_OUT,
                elapsed_ms=_elapsed_ms(start),
                error_output=f"Registration timed out after {timeout_seconds} seconds",
            )

        return InvocationResult(
            status=InvocationStatus.COMPLETED,
            elapsed_ms=_elapsed_ms(start),
            exit_code=process.returncode,
            error_output=(stderr or "").strip() or None,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
