"""Orchestration of the COM API registration workflow.

``RegistrationService.register`` walks a fixed sequence and always returns a
``RegistrationAttempt``; only invalid options raise (``ConfigurationError``).

    validate options -> detect -> (already registered: SUCCESS)
      -> refuse mode: FAILED
      -> interactive decision: CANCELLED on decline/abort
      -> partial registration: BINARY_NOT_FOUND
      -> privilege check: INSUFFICIENT_PRIVILEGES
      -> binary on disk: BINARY_NOT_FOUND
      -> invoke tool: TIMEOUT | FAILED
      -> re-detect: SUCCESS | VALIDATION_FAILED
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from typing import Protocol

from searchconfig.registration.audit import AuditSink
from searchconfig.registration.detector import StatusDetector, default_binary_path
from searchconfig.registration.invoker import InvocationStatus, ProcessInvoker
from searchconfig.registration.models import (
    Decision,
    RegistrationAttempt,
    RegistrationMode,
    RegistrationOptions,
    RegistrationOutcome,
    RegistrationStatus,
    ValidationState,
)
from searchconfig.utils.logging import logger

DecisionCallback = Callable[[RegistrationStatus], Decision]

DECLINED_BY_CONFIGURATION = "Registration declined by configuration (--no-register-com)"


class PrivilegeChecker(Protocol):
    def is_elevated(self) -> bool: ...

    def current_user(self) -> str: ...


class _Run:
    """Mutable scratch state for one run; frozen into a RegistrationAttempt at the end."""

    def __init__(self, mode: RegistrationMode, user: str, binary_path: str, started: float):
        self.mode = mode
        self.user = user
        self.binary_path = binary_path
        self.started = started
        self.is_privileged = False
        self.exit_code: int | None = None


class RegistrationService:
    """Turns options plus live system state into one terminal outcome."""

    def __init__(
        self,
        detector: StatusDetector,
        privilege_checker: PrivilegeChecker,
        invoker: ProcessInvoker,
        audit_sink: AuditSink | None = None,
        file_exists: Callable[[str], bool] = os.path.isfile,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.detector = detector
        self.privilege_checker = privilege_checker
        self.invoker = invoker
        self.audit_sink = audit_sink
        self._file_exists = file_exists
        self._clock = clock

    def register(
        self,
        options: RegistrationOptions,
        decide: DecisionCallback | None = None,
    ) -> RegistrationAttempt:
        """Run the workflow once.

        Args:
            options: Run configuration. Re-validated here; invalid options raise
                ConfigurationError before any detection happens.
            decide: Interactive decision point, consulted only when the component
                is missing and neither auto nor refuse mode is set. Without it the
                run is a manual request and proceeds straight to registration.
        """
        options.validate()

        mode = self._select_mode(options, decide)
        run = _Run(
            mode=mode,
            user=self._acting_user(),
            binary_path=options.binary_path_override or "",
            started=self._clock(),
        )
        logger.info("Starting COM registration run ({mode})", mode=mode.value)

        try:
            attempt = self._run(run, options, decide)
        except Exception as e:
            logger.opt(exception=True).error("Registration run failed unexpectedly")
            attempt = self._finish(
                run,
                RegistrationOutcome.FAILED,
                error=f"Unexpected error: {e}",
            )

        logger.info(
            "Registration run {id} finished: {outcome} ({ms}ms)",
            id=attempt.attempt_id,
            outcome=attempt.outcome.value,
            ms=attempt.duration_ms,
        )
        self._audit(attempt)
        return attempt

    def _run(
        self,
        run: _Run,
        options: RegistrationOptions,
        decide: DecisionCallback | None,
    ) -> RegistrationAttempt:
        status = self.detector.get_status()
        run.binary_path = (
            options.binary_path_override
            or status.resolved_binary_path
            or default_binary_path()
        )

        if status.is_registered:
            logger.debug("COM API already registered, skipping registration")
            return self._finish(
                run, RegistrationOutcome.SUCCESS, post_validation=ValidationState.VALID
            )

        if options.refuse_register:
            return self._finish(run, RegistrationOutcome.FAILED, error=DECLINED_BY_CONFIGURATION)

        if run.mode is RegistrationMode.INTERACTIVE:
            decision = decide(status)
            logger.debug("Interactive decision: {decision}", decision=decision.value)
            if decision is Decision.DECLINE:
                run.mode = RegistrationMode.DECLINED
                return self._finish(
                    run, RegistrationOutcome.CANCELLED, error="Registration declined by user"
                )
            if decision is not Decision.PROCEED:
                return self._finish(
                    run, RegistrationOutcome.CANCELLED, error="Registration cancelled by user"
                )

        # Key present but its binary is gone: re-registering cannot help
        if status.is_partial and not options.binary_path_override:
            return self._finish(
                run,
                RegistrationOutcome.BINARY_NOT_FOUND,
                error=f"COM class is registered but its DLL is missing: {run.binary_path}",
            )

        # Timed section: privilege check through re-validation
        run.started = self._clock()

        run.is_privileged = bool(self.privilege_checker.is_elevated())
        if not run.is_privileged:
            return self._finish(
                run,
                RegistrationOutcome.INSUFFICIENT_PRIVILEGES,
                error="Administrator privileges required for COM registration",
            )

        if not self._file_exists(run.binary_path):
            return self._finish(
                run,
                RegistrationOutcome.BINARY_NOT_FOUND,
                error=f"DLL not found: {run.binary_path}",
            )

        logger.info("Registering {path} via {tool}", path=run.binary_path, tool=self._mechanism())
        result = self.invoker.invoke(run.binary_path, options.timeout_seconds)

        if result.status is InvocationStatus.TIMED_OUT:
            return self._finish(
                run,
                RegistrationOutcome.TIMEOUT,
                error=result.error_output
                or f"Registration timed out after {options.timeout_seconds} seconds",
            )

        if result.status is InvocationStatus.NOT_STARTED:
            return self._finish(
                run,
                RegistrationOutcome.FAILED,
                error=result.error_output or f"Could not start {self._mechanism()}",
            )

        run.exit_code = result.exit_code
        if result.exit_code != 0:
            message = f"{self._mechanism()} failed with exit code {result.exit_code}"
            if result.error_output:
                message += f": {result.error_output}"
            return self._finish(run, RegistrationOutcome.FAILED, error=message)

        post = self.detector.get_status()
        if post.validation_state is ValidationState.VALID:
            return self._finish(
                run, RegistrationOutcome.SUCCESS, post_validation=ValidationState.VALID
            )

        logger.warning(
            "{tool} reported success but COM validation failed ({state})",
            tool=self._mechanism(),
            state=post.validation_state.value,
        )
        return self._finish(
            run,
            RegistrationOutcome.VALIDATION_FAILED,
            post_validation=post.validation_state,
            error=(
                "Registration appeared successful but the COM object cannot be "
                f"instantiated ({post.validation_state.value})"
            ),
        )

    def _finish(
        self,
        run: _Run,
        outcome: RegistrationOutcome,
        post_validation: ValidationState = ValidationState.NOT_CHECKED,
        error: str | None = None,
    ) -> RegistrationAttempt:
        duration_ms = max(0, int((self._clock() - run.started) * 1000))
        return RegistrationAttempt(
            mode=run.mode,
            acting_user=run.user,
            is_privileged=run.is_privileged,
            binary_path=run.binary_path,
            mechanism=self._mechanism(),
            outcome=outcome,
            exit_code=run.exit_code,
            error_message=error,
            duration_ms=duration_ms,
            post_validation=post_validation,
        )

    @staticmethod
    def _select_mode(
        options: RegistrationOptions, decide: DecisionCallback | None
    ) -> RegistrationMode:
        if options.auto_register:
            return RegistrationMode.AUTOMATIC
        if options.refuse_register:
            return RegistrationMode.DECLINED
        if decide is not None:
            return RegistrationMode.INTERACTIVE
        return RegistrationMode.MANUAL

    def _acting_user(self) -> str:
        try:
            return self.privilege_checker.current_user()
        except Exception as e:
            logger.debug("Could not resolve acting user: {err}", err=e)
            return "unknown"

    def _mechanism(self) -> str:
        return getattr(self.invoker, "mechanism", None) or "regsvr32"

    def _audit(self, attempt: RegistrationAttempt) -> None:
        if self.audit_sink is None:
            return
        try:
            self.audit_sink.record(attempt)
        except Exception as e:
            logger.warning("Audit sink rejected attempt {id}: {err}", id=attempt.attempt_id, err=e)
