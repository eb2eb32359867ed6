# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Top-level error handling for ankh commands.

`ErrorTrap` is armed at the start of a command. While armed, termination
signals are converted into `AnkhInterruptedError` exceptions which propagate up
the call chain like any other ankh error. The command catches errors at the top
and hands them to `ErrorTrap.fire`, which reports the exit code category and a
remediation hint and terminates the process with the original exit code.

The trap never retries anything. Recovery is left to the operator.
"""

import shlex
import signal
import sys
from types import FrameType
from typing import Any, NoReturn, Self

from .config import CFG
from .error import AnkhError, AnkhInterruptedError
from .exit_codes import ExitCodeEntry, describe
from .logger import get_logger

logger = get_logger(__name__)

# signals converted into AnkhInterruptedError while the trap is armed
TRAPPED_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class ErrorTrap:
    """
    Diagnostic layer reporting failures of ankh commands.

    Lifecycle: created -> armed (after `arm`) -> fired once (after `fire`, the process exits).
    """

    def __init__(self):
        self._previous_handlers: dict[int, Any] = {}
        self._armed = False
        self._fired = False
        self._runner: Any = None

    @property
    def armed(self) -> bool:
        """Whether the signal handlers are currently installed."""
        return self._armed

    @property
    def fired(self) -> bool:
        """Whether the trap has already reported a failure."""
        return self._fired

    def arm(self) -> Self:
        """
        Install signal handlers for the trapped termination signals.

        Returns:
            ErrorTrap: The trap itself, allowing `trap = ErrorTrap().arm()`.
        """
        if self._armed:
            return self

        for signum in TRAPPED_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._onSignal)

        self._armed = True
        logger.debug("Error trap armed.")
        return self

    def watch(self, runner: Any) -> Self:
        """
        Report the `last_command` of `runner` for failures that carry no command of their own.

        Args:
            runner: Any object with a `last_command` attribute, typically `Proxmox`.

        Returns:
            ErrorTrap: The trap itself.
        """
        self._runner = runner
        return self

    def disarm(self) -> None:
        """
        Restore the signal handlers that were active before `arm` was called.
        """
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)

        self._previous_handlers.clear()
        self._armed = False
        logger.debug("Error trap disarmed.")

    def fire(self, exception: BaseException) -> NoReturn:
        """
        Report a failure and terminate the process with its exit code.

        The exit code is taken from the exception's `exit_code` attribute.
        Exceptions without an exit code are treated as unexpected errors.

        Args:
            exception (BaseException): The error that terminated the command.
        """
        exit_code = getattr(exception, "exit_code", None)
        if not isinstance(exit_code, int):
            exit_code = CFG.exit_codes.unexpected_error

        # the trap fires only once; any further failure during reporting just exits
        if self._fired:
            sys.exit(exit_code)
        self._fired = True

        if self._armed:
            self.disarm()

        entry = describe(exit_code)
        self.report(exception, entry, getattr(self._runner, "last_command", None))
        sys.exit(exit_code)

    @staticmethod
    def report(
        exception: BaseException,
        entry: ExitCodeEntry,
        last_command: list[str] | None = None,
    ) -> None:
        """
        Log the failure, its category and the remediation hint.

        Args:
            exception (BaseException): The error that terminated the command.
            entry (ExitCodeEntry): Taxonomy entry for the exit code.
            last_command (list[str] | None): Last command executed before the failure,
                used if the exception does not name one.
        """
        if isinstance(exception, AnkhError):
            logger.error(exception)
        else:
            logger.critical(exception, exc_info=exception, stack_info=True)

        # errors raised while handling a failed command keep it as their cause
        if command := (
            getattr(exception, "command", None)
            or getattr(exception.__cause__, "command", None)
            or last_command
        ):
            logger.error(f"Last executed command: '{shlex.join(command)}'.")

        logger.error(f"Exit code {entry.code}: {entry.description} [{entry.layer}].")
        logger.info(f"Hint: {entry.hint}")

    def _onSignal(self, signum: int, _frame: FrameType | None) -> NoReturn:
        """
        Signal handler converting a termination signal into an exception.
        """
        raise AnkhInterruptedError(signum)
