# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Exception types used throughout ankh.

Every ankh exception carries an `exit_code`. The top-level error trap
(`ankh_lib.core.trap.ErrorTrap`) looks that code up in the exit-code taxonomy,
reports it and terminates the process with the code preserved, so that calling
automation can branch on it.
"""

import shlex
import signal

from .config import CFG


class AnkhError(Exception):
    """Common exception type for all recoverable ankh errors."""

    exit_code = CFG.exit_codes.default


class AnkhSettingsError(AnkhError):
    """Raised when a setting has a value that cannot be used."""

    pass


class AnkhSchemaError(AnkhError):
    """
    Raised when an application definition is authored incorrectly,
    e.g. a required setting has no built-in default.

    Detected when the definition is loaded, never in the middle of provisioning.
    """

    pass


class AnkhDefaultsFileError(AnkhError):
    """Raised when a defaults file cannot be read, parsed or written."""

    pass


class AnkhProvisionError(AnkhError):
    """
    Raised when ankh itself detects a provisioning problem.

    The exit code is chosen from the exit-code taxonomy (e.g. 206 when the guest ID is in use).
    """

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


class AnkhCommandError(AnkhError):
    """
    Raised when a delegated external command exits with a non-zero code.

    The original exit code of the command is preserved.
    """

    def __init__(self, command: list[str], exit_code: int, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr.strip()

        message = f"Command '{shlex.join(command)}' failed with exit code {exit_code}"
        super().__init__(f"{message}: {self.stderr}" if self.stderr else f"{message}.")


class AnkhInterruptedError(AnkhError):
    """
    Raised from a signal handler when ankh receives a termination signal.

    Uses the shell convention of `128 + signal number` for the exit code.
    """

    def __init__(self, signum: int):
        self.signum = signum
        self.exit_code = 128 + signum
        super().__init__(f"Execution was interrupted by {signal.Signals(signum).name}.")
