from __future__ import annotations

import shlex
from typing import Any, Sequence


class CompareError(Exception):
    """Base class for every failure that aborts a comparison run."""

    exit_code = 1
    phase: str | None = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        # Filled in by the runner so callers can inspect partial progress.
        self.report: Any = None


class ConfigError(CompareError):
    exit_code = 2

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class WorkspaceError(CompareError):
    """A directory or path the run depends on is absent or unusable."""

    exit_code = 3

    def __init__(self, message: str, *, phase: str | None = None) -> None:
        super().__init__(message)
        self.phase = phase


class InvalidPathError(ConfigError, WorkspaceError):
    exit_code = 3

    def __init__(self, message: str, *, path: str) -> None:
        ConfigError.__init__(self, message)
        self.path = path


class CommandError(CompareError):
    """An external command exited non-zero."""

    def __init__(
        self,
        *,
        step: str,
        command: Sequence[str],
        returncode: int,
        phase: str | None = None,
        detail: str = "",
    ) -> None:
        self.step = step
        self.command = list(command)
        self.returncode = returncode
        self.phase = phase
        self.detail = detail
        super().__init__(_format_command_failure(step, self.command, returncode, phase, detail))


class VcsError(CommandError):
    exit_code = 4


class BuildError(CommandError):
    exit_code = 5


class ExecutionError(CommandError):
    exit_code = 6


def phase_prefix(phase: str | None) -> str:
    return f"[{phase}] " if phase else ""


def _format_command_failure(
    step: str,
    command: list[str],
    returncode: int,
    phase: str | None,
    detail: str,
) -> str:
    message = f"{phase_prefix(phase)}{step} failed (exit {returncode}): {shlex.join(command)}"
    if detail:
        message = f"{message}\n{detail}"
    return message
