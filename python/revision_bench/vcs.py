from __future__ import annotations

from pathlib import Path

from .errors import VcsError
from .process import CommandRunner, run_command, truncate_output


def checkout_command(revision: str) -> list[str]:
    return ["git", "checkout", "--quiet", revision, "--"]


def checkout_revision(
    workdir: Path,
    revision: str,
    *,
    phase: str | None = None,
    runner: CommandRunner = run_command,
    timeout_seconds: float | None = None,
) -> None:
    command = checkout_command(revision)
    outcome = runner(command, workdir, True, timeout_seconds)
    if outcome.returncode != 0:
        raise VcsError(
            step=f"checkout {revision}",
            command=command,
            returncode=outcome.returncode,
            phase=phase,
            detail=truncate_output(outcome.output),
        )


def current_revision(
    workdir: Path,
    *,
    runner: CommandRunner = run_command,
    timeout_seconds: float | None = None,
) -> str | None:
    """Commit id of HEAD, or None when it cannot be resolved."""
    outcome = runner(["git", "rev-parse", "HEAD"], workdir, True, timeout_seconds)
    if outcome.returncode != 0:
        return None
    commit = outcome.output.strip()
    return commit or None
