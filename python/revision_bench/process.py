from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence


logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class CommandOutcome:
    returncode: int
    output: str = ""


# (command, cwd, capture, timeout_seconds) -> outcome
CommandRunner = Callable[[Sequence[str], Path, bool, "float | None"], CommandOutcome]


def run_command(
    command: Sequence[str],
    cwd: Path,
    capture: bool,
    timeout_seconds: float | None = None,
) -> CommandOutcome:
    """Run ``command`` in ``cwd`` and wait for it.

    With ``capture`` the combined stdout/stderr is returned; otherwise the
    child inherits our streams. A missing executable is reported as exit 127
    and an expired timeout as exit 124, so callers only inspect return codes.
    """
    try:
        proc = subprocess.run(
            list(command),
            cwd=cwd,
            check=False,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.STDOUT if capture else None,
            text=True,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as exc:
        partial = exc.output if isinstance(exc.output, str) else ""
        return CommandOutcome(
            returncode=TIMEOUT_EXIT_CODE,
            output=_join(partial, f"timeout after {timeout_seconds}s"),
        )
    except FileNotFoundError as exc:
        return CommandOutcome(returncode=127, output=f"command not found: {exc.filename or command[0]}")
    except PermissionError as exc:
        return CommandOutcome(returncode=126, output=f"permission denied: {exc.filename or command[0]}")

    output = (proc.stdout or "") if capture else ""
    if output:
        logger.debug("output of %s:\n%s", command[0], output.rstrip())
    return CommandOutcome(returncode=proc.returncode, output=output)


def truncate_output(value: str, limit: int = 4000) -> str:
    trimmed = value.strip()
    if len(trimmed) <= limit:
        return trimmed
    return trimmed[-limit:]


def _join(first: str, second: str) -> str:
    first = first.strip()
    return f"{first}\n{second}" if first else second
