from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError, InvalidPathError
from .toolchain import DEFAULT_TOOLCHAIN, Toolchain, get_toolchain


class Mode(enum.Enum):
    TESTS = "tests"
    BENCHMARKS = "benchmarks"
    BOTH = "both"

    @property
    def program_flags(self) -> list[str]:
        if self is Mode.TESTS:
            return ["--tests-only"]
        if self is Mode.BENCHMARKS:
            return ["--benchmarks-only"]
        return []


class Phase(str, enum.Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class RunConfig:
    workdir: Path
    program: Path
    before: str
    after: str
    mode: Mode = Mode.BOTH
    verbose: bool = False
    toolchain: Toolchain = field(default_factory=lambda: get_toolchain(DEFAULT_TOOLCHAIN))
    perl: str = "perl"
    timeout_seconds: float | None = None
    dry_run: bool = False

    def revision(self, phase: Phase) -> str:
        return self.before if phase is Phase.BEFORE else self.after


def resolve_mode(*, tests_only: bool, benchmarks_only: bool) -> Mode:
    if tests_only and benchmarks_only:
        raise ConfigError("--tests-only and --benchmarks-only are mutually exclusive")
    if tests_only:
        return Mode.TESTS
    if benchmarks_only:
        return Mode.BENCHMARKS
    return Mode.BOTH


def build_run_config(
    *,
    workdir: Path | str | None,
    program: Path | str | None,
    before: str | None,
    after: str | None,
    tests_only: bool = False,
    benchmarks_only: bool = False,
    verbose: bool = False,
    toolchain: str = DEFAULT_TOOLCHAIN,
    perl: str = "perl",
    timeout_seconds: float | None = None,
    dry_run: bool = False,
) -> RunConfig:
    required = {
        "--workdir": workdir,
        "--program": program,
        "--before": before,
        "--after": after,
    }
    missing = [flag for flag, value in required.items() if value is None or not str(value).strip()]
    if missing:
        raise ConfigError(
            f"missing required option(s): {', '.join(missing)}",
            missing=missing,
        )

    mode = resolve_mode(tests_only=tests_only, benchmarks_only=benchmarks_only)

    for flag, revision in (("--before", before), ("--after", after)):
        # git would read these as options rather than revisions
        if str(revision).strip().startswith("-"):
            raise ConfigError(f"{flag} must not start with '-': {str(revision).strip()}")

    if timeout_seconds is not None and timeout_seconds <= 0:
        raise ConfigError("--timeout-seconds must be > 0")
    if not perl.strip():
        raise ConfigError("--perl must not be empty")
    try:
        chosen_toolchain = get_toolchain(toolchain)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    workdir_path = Path(str(workdir)).expanduser()
    program_path = Path(str(program)).expanduser()
    if not workdir_path.is_dir():
        raise InvalidPathError(
            f"--workdir is not an existing directory: {workdir_path}",
            path=str(workdir_path),
        )
    if not program_path.is_file():
        raise InvalidPathError(
            f"--program is not an existing regular file: {program_path}",
            path=str(program_path),
        )

    return RunConfig(
        workdir=workdir_path.resolve(),
        program=program_path.resolve(),
        before=str(before).strip(),
        after=str(after).strip(),
        mode=mode,
        verbose=verbose,
        toolchain=chosen_toolchain,
        perl=perl,
        timeout_seconds=timeout_seconds,
        dry_run=dry_run,
    )
