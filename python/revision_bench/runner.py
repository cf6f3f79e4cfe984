from __future__ import annotations

import logging
import os
import shlex
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from .config import Phase, RunConfig
from .errors import (
    BuildError,
    CompareError,
    ExecutionError,
    VcsError,
    WorkspaceError,
    phase_prefix,
)
from .process import CommandRunner, run_command, truncate_output
from .vcs import checkout_command, checkout_revision, current_revision


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    step: str
    phase: Optional[str]
    command: list[str]
    returncode: Optional[int]
    duration_seconds: float
    skipped: bool = False


@dataclass
class RunReport:
    workdir: str
    program: str
    before: str
    after: str
    mode: str
    started_at: str
    steps: list[StepResult] = field(default_factory=list)
    revisions: dict[str, Optional[str]] = field(default_factory=dict)
    status: str = "running"
    failure: Optional[str] = None
    failure_phase: Optional[str] = None
    finished_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlannedStep:
    step: str
    phase: Optional[str]
    command: list[str]
    condition: Optional[str] = None

    def describe(self) -> str:
        line = f"{phase_prefix(self.phase)}{self.step}: {shlex.join(self.command)}"
        if self.condition:
            line = f"{line}  (only if {self.condition})"
        return line


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Enter ``path`` and always return to the previous directory."""
    previous = os.getcwd()
    try:
        os.chdir(path)
    except OSError as exc:
        raise WorkspaceError(f"cannot enter --workdir {path}: {exc.strerror or exc}") from exc
    try:
        yield path
    finally:
        os.chdir(previous)


class ComparisonRunner:
    """Build and exercise the before revision, then the after revision.

    Every step runs to completion before the next one starts and the first
    failure aborts the run. The checkout is mutated in place and is left
    wherever the failure happened.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        runner: CommandRunner | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config
        self._runner = runner or run_command
        self._clock = clock or time.perf_counter
        self.report = RunReport(
            workdir=str(config.workdir),
            program=str(config.program),
            before=config.before,
            after=config.after,
            mode=config.mode.value,
            started_at=_now(),
        )

    @property
    def lib_dir(self) -> Path:
        return self.config.toolchain.lib_dir(self.config.workdir)

    def program_command(self) -> list[str]:
        cfg = self.config
        command = cfg.toolchain.program_command(
            program=cfg.program,
            lib_dir=self.lib_dir,
            perl=cfg.perl,
        )
        command.extend(cfg.mode.program_flags)
        if cfg.verbose:
            command.append("--verbose")
        return command

    def plan(self) -> list[PlannedStep]:
        cfg = self.config
        toolchain = cfg.toolchain
        clean = toolchain.clean_command(cfg.perl)
        steps = [
            PlannedStep("clean", None, clean, condition=f"{toolchain.build_descriptor} exists"),
        ]
        for phase in Phase:
            steps.extend(
                [
                    PlannedStep(
                        f"checkout {cfg.revision(phase)}",
                        phase.value,
                        checkout_command(cfg.revision(phase)),
                    ),
                    PlannedStep("configure", phase.value, toolchain.configure_command(cfg.perl)),
                    PlannedStep("build", phase.value, toolchain.build_command(cfg.perl)),
                    PlannedStep("run program", phase.value, self.program_command()),
                    PlannedStep("clean", phase.value, clean),
                ]
            )
        return steps

    def run(self) -> RunReport:
        try:
            with working_directory(self.config.workdir):
                self._initial_clean()
                self._run_phase(Phase.BEFORE)
                self._clean(Phase.BEFORE)
                self._run_phase(Phase.AFTER)
                self._clean(Phase.AFTER)
        except CompareError as exc:
            self.report.status = "failure"
            self.report.failure = exc.message
            self.report.failure_phase = exc.phase
            self.report.finished_at = _now()
            exc.report = self.report
            raise
        self.report.status = "success"
        self.report.finished_at = _now()
        logger.info("comparison of %s -> %s completed", self.config.before, self.config.after)
        return self.report

    def _initial_clean(self) -> None:
        toolchain = self.config.toolchain
        descriptor = toolchain.descriptor_path(self.config.workdir)
        if descriptor.exists():
            self._clean(None)
            return
        logger.info("no %s in %s; skipping initial clean", toolchain.build_descriptor, self.config.workdir)
        self.report.steps.append(
            StepResult(
                step="clean",
                phase=None,
                command=toolchain.clean_command(self.config.perl),
                returncode=None,
                duration_seconds=0.0,
                skipped=True,
            )
        )

    def _run_phase(self, phase: Phase) -> None:
        cfg = self.config
        revision = cfg.revision(phase)
        started = self._clock()
        logger.info("[%s] checking out %s", phase.value, revision)
        try:
            checkout_revision(
                cfg.workdir,
                revision,
                phase=phase.value,
                runner=self._runner,
                timeout_seconds=cfg.timeout_seconds,
            )
        except VcsError as exc:
            self._record(exc.step, phase.value, exc.command, exc.returncode, started)
            raise
        self._record(f"checkout {revision}", phase.value, checkout_command(revision), 0, started)

        commit = current_revision(cfg.workdir, runner=self._runner, timeout_seconds=cfg.timeout_seconds)
        self.report.revisions[phase.value] = commit
        if commit:
            logger.info("[%s] %s resolved to %s", phase.value, revision, commit)

        self._run_build_step("configure", cfg.toolchain.configure_command(cfg.perl), phase)
        self._run_build_step("build", cfg.toolchain.build_command(cfg.perl), phase)

        lib_dir = self.lib_dir
        if not lib_dir.is_dir():
            raise WorkspaceError(
                f"{phase_prefix(phase.value)}build output directory not found: {lib_dir}",
                phase=phase.value,
            )

        self._run_program(phase)

    def _run_program(self, phase: Phase) -> None:
        cfg = self.config
        command = self.program_command()
        if cfg.verbose:
            print(shlex.join(command), flush=True)
        logger.info("[%s] running %s", phase.value, cfg.program.name)
        started = self._clock()
        outcome = self._runner(command, cfg.workdir, False, cfg.timeout_seconds)
        self._record("run program", phase.value, command, outcome.returncode, started)
        if outcome.returncode != 0:
            raise ExecutionError(
                step="run program",
                command=command,
                returncode=outcome.returncode,
                phase=phase.value,
                detail=truncate_output(outcome.output),
            )

    def _clean(self, phase: Optional[Phase]) -> None:
        command = self.config.toolchain.clean_command(self.config.perl)
        self._run_build_step("clean", command, phase)

    def _run_build_step(self, step: str, command: list[str], phase: Optional[Phase]) -> None:
        phase_value = phase.value if phase is not None else None
        logger.info("%s%s: %s", phase_prefix(phase_value), step, shlex.join(command))
        started = self._clock()
        outcome = self._runner(command, self.config.workdir, True, self.config.timeout_seconds)
        self._record(step, phase_value, command, outcome.returncode, started)
        if outcome.returncode != 0:
            raise BuildError(
                step=step,
                command=command,
                returncode=outcome.returncode,
                phase=phase_value,
                detail=truncate_output(outcome.output),
            )

    def _record(
        self,
        step: str,
        phase: Optional[str],
        command: list[str],
        returncode: int,
        started: float,
    ) -> None:
        self.report.steps.append(
            StepResult(
                step=step,
                phase=phase,
                command=list(command),
                returncode=returncode,
                duration_seconds=round(self._clock() - started, 6),
            )
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
