from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Sequence

import pytest

from revision_bench.process import CommandOutcome


FailurePredicate = Callable[[list[str], int], "int | None"]


class FakeTools:
    """Stands in for git, the build tool and the program.

    Every call is recorded along with the process working directory at the
    time of the call. ``fail`` may return a non-zero exit code for a command;
    it also receives how many times that exact command has been seen.
    """

    def __init__(
        self,
        *,
        fail: FailurePredicate | None = None,
        create_lib_dir: bool = True,
        output: str = "",
    ) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[str] = []
        self.captures: list[bool] = []
        self._fail = fail
        self._create_lib_dir = create_lib_dir
        self._output = output
        self._seen: dict[tuple[str, ...], int] = {}

    def __call__(
        self,
        command: Sequence[str],
        cwd: Path,
        capture: bool,
        timeout_seconds: float | None,
    ) -> CommandOutcome:
        cmd = list(command)
        self.calls.append(cmd)
        self.cwds.append(os.getcwd())
        self.captures.append(capture)
        key = tuple(cmd)
        self._seen[key] = self._seen.get(key, 0) + 1

        if cmd[:2] == ["git", "rev-parse"]:
            return CommandOutcome(returncode=0, output="0123abcd\n")
        if self._fail is not None:
            code = self._fail(cmd, self._seen[key])
            if code:
                return CommandOutcome(returncode=code, output=self._output)
        if cmd == ["./Build"] and self._create_lib_dir:
            (Path(cwd) / "blib" / "lib").mkdir(parents=True, exist_ok=True)
        return CommandOutcome(returncode=0, output=self._output)

    @property
    def tool_calls(self) -> list[list[str]]:
        return [call for call in self.calls if call[:2] != ["git", "rev-parse"]]


@pytest.fixture
def workspace(tmp_path: Path) -> tuple[Path, Path]:
    repo = tmp_path / "repo"
    repo.mkdir()
    program = repo / "t.pl"
    program.write_text("exit 0;\n", encoding="utf-8")
    return repo, program


@pytest.fixture
def fake_tools() -> type[FakeTools]:
    return FakeTools
