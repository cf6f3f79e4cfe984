from __future__ import annotations

from pathlib import Path

import pytest

from revision_bench.toolchain import MAKEMAKER, MODULE_BUILD, get_toolchain


def test_module_build_commands() -> None:
    assert MODULE_BUILD.configure_command() == ["perl", "Build.PL"]
    assert MODULE_BUILD.build_command() == ["./Build"]
    assert MODULE_BUILD.clean_command() == ["./Build", "clean"]
    assert MODULE_BUILD.configure_command("/opt/perl/bin/perl") == ["/opt/perl/bin/perl", "Build.PL"]


def test_makemaker_commands() -> None:
    assert MAKEMAKER.configure_command() == ["perl", "Makefile.PL"]
    assert MAKEMAKER.build_command() == ["make"]
    assert MAKEMAKER.clean_command() == ["make", "clean"]
    assert MAKEMAKER.descriptor_path("/repo") == Path("/repo/Makefile")


def test_program_command_adds_library_path(tmp_path: Path) -> None:
    lib_dir = MODULE_BUILD.lib_dir(tmp_path)

    command = MODULE_BUILD.program_command(program=tmp_path / "t.pl", lib_dir=lib_dir)

    assert lib_dir == tmp_path / "blib" / "lib"
    assert command == ["perl", "-I", str(lib_dir), str(tmp_path / "t.pl")]


def test_program_command_keeps_braces_in_paths(tmp_path: Path) -> None:
    program = tmp_path / "{odd}.pl"

    command = MODULE_BUILD.program_command(program=program, lib_dir="lib", perl="perl5.38")

    assert command == ["perl5.38", "-I", "lib", str(program)]


def test_unknown_toolchain_is_rejected() -> None:
    assert get_toolchain("module-build") is MODULE_BUILD
    with pytest.raises(ValueError, match="makemaker, module-build"):
        get_toolchain("cargo")
