from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


PERL_PLACEHOLDER = "{perl}"


@dataclass(frozen=True)
class Toolchain:
    """How to clean, configure and build a checkout, and how to run against it.

    Command tokens may reference ``{perl}``. ``program_template`` may also use
    ``{lib_dir}`` (absolute build output directory) and ``{program}``.
    """

    name: str
    build_descriptor: str
    configure: tuple[str, ...]
    build: tuple[str, ...]
    clean: tuple[str, ...]
    output_dir: str
    program_template: tuple[str, ...] = (PERL_PLACEHOLDER, "-I", "{lib_dir}", "{program}")

    def configure_command(self, perl: str = "perl") -> list[str]:
        return _expand(self.configure, perl=perl)

    def build_command(self, perl: str = "perl") -> list[str]:
        return _expand(self.build, perl=perl)

    def clean_command(self, perl: str = "perl") -> list[str]:
        return _expand(self.clean, perl=perl)

    def descriptor_path(self, workdir: Path | str) -> Path:
        return Path(workdir) / self.build_descriptor

    def lib_dir(self, workdir: Path | str) -> Path:
        return Path(workdir) / self.output_dir

    def program_command(
        self,
        *,
        program: Path | str,
        lib_dir: Path | str,
        perl: str = "perl",
    ) -> list[str]:
        return _expand(
            self.program_template,
            perl=perl,
            lib_dir=str(lib_dir),
            program=str(program),
        )


MODULE_BUILD = Toolchain(
    name="module-build",
    build_descriptor="Build",
    configure=(PERL_PLACEHOLDER, "Build.PL"),
    build=("./Build",),
    clean=("./Build", "clean"),
    output_dir="blib/lib",
)

MAKEMAKER = Toolchain(
    name="makemaker",
    build_descriptor="Makefile",
    configure=(PERL_PLACEHOLDER, "Makefile.PL"),
    build=("make",),
    clean=("make", "clean"),
    output_dir="blib/lib",
)

TOOLCHAINS: dict[str, Toolchain] = {
    MODULE_BUILD.name: MODULE_BUILD,
    MAKEMAKER.name: MAKEMAKER,
}

DEFAULT_TOOLCHAIN = MODULE_BUILD.name


def get_toolchain(name: str) -> Toolchain:
    try:
        return TOOLCHAINS[name]
    except KeyError:
        allowed = ", ".join(sorted(TOOLCHAINS))
        raise ValueError(f"unknown toolchain '{name}'; expected one of: {allowed}") from None


def _expand(tokens: tuple[str, ...], **values: str) -> list[str]:
    return [token.format(**values) for token in tokens]
