"""Before/after revision benchmark and test comparison tooling."""

from .config import Mode, Phase, RunConfig, build_run_config
from .errors import (
    BuildError,
    CompareError,
    ConfigError,
    ExecutionError,
    InvalidPathError,
    VcsError,
    WorkspaceError,
)
from .runner import ComparisonRunner, RunReport, StepResult

__all__ = [
    "BuildError",
    "CompareError",
    "ComparisonRunner",
    "ConfigError",
    "ExecutionError",
    "InvalidPathError",
    "Mode",
    "Phase",
    "RunConfig",
    "RunReport",
    "StepResult",
    "VcsError",
    "WorkspaceError",
    "build_run_config",
]
