# src/rpcbuild/errors.py
"""Error taxonomy.

Configuration and planning errors abort a run before any side effect.
Staleness errors are scoped to one component step and end up in the
build report; command and filesystem failures never raise out of the
executor at all.
"""


class RpcBuildError(Exception):
    """Base class for every error raised by rpcbuild."""


class ConfigError(RpcBuildError, ValueError):
    """The manifest is invalid or references something that does not exist."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = list(errors or [])


class PlanningError(RpcBuildError, ValueError):
    """The dependency graph or build order cannot be constructed."""


class StalenessError(RpcBuildError, RuntimeError):
    """Staleness of a step cannot be evaluated (e.g. a source matches nothing)."""

    def __init__(self, message: str, patterns: list[str] | None = None) -> None:
        super().__init__(message)
        self.patterns: list[str] = list(patterns or [])
