# src/rpcbuild/staleness.py
"""Decide whether a build step has to run.

Only filesystem modification times are compared; there is no content
hashing and no cache kept between runs.
"""

from dataclasses import dataclass
from pathlib import Path

from .config import Command, IncrementalCommand
from .errors import StalenessError
from .logs import getAppLogger
from .utils import expand_patterns


@dataclass(frozen=True)
class StalenessVerdict:
    stale: bool
    reason: str
    sources: tuple[Path, ...] = ()
    targets: tuple[Path, ...] = ()


def _mtime_ns(path: Path) -> int:
    return path.stat().st_mtime_ns


def evaluate_staleness(command: Command, working_dir: Path) -> StalenessVerdict:
    """Return whether `command` is stale, relative to `working_dir`.

    - unconditional commands are always stale;
    - a `sources` pattern matching nothing raises `StalenessError`;
    - a `targets` pattern matching nothing makes the step stale;
    - otherwise stale iff the newest source is newer than the oldest target.

    Raises:
        StalenessError: when a source pattern matches nothing on disk.
    """
    logger = getAppLogger()

    if not isinstance(command, IncrementalCommand):
        return StalenessVerdict(stale=True, reason="unconditional command")

    sources, missing_sources = expand_patterns(list(command.sources), working_dir)
    if missing_sources:
        joined = ", ".join(repr(p) for p in missing_sources)
        xmsg = (
            f"Cannot evaluate staleness of {command.command!r}: source pattern(s)"
            f" {joined} match nothing under {working_dir}"
        )
        raise StalenessError(xmsg, missing_sources)

    targets, missing_targets = expand_patterns(list(command.targets), working_dir)
    if missing_targets or not targets:
        reason = (
            f"missing target(s): {', '.join(missing_targets)}"
            if missing_targets
            else "no targets declared"
        )
        logger.trace(f"[staleness] {command.command!r}: stale ({reason})")
        return StalenessVerdict(
            stale=True, reason=reason, sources=tuple(sources), targets=tuple(targets)
        )

    if not sources:
        return StalenessVerdict(
            stale=False,
            reason="no sources declared",
            targets=tuple(targets),
        )

    newest_source = max(sources, key=_mtime_ns)
    oldest_target = min(targets, key=_mtime_ns)
    newest_ns = _mtime_ns(newest_source)
    oldest_ns = _mtime_ns(oldest_target)
    stale = newest_ns > oldest_ns

    logger.trace(
        f"[staleness] {command.command!r}: newest source {newest_source}"
        f" ({newest_ns}) vs oldest target {oldest_target} ({oldest_ns})"
        f" → {'stale' if stale else 'fresh'}"
    )
    reason = (
        f"{newest_source.name} is newer than {oldest_target.name}"
        if stale
        else "targets are up to date"
    )
    return StalenessVerdict(
        stale=stale, reason=reason, sources=tuple(sources), targets=tuple(targets)
    )
