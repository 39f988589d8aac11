# src/rpcbuild/build.py
"""Entry points chaining resolution, graph, planning and execution.

Configuration and planning errors are raised before any step runs, so a
run either fails up front with nothing touched or produces a report.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import Application, ResolvedComponent, resolve_components
from .constants import (
    DEFAULT_ENV_MAX_WORKERS,
    DEFAULT_FAILURE_POLICY,
    DEFAULT_MAX_WORKERS,
    FailurePolicy,
)
from .errors import ConfigError
from .executor import BuildReport, CommandRunner, execute_plan, run_shell_command
from .graph import DependencyGraph, build_dependency_graph, check_dependency_owners
from .logs import getAppLogger
from .meta import PROGRAM_ENV
from .planner import (
    BuildPlan,
    CommandSelector,
    build_commands,
    compute_build_waves,
    custom_commands,
    make_build_plan,
    ordering_edges,
)
from .utils import remove_path


@dataclass
class BuildOptions:
    """Per-invocation settings, passed explicitly down the call chain."""

    profile: str | None = None
    components: list[str] | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    failure_policy: FailurePolicy = DEFAULT_FAILURE_POLICY
    runner: CommandRunner = field(default=run_shell_command)

    @classmethod
    def from_env(
        cls, env: dict[str, str] | None = None, **overrides: object
    ) -> "BuildOptions":
        """Build options with `max_workers` taken from `RPCBUILD_MAX_WORKERS`.

        Explicit keyword overrides win over the environment.

        Raises:
            ConfigError: if the environment value is not a positive integer.
        """
        environ = os.environ if env is None else env
        key = f"{PROGRAM_ENV}_{DEFAULT_ENV_MAX_WORKERS}"
        values: dict[str, object] = {}
        raw = environ.get(key)
        if raw is not None:
            try:
                workers = int(raw)
            except ValueError as e:
                xmsg = f"{key} must be an integer, got {raw!r}"
                raise ConfigError(xmsg) from e
            if workers < 1:
                xmsg = f"{key} must be at least 1, got {workers}"
                raise ConfigError(xmsg)
            values["max_workers"] = workers
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


@dataclass
class PreparedBuild:
    components: list[ResolvedComponent]
    graph: DependencyGraph
    waves: list[list[str]]
    requires: dict[str, set[str]]


def prepare(app: Application, options: BuildOptions) -> PreparedBuild:
    """Resolve, build the graph and compute waves; raises before side effects."""
    components = resolve_components(app, options.profile, options.components)
    check_dependency_owners(app)
    graph = build_dependency_graph(components, known=app.components)
    requires = ordering_edges(graph)
    waves = compute_build_waves(graph.nodes, requires)
    return PreparedBuild(components, graph, waves, requires)


def plan_build(
    app: Application,
    options: BuildOptions | None = None,
    select: CommandSelector = build_commands,
) -> BuildPlan:
    options = options or BuildOptions()
    prepared = prepare(app, options)
    return make_build_plan(
        prepared.components, prepared.waves, select, prepared.requires
    )


def run_build(app: Application, options: BuildOptions | None = None) -> BuildReport:
    """Run the `build` steps of every selected component."""
    logger = getAppLogger()
    options = options or BuildOptions()
    plan = plan_build(app, options)
    logger.info("🔨 Building %d component(s)", len(plan.components))
    return execute_plan(
        plan,
        max_workers=options.max_workers,
        failure_policy=options.failure_policy,
        runner=options.runner,
    )


def run_custom_command(
    app: Application, name: str, options: BuildOptions | None = None
) -> BuildReport:
    """Run the `customCommands[name]` sequence of every component defining it.

    Raises:
        ConfigError: if no selected component defines `name`.
    """
    logger = getAppLogger()
    options = options or BuildOptions()
    prepared = prepare(app, options)
    components = prepared.components

    defining = [c.name for c in components if name in c.custom_commands]
    if not defining:
        available = sorted({k for c in components for k in c.custom_commands})
        xmsg = (
            f"Custom command {name!r} is not defined by any component"
            f" (available: {', '.join(available) or 'none'})"
        )
        raise ConfigError(xmsg)

    keep = set(defining)
    waves = [[n for n in wave if n in keep] for wave in prepared.waves]
    waves = [w for w in waves if w]
    plan = make_build_plan(
        [c for c in components if c.name in keep],
        waves,
        custom_commands(name),
        prepared.requires,
    )
    logger.info("🛠️  Running %r for %d component(s)", name, len(defining))
    return execute_plan(
        plan,
        max_workers=options.max_workers,
        failure_policy=options.failure_policy,
        runner=options.runner,
    )


def run_clean(app: Application, options: BuildOptions | None = None) -> list[Path]:
    """Remove generated artifacts, `clean` entries and the temp dir.

    Absent paths are skipped. Returns the paths actually removed.
    """
    logger = getAppLogger()
    options = options or BuildOptions()
    components = resolve_components(app, options.profile, options.components)

    removed: list[Path] = []
    for component in components:
        for path in component.clean_paths():
            if remove_path(path):
                logger.info("🧹 [%s] removed %s", component.name, path)
                removed.append(path)
            else:
                logger.trace(f"[run_clean] {component.name}: {path} already absent")

    if options.components is not None:
        return removed

    temp = app.temp_path
    if remove_path(temp):
        logger.info("🧹 removed %s", temp)
        removed.append(temp)
    return removed
