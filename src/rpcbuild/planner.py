# src/rpcbuild/planner.py
"""Build order and build plan.

Ordering works on a *relaxed* graph, not on the dependency graph itself:
a `wasm-rpc` edge only needs the target's WIT interface, which exists
before the target is built, so it imposes no ordering. Components are
therefore grouped into waves of mutually independent components, each
wave in manifest declaration order.
"""

import graphlib
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import Command, ResolvedComponent
from .errors import PlanningError, StalenessError
from .graph import DependencyGraph
from .logs import getAppLogger
from .staleness import StalenessVerdict, evaluate_staleness
from .utils import resolve_against


CommandSelector = Callable[[ResolvedComponent], tuple[Command, ...]]


@dataclass
class PlanEntry:
    component: str
    index: int
    command: Command
    working_dir: Path
    verdict: StalenessVerdict | None = None
    # set by annotate_plan() when staleness cannot be evaluated
    error: str | None = None


@dataclass
class ComponentPlan:
    component: ResolvedComponent
    entries: list[PlanEntry] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.component.name


@dataclass
class BuildPlan:
    """Ordered, per-component command sequences ready for execution."""

    waves: list[list[str]] = field(default_factory=list)
    components: dict[str, ComponentPlan] = field(default_factory=dict)
    # name → components that must finish first
    requires: dict[str, set[str]] = field(default_factory=dict)

    def entries(self) -> list[PlanEntry]:
        return [
            entry
            for wave in self.waves
            for name in wave
            for entry in self.components[name].entries
        ]


# --------------------------------------------------------------------------- #
# ordering
# --------------------------------------------------------------------------- #


def ordering_edges(graph: DependencyGraph) -> dict[str, set[str]]:
    """The build-ordering relaxation of the dependency graph.

    RPC stub generation reads the target's interface only, so no `wasm-rpc`
    edge survives the relaxation and every component starts unconstrained.

    This is the single place where ordering constraints enter planning;
    `compute_build_waves`, `BuildPlan.requires` and the executor's
    cancellation of components with failed requirements all consume it, so
    an ordering a build tool imposes on its own (e.g. a shared workspace
    lockfile) is added here as a `name → {required}` entry.
    """
    return {name: set() for name in graph.nodes}


def compute_build_waves(
    names: list[str],
    requires: Mapping[str, Iterable[str]],
) -> list[list[str]]:
    """Group `names` into waves; every wave only needs earlier waves.

    Ties inside a wave follow the order of `names`. Requirements on names
    outside `names` are ignored.

    Raises:
        PlanningError: if the ordering requirements contain a cycle.
    """
    logger = getAppLogger()
    position = {n: i for i, n in enumerate(names)}

    sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
    for name in names:
        preds = [p for p in requires.get(name, ()) if p in position]
        sorter.add(name, *preds)

    try:
        sorter.prepare()
    except graphlib.CycleError as e:
        cycle = e.args[1] if len(e.args) > 1 else []
        xmsg = f"Build order cycle detected: {' -> '.join(cycle) or 'unknown'}"
        raise PlanningError(xmsg) from e

    waves: list[list[str]] = []
    while sorter.is_active():
        ready = sorted(sorter.get_ready(), key=position.__getitem__)
        waves.append(ready)
        sorter.done(*ready)

    logger.trace(f"[compute_build_waves] {waves}")
    return waves


# --------------------------------------------------------------------------- #
# plans
# --------------------------------------------------------------------------- #


def build_commands(component: ResolvedComponent) -> tuple[Command, ...]:
    return component.build


def custom_commands(name: str) -> CommandSelector:
    def select(component: ResolvedComponent) -> tuple[Command, ...]:
        return component.custom_commands.get(name, ())

    return select


def working_dir_for(command: Command, component: ResolvedComponent) -> Path:
    """`dir` relative to the component's manifest directory, or that directory."""
    if command.dir is None:
        return component.source_dir
    return resolve_against(command.dir, component.source_dir)


def make_build_plan(
    components: list[ResolvedComponent],
    waves: list[list[str]],
    select: CommandSelector = build_commands,
    requires: Mapping[str, Iterable[str]] | None = None,
) -> BuildPlan:
    """Lay out each component's selected commands, wave by wave."""
    logger = getAppLogger()
    by_name = {c.name: c for c in components}
    plan = BuildPlan(
        waves=[list(w) for w in waves],
        requires={n: set((requires or {}).get(n, ())) for n in by_name},
    )

    for wave in waves:
        for name in wave:
            component = by_name[name]
            cplan = ComponentPlan(component=component)
            for index, command in enumerate(select(component)):
                cplan.entries.append(
                    PlanEntry(
                        component=name,
                        index=index,
                        command=command,
                        working_dir=working_dir_for(command, component),
                    )
                )
            plan.components[name] = cplan

    logger.debug(
        "Build plan: %d wave(s), %d component(s), %d step(s)",
        len(plan.waves),
        len(plan.components),
        len(plan.entries()),
    )
    return plan


def annotate_plan(plan: BuildPlan) -> BuildPlan:
    """Attach a staleness verdict to every entry, for reporting.

    The executor evaluates again right before each step, since earlier
    steps of a component usually produce the inputs of later ones.
    """
    for entry in plan.entries():
        try:
            entry.verdict = evaluate_staleness(entry.command, entry.working_dir)
            entry.error = None
        except StalenessError as e:
            entry.verdict = None
            entry.error = str(e)
    return plan
