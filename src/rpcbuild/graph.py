# src/rpcbuild/graph.py
"""Inter-component dependency graph.

Edges are `wasm-rpc` dependencies (owner → target). Self-edges and cycles
are valid: generating an RPC client stub only needs the target's WIT
interface, never its built binary, so a cycle never blocks a build. The
graph therefore does no cycle rejection; `cycles()` exists for reporting.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import Application, ResolvedComponent
from .errors import PlanningError
from .logs import getAppLogger


@dataclass
class DependencyGraph:
    nodes: list[str] = field(default_factory=list)
    # owner → targets, de-duplicated, in declaration order
    adjacency: dict[str, list[str]] = field(default_factory=dict)

    def dependencies_of(self, name: str) -> list[str]:
        return list(self.adjacency.get(name, []))

    def dependents_of(self, name: str) -> list[str]:
        return [n for n in self.nodes if name in self.adjacency.get(n, [])]

    def edges(self) -> list[tuple[str, str]]:
        return [
            (src, dst) for src in self.nodes for dst in self.adjacency.get(src, [])
        ]

    def cycles(self) -> list[list[str]]:
        """Strongly connected components of size >= 2, plus self-loops.

        Deterministic: members follow node declaration order, and cycles are
        ordered by their first member.
        """
        index_of: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        on_stack: set[str] = set()
        stack: list[str] = []
        found: list[list[str]] = []
        counter = 0

        def strongconnect(node: str) -> None:
            nonlocal counter
            index_of[node] = lowlink[node] = counter
            counter += 1
            stack.append(node)
            on_stack.add(node)

            for succ in self.adjacency.get(node, []):
                if succ not in index_of:
                    strongconnect(succ)
                    lowlink[node] = min(lowlink[node], lowlink[succ])
                elif succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])

            if lowlink[node] == index_of[node]:
                members: set[str] = set()
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    members.add(member)
                    if member == node:
                        break
                is_self_loop = node in self.adjacency.get(node, [])
                if len(members) > 1 or is_self_loop:
                    found.append([n for n in self.nodes if n in members])

        for node in self.nodes:
            if node not in index_of:
                strongconnect(node)

        position = {n: i for i, n in enumerate(self.nodes)}
        return sorted(found, key=lambda c: position[c[0]])


def check_dependency_owners(app: Application) -> None:
    """Every key of `dependencies` must name a declared component.

    Raises:
        PlanningError: naming the undeclared owners.
    """
    unknown = [owner for owner in app.dependencies if owner not in app.components]
    if unknown:
        xmsg = (
            "Dependencies declared for unknown component(s):"
            f" {', '.join(sorted(unknown))}"
        )
        raise PlanningError(xmsg)


def build_dependency_graph(
    components: list[ResolvedComponent],
    known: Iterable[str] | None = None,
) -> DependencyGraph:
    """Build the graph over `components`.

    `known` names every component that exists in the application; it
    defaults to the given components and matters when only a subset is
    being built (a dependency may point outside the subset).

    Raises:
        PlanningError: if an edge targets a component that does not exist.
    """
    logger = getAppLogger()
    by_name = {c.name: c for c in components}
    existing = set(known) if known is not None else set(by_name)
    existing |= set(by_name)

    graph = DependencyGraph(nodes=[c.name for c in components])
    dangling: list[str] = []

    for component in components:
        targets: list[str] = []
        for dep in component.dependencies:
            if dep.target not in existing:
                dangling.append(f"{component.name} -> {dep.target}")
                continue
            if dep.target not in targets:
                targets.append(dep.target)

            target = by_name.get(dep.target)
            if target is not None and target.interface_path is None:
                logger.warning(
                    "Component %s depends on %s, which declares neither"
                    " sourceWit nor generatedWit (no interface for stub generation)",
                    component.name,
                    dep.target,
                )
        graph.adjacency[component.name] = targets

    if dangling:
        xmsg = f"Dependency target(s) do not exist: {', '.join(dangling)}"
        raise PlanningError(xmsg)

    for cycle in graph.cycles():
        logger.debug(
            "Dependency cycle (satisfied by stub generation): %s", " -> ".join(cycle)
        )

    logger.debug(
        "Dependency graph: %d node(s), %d edge(s)",
        len(graph.nodes),
        len(graph.edges()),
    )
    return graph
