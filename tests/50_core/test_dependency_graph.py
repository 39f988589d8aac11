# tests/50_core/test_dependency_graph.py
"""Tests for the inter-component dependency graph."""

from pathlib import Path

import pytest

import rpcbuild.config.config_types as mod_types
import rpcbuild.errors as mod_errors
import rpcbuild.graph as mod_graph
import rpcbuild.logs as mod_logs
from tests.utils import make_app, make_manifest


def _component(
    name: str, *targets: str, wit: str | None = "wit"
) -> mod_types.ResolvedComponent:
    return mod_types.ResolvedComponent(
        name=name,
        source_dir=Path("/app"),
        source_wit=wit,
        dependencies=tuple(
            mod_types.ComponentDependency(type="wasm-rpc", target=t) for t in targets
        ),
    )


def test_graph_edges_and_neighbours() -> None:
    graph = mod_graph.build_dependency_graph(
        [_component("a", "b", "c"), _component("b", "c"), _component("c")]
    )

    assert graph.nodes == ["a", "b", "c"]
    assert graph.edges() == [("a", "b"), ("a", "c"), ("b", "c")]
    assert graph.dependencies_of("a") == ["b", "c"]
    assert graph.dependents_of("c") == ["a", "b"]
    assert graph.cycles() == []


def test_duplicate_edges_collapse() -> None:
    graph = mod_graph.build_dependency_graph(
        [_component("a", "b", "b"), _component("b")]
    )
    assert graph.edges() == [("a", "b")]


def test_mutual_and_self_cycles_are_accepted() -> None:
    graph = mod_graph.build_dependency_graph(
        [
            _component("a", "b"),
            _component("b", "a"),
            _component("c", "c"),
            _component("d", "a"),
        ]
    )

    assert graph.cycles() == [["a", "b"], ["c"]]


def test_longer_cycle_members_follow_declaration_order() -> None:
    graph = mod_graph.build_dependency_graph(
        [_component("x", "z"), _component("y", "x"), _component("z", "y")]
    )
    assert graph.cycles() == [["x", "y", "z"]]


def test_dangling_target() -> None:
    with pytest.raises(mod_errors.PlanningError, match="a -> ghost"):
        mod_graph.build_dependency_graph([_component("a", "ghost")])


def test_target_outside_selected_subset_is_known() -> None:
    graph = mod_graph.build_dependency_graph(
        [_component("a", "b")], known=["a", "b"]
    )
    assert graph.edges() == [("a", "b")]


def test_target_without_interface_warns(
    module_logger: mod_logs.AppLogger,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(
        module_logger, "warning", lambda msg, *args: warnings.append(msg % args)
    )

    mod_graph.build_dependency_graph([_component("a", "b"), _component("b", wit=None)])

    assert len(warnings) == 1
    assert warnings[0].startswith("Component a depends on b")


def test_check_dependency_owners(tmp_path: Path) -> None:
    app = make_app(tmp_path, make_manifest({"a": {}}, dependencies={"a": ["a"]}))
    mod_graph.check_dependency_owners(app)

    app.dependencies["nobody"] = [
        mod_types.ComponentDependency(type="wasm-rpc", target="a")
    ]
    with pytest.raises(mod_errors.PlanningError, match="unknown component"):
        mod_graph.check_dependency_owners(app)
