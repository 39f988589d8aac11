# tests/50_core/test_compute_build_waves.py
"""Tests for build ordering and plan construction."""

from pathlib import Path

import pytest

import rpcbuild.config.config_types as mod_types
import rpcbuild.errors as mod_errors
import rpcbuild.graph as mod_graph
import rpcbuild.planner as mod_planner
from tests.utils import write_file


def _component(
    name: str, *commands: mod_types.Command, source_dir: Path = Path("/app")
) -> mod_types.ResolvedComponent:
    return mod_types.ResolvedComponent(
        name=name,
        source_dir=source_dir,
        build=commands,
        custom_commands={"gen": (mod_types.ExternalCommand(f"gen {name}"),)}
        if name == "a"
        else {},
    )


# --------------------------------------------------------------------------- #
# ordering
# --------------------------------------------------------------------------- #


def test_no_requirements_gives_single_wave_in_order() -> None:
    waves = mod_planner.compute_build_waves(["c", "a", "b"], {})
    assert waves == [["c", "a", "b"]]


def test_requirements_split_into_waves() -> None:
    waves = mod_planner.compute_build_waves(
        ["app", "lib", "util", "tool"],
        {"app": ["lib", "util"], "lib": ["util"]},
    )
    assert waves == [["util", "tool"], ["lib"], ["app"]]


def test_requirements_on_unknown_names_are_ignored() -> None:
    waves = mod_planner.compute_build_waves(["a"], {"a": ["elsewhere"]})
    assert waves == [["a"]]


def test_cycle_in_requirements() -> None:
    with pytest.raises(mod_errors.PlanningError, match="Build order cycle detected"):
        mod_planner.compute_build_waves(["a", "b"], {"a": ["b"], "b": ["a"]})


def test_ordering_edges_drop_rpc_cycles() -> None:
    deps = {
        "a": (mod_types.ComponentDependency("wasm-rpc", "b"),),
        "b": (mod_types.ComponentDependency("wasm-rpc", "a"),),
    }
    components = [
        mod_types.ResolvedComponent(
            name=n, source_dir=Path("/app"), source_wit="wit", dependencies=deps[n]
        )
        for n in ("a", "b")
    ]
    graph = mod_graph.build_dependency_graph(components)

    requires = mod_planner.ordering_edges(graph)

    assert requires == {"a": set(), "b": set()}
    assert mod_planner.compute_build_waves(graph.nodes, requires) == [["a", "b"]]


# --------------------------------------------------------------------------- #
# plans
# --------------------------------------------------------------------------- #


def test_make_build_plan_lays_out_steps() -> None:
    first = mod_types.ExternalCommand("npm install")
    second = mod_types.ExternalCommand("npm run build", dir="frontend")
    components = [_component("a", first, second), _component("b")]

    plan = mod_planner.make_build_plan(components, [["a", "b"]])

    assert plan.waves == [["a", "b"]]
    assert list(plan.components) == ["a", "b"]
    entries = plan.entries()
    assert [(e.component, e.index, e.command) for e in entries] == [
        ("a", 0, first),
        ("a", 1, second),
    ]
    assert entries[0].working_dir == Path("/app")
    assert entries[1].working_dir == Path("/app/frontend")
    assert plan.components["b"].entries == []
    assert plan.requires == {"a": set(), "b": set()}


def test_custom_command_selector() -> None:
    components = [_component("a", mod_types.ExternalCommand("build"))]

    plan = mod_planner.make_build_plan(
        components, [["a"]], mod_planner.custom_commands("gen")
    )

    assert [e.command.command for e in plan.entries()] == ["gen a"]


def test_annotate_plan(tmp_path: Path) -> None:
    write_file(tmp_path / "src" / "main.rs")
    missing_target = mod_types.IncrementalCommand(
        "cargo build", sources=("src",), targets=("out.wasm",)
    )
    broken = mod_types.IncrementalCommand(
        "cargo build", sources=("nope/**/*.rs",), targets=("out.wasm",)
    )
    components = [
        _component("a", missing_target, source_dir=tmp_path),
        _component("b", broken, source_dir=tmp_path),
    ]
    plan = mod_planner.make_build_plan(components, [["a", "b"]])

    mod_planner.annotate_plan(plan)

    a_entry, b_entry = plan.entries()
    assert a_entry.verdict is not None
    assert a_entry.verdict.stale
    assert a_entry.error is None
    assert b_entry.verdict is None
    assert b_entry.error is not None
    assert "nope/**/*.rs" in b_entry.error
