# tests/90_integration/test_run_build.py
"""End-to-end builds with real shell commands."""

import sys
from pathlib import Path

import pytest

import rpcbuild.build as mod_build
import rpcbuild.errors as mod_errors
from tests.utils import (
    make_app,
    make_command,
    make_component,
    make_manifest,
    set_mtime,
    write_file,
)


pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="POSIX shell syntax"
)

OLD = 1_600_000_000 * 1_000_000_000


def _rpc_pair(tmp_path: Path) -> dict[str, object]:
    """`a` calls `b` over RPC; each copies its source into a target."""
    for name in ("a", "b"):
        set_mtime(write_file(tmp_path / name / "src" / "main.txt", name), OLD)
    components = {
        name: make_component(
            [
                make_command(
                    "cp src/main.txt out.txt",
                    dir=name,
                    sources=["src/**/*.txt"],
                    targets=["out.txt"],
                )
            ],
            sourceWit=f"{name}/wit",
        )
        for name in ("a", "b")
    }
    return make_manifest(components, dependencies={"a": ["b"]})


def test_build_and_rebuild(tmp_path: Path) -> None:
    app = make_app(tmp_path, _rpc_pair(tmp_path))

    first = mod_build.run_build(app)

    assert first.success
    for name in ("a", "b"):
        assert [s.outcome for s in first.get(name).steps] == ["ran-ok"]
        assert (tmp_path / name / "out.txt").read_text() == name

    second = mod_build.run_build(app)

    assert second.success
    for name in ("a", "b"):
        assert [s.outcome for s in second.get(name).steps] == ["skipped-fresh"]

    # touching a source re-runs only that component
    out_ns = (tmp_path / "a" / "out.txt").stat().st_mtime_ns
    set_mtime(tmp_path / "a" / "src" / "main.txt", out_ns + 1_000_000_000)

    third = mod_build.run_build(app)

    assert [s.outcome for s in third.get("a").steps] == ["ran-ok"]
    assert [s.outcome for s in third.get("b").steps] == ["skipped-fresh"]


def test_unmatched_sources_fail_only_their_component(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "broken": make_component(
                [
                    make_command(
                        "echo never > out.txt",
                        sources=["src/*.txt"],
                        targets=["out.txt"],
                    )
                ]
            ),
            "fine": make_component([make_command("echo ok > fine.txt")]),
        }
    )
    app = make_app(tmp_path, raw)

    report = mod_build.run_build(app)

    assert not report.success
    assert report.get("broken").steps[0].outcome == "staleness-error"
    assert report.get("fine").steps[0].outcome == "ran-ok"
    assert not (tmp_path / "out.txt").exists()
    assert (tmp_path / "fine.txt").read_text().strip() == "ok"


def test_rpc_cycles_build(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "a": make_component([make_command("echo a >> log.txt")], sourceWit="wit"),
            "b": make_component([make_command("echo b >> log.txt")], sourceWit="wit"),
        },
        dependencies={"a": ["b", "a"], "b": ["a"]},
    )

    report = mod_build.run_build(make_app(tmp_path, raw), mod_build.BuildOptions())

    assert report.success
    assert sorted((tmp_path / "log.txt").read_text().split()) == ["a", "b"]


def test_failing_command_reports_exit_code(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "a": make_component(
                [make_command("echo boom && exit 7"), make_command("touch after")]
            )
        }
    )

    report = mod_build.run_build(make_app(tmp_path, raw))

    step = report.get("a").steps[0]
    assert step.outcome == "ran-failed"
    assert step.exit_code == 7  # noqa: PLR2004
    assert "boom" in step.output
    assert len(report.get("a").steps) == 1
    assert not (tmp_path / "after").exists()


def test_templates_profiles_and_subset(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "cart": {"template": "shell"},
            "auth": {"template": "shell"},
        },
        templates={
            "shell": {
                "profiles": {
                    "debug": make_component(
                        [make_command("echo debug > {{ componentName }}.out")]
                    ),
                    "release": make_component(
                        [make_command("echo release > {{ component_name }}.out")]
                    ),
                },
                "defaultProfile": "debug",
            }
        },
    )
    app = make_app(tmp_path, raw)

    report = mod_build.run_build(
        app, mod_build.BuildOptions(profile="release", components=["cart"])
    )

    assert [c.name for c in report.components] == ["cart"]
    assert (tmp_path / "cart.out").read_text().strip() == "release"
    assert not (tmp_path / "auth.out").exists()


def test_stop_policy(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "a": make_component([make_command("exit 1")]),
            "b": make_component([make_command("touch b.txt")]),
        }
    )

    report = mod_build.run_build(
        make_app(tmp_path, raw),
        mod_build.BuildOptions(max_workers=1, failure_policy="stop"),
    )

    assert report.get("a").status == "failed"
    assert report.get("b").status == "cancelled"
    assert not (tmp_path / "b.txt").exists()


def test_planning_errors_abort_before_running(tmp_path: Path) -> None:
    raw = make_manifest(
        {"a": make_component([make_command("touch ran.txt")])},
        dependencies={"a": ["ghost"]},
    )

    with pytest.raises(mod_errors.PlanningError):
        mod_build.run_build(make_app(tmp_path, raw))

    assert not (tmp_path / "ran.txt").exists()


def test_plan_build_without_running(tmp_path: Path) -> None:
    app = make_app(tmp_path, _rpc_pair(tmp_path))

    plan = mod_build.plan_build(app)

    assert plan.waves == [["a", "b"]]
    assert [e.working_dir for e in plan.entries()] == [tmp_path / "a", tmp_path / "b"]
    assert not (tmp_path / "a" / "out.txt").exists()


def test_undecodable_output_does_not_abort_build(tmp_path: Path) -> None:
    raw = make_manifest(
        {
            "bad": make_component([make_command(r"printf '\377\376\n'")]),
            "good": make_component([make_command("echo ok")]),
        }
    )

    report = mod_build.run_build(
        make_app(tmp_path, raw), mod_build.BuildOptions(max_workers=1)
    )

    assert report.success
    assert report.get("bad").steps[0].output == "\ufffd\ufffd\n"
    assert report.get("good").steps[0].output == "ok\n"
