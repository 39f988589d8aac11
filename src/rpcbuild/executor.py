# src/rpcbuild/executor.py
"""Run a `BuildPlan`.

Components of one wave run concurrently on a bounded thread pool; the steps
of a single component always run one after another, in declaration order.
Failures stay scoped to their component and are collected in the report.
"""

import subprocess
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Literal, Protocol

from apathetic_utils import cast_hint

from .config import Command
from .constants import DEFAULT_FAILURE_POLICY, DEFAULT_MAX_WORKERS, FailurePolicy
from .errors import ConfigError, StalenessError
from .logs import getAppLogger, make_output_sink
from .planner import BuildPlan, ComponentPlan, PlanEntry
from .staleness import evaluate_staleness
from .utils import remove_path, resolve_against


StepOutcome = Literal["skipped-fresh", "ran-ok", "ran-failed", "staleness-error"]
ComponentStatus = Literal["ok", "failed", "cancelled"]


# --------------------------------------------------------------------------- #
# report
# --------------------------------------------------------------------------- #


@dataclass
class StepResult:
    component: str
    index: int
    command: str
    outcome: StepOutcome
    exit_code: int | None = None
    output: str = ""
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.outcome in ("ran-failed", "staleness-error")


@dataclass
class ComponentReport:
    name: str
    status: ComponentStatus = "ok"
    steps: list[StepResult] = field(default_factory=list)


@dataclass
class BuildReport:
    components: list[ComponentReport] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(c.status == "ok" for c in self.components)

    def get(self, name: str) -> ComponentReport:
        for component in self.components:
            if component.name == name:
                return component
        raise KeyError(name)

    def failed(self) -> list[ComponentReport]:
        return [c for c in self.components if c.status != "ok"]

    def summary(self) -> list[str]:
        """One human-readable line per component."""
        lines: list[str] = []
        for c in self.components:
            counts: dict[str, int] = {}
            for step in c.steps:
                counts[step.outcome] = counts.get(step.outcome, 0) + 1
            detail = ", ".join(f"{n} {o}" for o, n in counts.items()) or "no steps"
            lines.append(f"{c.name}: {c.status} ({detail})")
        return lines


# --------------------------------------------------------------------------- #
# command running
# --------------------------------------------------------------------------- #


@dataclass
class CommandResult:
    exit_code: int
    output: str


class CommandRunner(Protocol):
    def __call__(
        self, command: str, cwd: Path, on_line: Callable[[str], None]
    ) -> CommandResult: ...


def run_shell_command(
    command: str, cwd: Path, on_line: Callable[[str], None]
) -> CommandResult:
    """Run `command` through the shell in `cwd`, streaming merged output.

    Output is decoded as UTF-8; undecodable bytes become U+FFFD.
    """
    lines: list[str] = []
    with subprocess.Popen(  # noqa: S602
        command,
        shell=True,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
    ) as proc:
        stdout = cast_hint(IO[str], proc.stdout)
        for line in stdout:
            lines.append(line)
            on_line(line.rstrip("\n"))
        exit_code = proc.wait()
    return CommandResult(exit_code=exit_code, output="".join(lines))


def apply_directory_lifecycle(command: Command, working_dir: Path) -> None:
    """Delete `rmdirs` then create `mkdirs`, both relative to `working_dir`.

    Already-absent and already-present paths are fine; anything else
    propagates as `OSError`.
    """
    logger = getAppLogger()
    for entry in command.rmdirs:
        path = resolve_against(entry, working_dir)
        if remove_path(path):
            logger.trace(f"[lifecycle] removed {path}")

    for entry in command.mkdirs:
        path = resolve_against(entry, working_dir)
        logger.trace(f"[lifecycle] mkdir {path}")
        path.mkdir(parents=True, exist_ok=True)


# --------------------------------------------------------------------------- #
# execution
# --------------------------------------------------------------------------- #


def execute_step(entry: PlanEntry, runner: CommandRunner) -> StepResult:
    logger = getAppLogger()
    command = entry.command
    result = StepResult(
        component=entry.component,
        index=entry.index,
        command=command.command,
        outcome="ran-ok",
    )

    try:
        verdict = evaluate_staleness(command, entry.working_dir)
    except (StalenessError, OSError) as e:
        logger.error("[%s] %s", entry.component, e)
        result.outcome = "staleness-error"
        result.message = str(e)
        return result
    entry.verdict = verdict

    if not verdict.stale:
        logger.info("⏭️  [%s] %s (up to date)", entry.component, command.command)
        result.outcome = "skipped-fresh"
        result.message = verdict.reason
        return result

    logger.info("▶️  [%s] %s", entry.component, command.command)
    logger.debug(
        "[%s] running in %s (%s)", entry.component, entry.working_dir, verdict.reason
    )

    try:
        apply_directory_lifecycle(command, entry.working_dir)
        completed = runner(
            command.command,
            entry.working_dir,
            make_output_sink(entry.component),
        )
    except OSError as e:
        logger.error("[%s] %s failed: %s", entry.component, command.command, e)
        result.outcome = "ran-failed"
        result.message = str(e)
        return result

    result.exit_code = completed.exit_code
    result.output = completed.output
    if completed.exit_code != 0:
        logger.error(
            "[%s] %s exited with code %d",
            entry.component,
            command.command,
            completed.exit_code,
        )
        result.outcome = "ran-failed"
        result.message = f"exit code {completed.exit_code}"
    return result


def execute_component(cplan: ComponentPlan, runner: CommandRunner) -> ComponentReport:
    """Run one component's steps in order, stopping at the first failure."""
    logger = getAppLogger()
    report = ComponentReport(name=cplan.name)

    for entry in cplan.entries:
        step = execute_step(entry, runner)
        report.steps.append(step)
        if step.failed:
            report.status = "failed"
            break

    if report.status == "ok":
        logger.info("✅ %s", cplan.name)
    else:
        logger.error("❌ %s", cplan.name)
    return report


def execute_plan(
    plan: BuildPlan,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    failure_policy: FailurePolicy = DEFAULT_FAILURE_POLICY,
    runner: CommandRunner = run_shell_command,
) -> BuildReport:
    """Execute every component of `plan` and report every outcome.

    With `failure_policy="stop"`, once a component fails no further
    component is started; components already running finish normally and
    the ones never started are reported as `cancelled`. A component whose
    ordering requirements did not all succeed is always `cancelled`.
    """
    logger = getAppLogger()
    if max_workers < 1:
        xmsg = f"max_workers must be at least 1 (got {max_workers})"
        raise ConfigError(xmsg)

    reports: dict[str, ComponentReport] = {}
    stop = threading.Event()

    def run_one(name: str) -> ComponentReport:
        if stop.is_set():
            logger.debug("Not starting %s: an earlier component failed", name)
            return ComponentReport(name=name, status="cancelled")
        report = execute_component(plan.components[name], runner)
        if report.status != "ok" and failure_policy == "stop":
            stop.set()
        return report

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for i, wave in enumerate(plan.waves, 1):
            logger.debug("Wave %d/%d: %s", i, len(plan.waves), ", ".join(wave))
            runnable: list[str] = []
            for name in wave:
                blocked = [
                    r
                    for r in sorted(plan.requires.get(name, ()))
                    if r in reports and reports[r].status != "ok"
                ]
                if blocked:
                    logger.warning(
                        "Skipping %s: required component(s) %s did not succeed",
                        name,
                        ", ".join(blocked),
                    )
                    reports[name] = ComponentReport(name=name, status="cancelled")
                else:
                    runnable.append(name)

            futures = {name: pool.submit(run_one, name) for name in runnable}
            for name, future in futures.items():
                reports[name] = future.result()

    ordered = [reports[name] for name in plan.components]
    report = BuildReport(components=ordered)
    logger.info(
        "%s %d component(s), %d failed",
        "🎉" if report.success else "⚠️ ",
        len(ordered),
        len(report.failed()),
    )
    return report
