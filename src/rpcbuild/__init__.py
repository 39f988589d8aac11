# src/rpcbuild/__init__.py

"""RPC Build — build orchestration for multi-component WebAssembly apps.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use and custom integrations.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - load_application()    → Parse and merge manifest documents
    - resolve_components()  → Apply templates and profiles
    - run_build()           → Build every component, skipping fresh steps
    - run_custom_command()  → Run a named custom command sequence
    - run_clean()           → Remove generated artifacts
"""

from .build import (
    BuildOptions,
    PreparedBuild,
    plan_build,
    prepare,
    run_build,
    run_clean,
    run_custom_command,
)
from .config import (
    Application,
    Command,
    ComponentDefinition,
    ComponentDependency,
    ComponentProfiles,
    ComponentProperties,
    ExternalCommand,
    IncrementalCommand,
    Manifest,
    ManifestConfig,
    ResolvedComponent,
    TemplateRef,
    load_application,
    merge_manifests,
    parse_manifest,
    resolve_all_profiles,
    resolve_component,
    resolve_components,
    validate_manifest,
)
from .constants import (
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_MAX_WORKERS,
    DEFAULT_FAILURE_POLICY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TEMP_DIR,
)
from .errors import ConfigError, PlanningError, RpcBuildError, StalenessError
from .executor import (
    BuildReport,
    CommandResult,
    ComponentReport,
    StepResult,
    execute_plan,
    run_shell_command,
)
from .graph import DependencyGraph, build_dependency_graph
from .logs import getAppLogger
from .meta import PROGRAM_DISPLAY, PROGRAM_ENV, PROGRAM_PACKAGE
from .planner import (
    BuildPlan,
    PlanEntry,
    annotate_plan,
    compute_build_waves,
    make_build_plan,
)
from .staleness import StalenessVerdict, evaluate_staleness


__all__ = [  # noqa: RUF022
    # build
    "BuildOptions",
    "PreparedBuild",
    "plan_build",
    "prepare",
    "run_build",
    "run_clean",
    "run_custom_command",
    # config
    "Application",
    "Command",
    "ComponentDefinition",
    "ComponentDependency",
    "ComponentProfiles",
    "ComponentProperties",
    "ExternalCommand",
    "IncrementalCommand",
    "Manifest",
    "ManifestConfig",
    "ResolvedComponent",
    "TemplateRef",
    "load_application",
    "merge_manifests",
    "parse_manifest",
    "resolve_all_profiles",
    "resolve_component",
    "resolve_components",
    "validate_manifest",
    # constants
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_ENV_MAX_WORKERS",
    "DEFAULT_FAILURE_POLICY",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_TEMP_DIR",
    # errors
    "ConfigError",
    "PlanningError",
    "RpcBuildError",
    "StalenessError",
    # executor
    "BuildReport",
    "CommandResult",
    "ComponentReport",
    "StepResult",
    "execute_plan",
    "run_shell_command",
    # graph
    "DependencyGraph",
    "build_dependency_graph",
    # logs
    "getAppLogger",
    # meta
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    # planner
    "BuildPlan",
    "PlanEntry",
    "annotate_plan",
    "compute_build_waves",
    "make_build_plan",
    # staleness
    "StalenessVerdict",
    "evaluate_staleness",
]
