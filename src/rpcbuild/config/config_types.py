# src/rpcbuild/config/config_types.py


from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TypedDict

from typing_extensions import NotRequired

from rpcbuild.constants import DEFAULT_TEMP_DIR, LINKED_WASM_SUBDIR


DependencyType = Literal["wasm-rpc"]
FilePermissions = Literal["read-only", "read-write"]


# --------------------------------------------------------------------------- #
# Raw document schema (what a syntax-agnostic loader hands over)
# --------------------------------------------------------------------------- #


class ExternalCommandConfig(TypedDict):
    command: str
    dir: NotRequired[str]
    rmdirs: NotRequired[list[str]]
    mkdirs: NotRequired[list[str]]
    # both present → incremental (staleness-checked) command
    sources: NotRequired[list[str]]
    targets: NotRequired[list[str]]


class ComponentPropertiesConfig(TypedDict, total=False):
    sourceWit: str
    generatedWit: str
    componentWasm: str
    linkedWasm: str
    build: list[ExternalCommandConfig]
    customCommands: dict[str, list[ExternalCommandConfig]]
    clean: list[str]


# Every key a template or component object may carry. Which combination is
# legal (ref / properties / profiles) is decided by config_parse.
class ComponentConfig(ComponentPropertiesConfig, total=False):
    template: str
    profiles: dict[str, ComponentPropertiesConfig]
    defaultProfile: str


class ComponentDependencyConfig(TypedDict):
    type: DependencyType
    target: str


class InitialComponentFileConfig(TypedDict):
    sourcePath: str
    targetPath: str
    permissions: NotRequired[FilePermissions]


class ManifestConfig(TypedDict, total=False):
    includes: list[str]  # root-only
    tempDir: str
    witDeps: list[str]
    templates: dict[str, ComponentConfig]
    components: dict[str, ComponentConfig]
    dependencies: dict[str, list[ComponentDependencyConfig]]


PROPERTY_KEYS: frozenset[str] = frozenset(ComponentPropertiesConfig.__annotations__)
PROFILE_KEYS: frozenset[str] = frozenset({"profiles", "defaultProfile"})


# --------------------------------------------------------------------------- #
# Parsed model: one tagged variant per polymorphic shape
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ExternalCommand:
    """A build step that always runs."""

    command: str
    dir: str | None = None
    rmdirs: tuple[str, ...] = ()
    mkdirs: tuple[str, ...] = ()

    @property
    def incremental(self) -> bool:
        return False


@dataclass(frozen=True)
class IncrementalCommand(ExternalCommand):
    """A build step that only runs when its targets are older than its sources."""

    sources: tuple[str, ...] = ()
    targets: tuple[str, ...] = ()

    @property
    def incremental(self) -> bool:
        return True


Command = ExternalCommand | IncrementalCommand


@dataclass(frozen=True)
class ComponentProperties:
    """Concrete build configuration.

    `None` means "not set on this layer" so a merge can tell an unset
    field from an explicitly empty one.
    """

    source_wit: str | None = None
    generated_wit: str | None = None
    component_wasm: str | None = None
    linked_wasm: str | None = None
    build: tuple[Command, ...] | None = None
    custom_commands: Mapping[str, tuple[Command, ...]] | None = None
    clean: tuple[str, ...] | None = None


@dataclass(frozen=True)
class TemplateRef:
    template: str


@dataclass(frozen=True)
class ComponentProfiles:
    profiles: Mapping[str, ComponentProperties]
    default_profile: str


TemplateShape = TemplateRef | ComponentProperties | ComponentProfiles


@dataclass(frozen=True)
class ComponentDependency:
    type: DependencyType
    target: str


@dataclass(frozen=True)
class ComponentDefinition:
    name: str
    shape: TemplateShape
    # set for a bare `{template: ...}` and for a sibling `template` field
    template: str | None
    source_dir: Path


@dataclass
class Manifest:
    """One parsed manifest document."""

    source_dir: Path
    includes: list[str] = field(default_factory=list)
    temp_dir: str | None = None
    wit_deps: list[str] = field(default_factory=list)
    templates: dict[str, TemplateShape] = field(default_factory=dict)
    components: dict[str, ComponentDefinition] = field(default_factory=dict)
    dependencies: dict[str, list[ComponentDependency]] = field(default_factory=dict)


@dataclass
class Application:
    """All manifest documents of one application, merged and immutable per run."""

    root_dir: Path
    temp_dir: str = DEFAULT_TEMP_DIR
    includes: list[str] = field(default_factory=list)
    wit_deps: list[str] = field(default_factory=list)
    templates: dict[str, TemplateShape] = field(default_factory=dict)
    components: dict[str, ComponentDefinition] = field(default_factory=dict)
    dependencies: dict[str, list[ComponentDependency]] = field(default_factory=dict)

    @property
    def temp_path(self) -> Path:
        temp = Path(self.temp_dir)
        return temp if temp.is_absolute() else self.root_dir / temp

    def wit_dep_paths(self) -> list[Path]:
        return [
            p if p.is_absolute() else self.root_dir / p
            for p in (Path(d) for d in self.wit_deps)
        ]


# --------------------------------------------------------------------------- #
# Resolved model
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ResolvedComponent:
    """A component with every template and profile indirection merged away."""

    name: str
    source_dir: Path
    profile: str | None = None
    source_wit: str | None = None
    generated_wit: str | None = None
    component_wasm: str | None = None
    linked_wasm: str | None = None
    build: tuple[Command, ...] = ()
    custom_commands: Mapping[str, tuple[Command, ...]] = field(default_factory=dict)
    clean: tuple[str, ...] = ()
    dependencies: tuple[ComponentDependency, ...] = ()

    def path(self, value: str | None) -> Path | None:
        if value is None:
            return None
        p = Path(value)
        return p if p.is_absolute() else self.source_dir / p

    @property
    def interface_path(self) -> Path | None:
        """Where stub generation reads this component's WIT from."""
        return self.path(self.generated_wit or self.source_wit)

    def clean_paths(self) -> list[Path]:
        """Generated artifacts plus the extra `clean` entries, in that order."""
        values = [self.generated_wit, self.component_wasm, self.linked_wasm]
        values.extend(self.clean)
        return [p for p in (self.path(v) for v in values) if p is not None]

    def as_dict(self) -> dict[str, Any]:
        """Plain representation, handy for logging and snapshots."""
        return {
            "name": self.name,
            "profile": self.profile,
            "sourceWit": self.source_wit,
            "generatedWit": self.generated_wit,
            "componentWasm": self.component_wasm,
            "linkedWasm": self.linked_wasm,
            "build": [c.command for c in self.build],
            "customCommands": {
                k: [c.command for c in v] for k, v in self.custom_commands.items()
            },
            "clean": list(self.clean),
            "dependencies": [d.target for d in self.dependencies],
        }


def default_linked_wasm(temp_path: Path, component_name: str) -> str:
    return str(temp_path / LINKED_WASM_SUBDIR / f"{component_name}.wasm")
