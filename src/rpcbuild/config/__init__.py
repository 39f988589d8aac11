# src/rpcbuild/config/__init__.py

"""Manifest handling for rpcbuild.

This module provides manifest validation, shape parsing, merging of
multiple documents, and template/profile resolution.
"""

from .config_parse import (
    load_application,
    merge_manifests,
    parse_command,
    parse_manifest,
    parse_properties,
    parse_shape,
)
from .config_resolve import (
    available_profiles,
    merge_properties,
    render_properties,
    resolve_all_profiles,
    resolve_component,
    resolve_components,
    resolve_template,
)
from .config_types import (
    Application,
    Command,
    ComponentConfig,
    ComponentDefinition,
    ComponentDependency,
    ComponentDependencyConfig,
    ComponentProfiles,
    ComponentProperties,
    ComponentPropertiesConfig,
    ExternalCommand,
    ExternalCommandConfig,
    IncrementalCommand,
    InitialComponentFileConfig,
    Manifest,
    ManifestConfig,
    ResolvedComponent,
    TemplateRef,
    TemplateShape,
)
from .config_validate import validate_initial_component_file, validate_manifest


__all__ = [  # noqa: RUF022
    # config_parse
    "load_application",
    "merge_manifests",
    "parse_command",
    "parse_manifest",
    "parse_properties",
    "parse_shape",
    # config_resolve
    "available_profiles",
    "merge_properties",
    "render_properties",
    "resolve_all_profiles",
    "resolve_component",
    "resolve_components",
    "resolve_template",
    # config_types
    "Application",
    "Command",
    "ComponentConfig",
    "ComponentDefinition",
    "ComponentDependency",
    "ComponentDependencyConfig",
    "ComponentProfiles",
    "ComponentProperties",
    "ComponentPropertiesConfig",
    "ExternalCommand",
    "ExternalCommandConfig",
    "IncrementalCommand",
    "InitialComponentFileConfig",
    "Manifest",
    "ManifestConfig",
    "ResolvedComponent",
    "TemplateRef",
    "TemplateShape",
    # config_validate
    "validate_initial_component_file",
    "validate_manifest",
]
