# src/rpcbuild/config/config_parse.py
"""Turn a validated raw manifest into tagged shape variants.

The raw document allows three template shapes (reference, properties,
profiles) and two command shapes (plain, incremental). Each object is
classified exactly once here, so later stages match on concrete types and
never probe for fields again.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from apathetic_utils import cast_hint

from rpcbuild.constants import DEFAULT_TEMP_DIR
from rpcbuild.errors import ConfigError
from rpcbuild.logs import getAppLogger

from .config_types import (
    PROFILE_KEYS,
    PROPERTY_KEYS,
    Application,
    Command,
    ComponentDefinition,
    ComponentDependency,
    ComponentProfiles,
    ComponentProperties,
    ExternalCommand,
    IncrementalCommand,
    Manifest,
    TemplateRef,
    TemplateShape,
)
from .config_validate import validate_manifest


# --------------------------------------------------------------------------- #
# commands
# --------------------------------------------------------------------------- #


def parse_command(raw: dict[str, Any], context: str, errors: list[str]) -> Command:
    has_sources = "sources" in raw
    has_targets = "targets" in raw
    common: dict[str, Any] = {
        "command": raw["command"],
        "dir": raw.get("dir"),
        "rmdirs": tuple(raw.get("rmdirs", ())),
        "mkdirs": tuple(raw.get("mkdirs", ())),
    }

    if has_sources and has_targets:
        return IncrementalCommand(
            **common,
            sources=tuple(raw["sources"]),
            targets=tuple(raw["targets"]),
        )

    if has_sources != has_targets:
        present, missing = (
            ("sources", "targets") if has_sources else ("targets", "sources")
        )
        errors.append(
            f"{context}: `{present}` requires `{missing}`"
            " (incremental commands need both)"
        )

    return ExternalCommand(**common)


def _parse_commands(
    raw: list[dict[str, Any]], context: str, errors: list[str]
) -> tuple[Command, ...]:
    return tuple(
        parse_command(c, f"{context}[{i}]", errors) for i, c in enumerate(raw)
    )


# --------------------------------------------------------------------------- #
# template / component shapes
# --------------------------------------------------------------------------- #


def parse_properties(
    raw: dict[str, Any], context: str, errors: list[str]
) -> ComponentProperties:
    build = raw.get("build")
    custom = raw.get("customCommands")
    clean = raw.get("clean")
    return ComponentProperties(
        source_wit=raw.get("sourceWit"),
        generated_wit=raw.get("generatedWit"),
        component_wasm=raw.get("componentWasm"),
        linked_wasm=raw.get("linkedWasm"),
        build=None
        if build is None
        else _parse_commands(build, f"{context}.build", errors),
        custom_commands=None
        if custom is None
        else {
            name: _parse_commands(cmds, f"{context}.customCommands.{name}", errors)
            for name, cmds in custom.items()
        },
        clean=None if clean is None else tuple(clean),
    )


def _parse_profiles(
    raw: dict[str, Any], context: str, errors: list[str]
) -> ComponentProfiles | None:
    if "profiles" not in raw:
        errors.append(f"{context}: `defaultProfile` given without `profiles`")
        return None
    if "defaultProfile" not in raw:
        errors.append(f"{context}: `profiles` given without `defaultProfile`")
        return None

    profiles = cast_hint(dict[str, dict[str, Any]], raw["profiles"])
    default = raw["defaultProfile"]
    if default not in profiles:
        known = ", ".join(sorted(profiles)) or "none"
        errors.append(
            f"{context}: defaultProfile {default!r} is not one of its profiles"
            f" ({known})"
        )
        return None

    return ComponentProfiles(
        profiles={
            pname: parse_properties(props, f"{context}.profiles.{pname}", errors)
            for pname, props in profiles.items()
        },
        default_profile=default,
    )


def parse_shape(
    raw: dict[str, Any],
    context: str,
    errors: list[str],
    *,
    allow_sibling_template: bool,
) -> TemplateShape | None:
    """Classify one template/component object as exactly one shape.

    Templates may not combine `template` with anything else. Components may
    pair it with either properties or profiles (the template then supplies
    defaults). Properties and profiles never mix.
    """
    keys = set(raw)
    has_ref = "template" in keys
    prop_keys = keys & PROPERTY_KEYS
    profile_keys = keys & PROFILE_KEYS

    if prop_keys and profile_keys:
        errors.append(
            f"{context}: ambiguous shape; properties"
            f" ({', '.join(sorted(prop_keys))}) cannot be combined with profiles"
            f" ({', '.join(sorted(profile_keys))})"
        )
        return None

    if has_ref and (prop_keys or profile_keys) and not allow_sibling_template:
        others = ", ".join(sorted(prop_keys | profile_keys))
        errors.append(
            f"{context}: ambiguous shape; template reference cannot be combined"
            f" with {others}"
        )
        return None

    if profile_keys:
        return _parse_profiles(raw, context, errors)
    if has_ref and not prop_keys:
        return TemplateRef(template=raw["template"])
    return parse_properties(raw, context, errors)


# --------------------------------------------------------------------------- #
# documents
# --------------------------------------------------------------------------- #


def parse_manifest(raw: Any, source_dir: Path) -> Manifest:
    """Validate and parse one manifest document.

    Raises:
        ConfigError: listing every schema and shape problem found.
    """
    logger = getAppLogger()
    source_dir = Path(source_dir)

    summary = validate_manifest(raw)
    for warning in summary.warnings:
        logger.warning(warning)
    if not summary.valid:
        xmsg = f"Invalid manifest in {source_dir}:\n  " + "\n  ".join(summary.errors)
        raise ConfigError(xmsg, summary.errors)

    doc = cast_hint(dict[str, Any], raw or {})
    errors: list[str] = []

    templates: dict[str, TemplateShape] = {}
    for name, body in doc.get("templates", {}).items():
        shape = parse_shape(
            body, f"templates.{name}", errors, allow_sibling_template=False
        )
        if shape is not None:
            templates[name] = shape

    components: dict[str, ComponentDefinition] = {}
    for name, body in doc.get("components", {}).items():
        shape = parse_shape(
            body, f"components.{name}", errors, allow_sibling_template=True
        )
        if shape is not None:
            components[name] = ComponentDefinition(
                name=name,
                shape=shape,
                template=body.get("template"),
                source_dir=source_dir,
            )

    dependencies = {
        owner: [ComponentDependency(type=d["type"], target=d["target"]) for d in deps]
        for owner, deps in doc.get("dependencies", {}).items()
    }

    if errors:
        xmsg = f"Invalid manifest in {source_dir}:\n  " + "\n  ".join(errors)
        raise ConfigError(xmsg, errors)

    logger.debug(
        "Parsed manifest in %s: %d template(s), %d component(s)",
        source_dir,
        len(templates),
        len(components),
    )
    return Manifest(
        source_dir=source_dir,
        includes=list(doc.get("includes", [])),
        temp_dir=doc.get("tempDir"),
        wit_deps=list(doc.get("witDeps", [])),
        templates=templates,
        components=components,
        dependencies=dependencies,
    )


def merge_manifests(root: Manifest, others: Sequence[Manifest] = ()) -> Application:
    """Combine the root document and the documents it included.

    `includes` is root-only, and template/component names must be unique
    across all documents. `tempDir` and `witDeps` come from the root.
    Dependency lists for one component are concatenated in document order.
    """
    logger = getAppLogger()
    errors: list[str] = []

    for doc in others:
        if doc.includes:
            errors.append(
                f"`includes` is only allowed in the root manifest (found in"
                f" {doc.source_dir})"
            )

    app = Application(
        root_dir=root.source_dir,
        temp_dir=root.temp_dir or DEFAULT_TEMP_DIR,
        includes=list(root.includes),
        wit_deps=list(root.wit_deps),
    )
    template_origin: dict[str, Path] = {}
    component_origin: dict[str, Path] = {}

    for doc in (root, *others):
        for name, shape in doc.templates.items():
            if name in template_origin:
                errors.append(
                    f"template {name!r} defined more than once"
                    f" ({template_origin[name]} and {doc.source_dir})"
                )
                continue
            template_origin[name] = doc.source_dir
            app.templates[name] = shape

        for name, definition in doc.components.items():
            if name in component_origin:
                errors.append(
                    f"component {name!r} defined more than once"
                    f" ({component_origin[name]} and {doc.source_dir})"
                )
                continue
            component_origin[name] = doc.source_dir
            app.components[name] = definition

        for owner, deps in doc.dependencies.items():
            app.dependencies.setdefault(owner, []).extend(deps)

    if errors:
        xmsg = "Invalid application manifests:\n  " + "\n  ".join(errors)
        raise ConfigError(xmsg, errors)

    logger.debug(
        "Application has %d template(s), %d component(s) from %d manifest(s)",
        len(app.templates),
        len(app.components),
        1 + len(others),
    )
    return app


def load_application(raw: Any, source_dir: Path) -> Application:
    """Parse a single-document application."""
    return merge_manifests(parse_manifest(raw, source_dir))
