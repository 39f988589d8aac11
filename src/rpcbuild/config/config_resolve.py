# src/rpcbuild/config/config_resolve.py
"""Template & profile resolution.

A component is resolved in three layers:

1. its `template` (if any), following `TemplateRef` chains to a concrete
   properties or profiles shape;
2. a profile, when the template or the component itself is a profiles
   shape;
3. the component's own properties, overriding the template field by field.

Merge policy (`merge_properties`): scalars take the override when it is
set; sequences (`build`, `clean`, each `customCommands` entry) are taken
wholesale from whichever layer set them, never element-wise.
"""

from collections.abc import Iterable
from dataclasses import replace
from typing import TypeVar

from jinja2 import Environment, StrictUndefined, TemplateError

from rpcbuild.constants import TEMPLATE_VARIABLES
from rpcbuild.errors import ConfigError
from rpcbuild.logs import getAppLogger

from .config_types import (
    Application,
    Command,
    ComponentDefinition,
    ComponentProfiles,
    ComponentProperties,
    IncrementalCommand,
    ResolvedComponent,
    TemplateRef,
    default_linked_wasm,
)


ConcreteShape = ComponentProperties | ComponentProfiles

T = TypeVar("T")


# --------------------------------------------------------------------------- #
# templates
# --------------------------------------------------------------------------- #


def resolve_template(
    name: str,
    templates: dict[str, ComponentProperties | ComponentProfiles | TemplateRef],
) -> ConcreteShape:
    """Follow a `TemplateRef` chain from `name` to a concrete shape.

    Raises:
        ConfigError: if a template in the chain does not exist, or the chain
            loops back on itself.
    """
    logger = getAppLogger()
    chain: list[str] = []
    current = name

    while True:
        if current in chain:
            loop = " -> ".join([*chain, current])
            xmsg = f"Template reference cycle: {loop}"
            raise ConfigError(xmsg)
        chain.append(current)

        shape = templates.get(current)
        if shape is None:
            via = f" (via {' -> '.join(chain[:-1])})" if len(chain) > 1 else ""
            xmsg = f"Unknown template {current!r}{via}"
            raise ConfigError(xmsg)

        if isinstance(shape, TemplateRef):
            logger.trace(f"[resolve_template] {current} → {shape.template}")
            current = shape.template
            continue

        return shape


# --------------------------------------------------------------------------- #
# merging
# --------------------------------------------------------------------------- #


def _pick(base: T | None, override: T | None) -> T | None:
    return override if override is not None else base


def merge_properties(
    base: ComponentProperties, override: ComponentProperties
) -> ComponentProperties:
    """Overlay `override` on `base` using the documented per-field policy."""
    custom = base.custom_commands
    if override.custom_commands is not None:
        custom = {**(base.custom_commands or {}), **override.custom_commands}

    return ComponentProperties(
        source_wit=_pick(base.source_wit, override.source_wit),
        generated_wit=_pick(base.generated_wit, override.generated_wit),
        component_wasm=_pick(base.component_wasm, override.component_wasm),
        linked_wasm=_pick(base.linked_wasm, override.linked_wasm),
        build=_pick(base.build, override.build),
        custom_commands=custom,
        clean=_pick(base.clean, override.clean),
    )


# --------------------------------------------------------------------------- #
# rendering of template-provided strings
# --------------------------------------------------------------------------- #


def _make_environment() -> Environment:
    return Environment(  # noqa: S701
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_properties(
    props: ComponentProperties,
    *,
    component_name: str,
    template_name: str,
    env: Environment | None = None,
) -> ComponentProperties:
    """Render `{{ componentName }}` / `{{ component_name }}` in every string.

    Raises:
        ConfigError: on undefined variables or template syntax errors.
    """
    jinja = env or _make_environment()
    variables = dict.fromkeys(TEMPLATE_VARIABLES, component_name)

    def render(text: str) -> str:
        if "{" not in text:
            return text
        try:
            return jinja.from_string(text).render(**variables)
        except TemplateError as e:
            xmsg = (
                f"Failed to render template {template_name!r} for component"
                f" {component_name!r}: {e} (in {text!r})"
            )
            raise ConfigError(xmsg) from e

    def render_opt(text: str | None) -> str | None:
        return None if text is None else render(text)

    def render_all(items: Iterable[str]) -> tuple[str, ...]:
        return tuple(render(i) for i in items)

    def render_command(cmd: Command) -> Command:
        rendered = replace(
            cmd,
            command=render(cmd.command),
            dir=render_opt(cmd.dir),
            rmdirs=render_all(cmd.rmdirs),
            mkdirs=render_all(cmd.mkdirs),
        )
        if isinstance(rendered, IncrementalCommand):
            rendered = replace(
                rendered,
                sources=render_all(rendered.sources),
                targets=render_all(rendered.targets),
            )
        return rendered

    def render_commands(
        cmds: tuple[Command, ...] | None,
    ) -> tuple[Command, ...] | None:
        return None if cmds is None else tuple(render_command(c) for c in cmds)

    custom = props.custom_commands
    return ComponentProperties(
        source_wit=render_opt(props.source_wit),
        generated_wit=render_opt(props.generated_wit),
        component_wasm=render_opt(props.component_wasm),
        linked_wasm=render_opt(props.linked_wasm),
        build=render_commands(props.build),
        custom_commands=None
        if custom is None
        else {k: render_commands(v) or () for k, v in custom.items()},
        clean=None if props.clean is None else render_all(props.clean),
    )


# --------------------------------------------------------------------------- #
# components
# --------------------------------------------------------------------------- #


def _select_profile(
    profiles: ComponentProfiles, selected: str, context: str
) -> ComponentProperties:
    props = profiles.profiles.get(selected)
    if props is None:
        known = ", ".join(sorted(profiles.profiles))
        xmsg = f"Unknown profile {selected!r} for {context} (available: {known})"
        raise ConfigError(xmsg)
    return props


def available_profiles(definition: ComponentDefinition, app: Application) -> list[str]:
    """Profile names a component can be resolved with (empty if it has none)."""
    if isinstance(definition.shape, ComponentProfiles):
        return list(definition.shape.profiles)
    if definition.template is not None:
        template = resolve_template(definition.template, app.templates)
        if isinstance(template, ComponentProfiles):
            return list(template.profiles)
    return []


def resolve_component(
    definition: ComponentDefinition,
    app: Application,
    profile: str | None = None,
) -> ResolvedComponent:
    """Merge template, profile and own properties into one `ResolvedComponent`.

    The profile is the explicit `profile` if given, else the component's own
    `defaultProfile`, else its template's `defaultProfile`.
    """
    logger = getAppLogger()
    name = definition.name

    # --- template layer ---
    template_props = ComponentProperties()
    template_profiles: ComponentProfiles | None = None
    if definition.template is not None:
        template = resolve_template(definition.template, app.templates)
        if isinstance(template, ComponentProfiles):
            template_profiles = template
        else:
            template_props = template

    # --- own layer ---
    own_props = ComponentProperties()
    own_profiles: ComponentProfiles | None = None
    shape = definition.shape
    if isinstance(shape, ComponentProfiles):
        own_profiles = shape
    elif isinstance(shape, ComponentProperties):
        own_props = shape
    # a bare TemplateRef contributes nothing of its own

    # --- profile selection ---
    selected: str | None = None
    if own_profiles is not None or template_profiles is not None:
        if profile is not None:
            selected = profile
        elif own_profiles is not None:
            selected = own_profiles.default_profile
        else:
            selected = template_profiles.default_profile  # type: ignore[union-attr]

        if template_profiles is not None:
            template_props = _select_profile(
                template_profiles,
                selected,
                f"template {definition.template!r} of component {name!r}",
            )
        if own_profiles is not None:
            own_props = _select_profile(own_profiles, selected, f"component {name!r}")
        logger.trace(f"[resolve_component] {name}: profile {selected!r}")
    elif profile is not None:
        logger.warning(
            "Component %s has no profiles; ignoring requested profile %r",
            name,
            profile,
        )

    if definition.template is not None:
        template_props = render_properties(
            template_props, component_name=name, template_name=definition.template
        )

    merged = merge_properties(template_props, own_props)
    linked_wasm = merged.linked_wasm or default_linked_wasm(app.temp_path, name)

    resolved = ResolvedComponent(
        name=name,
        source_dir=definition.source_dir,
        profile=selected,
        source_wit=merged.source_wit,
        generated_wit=merged.generated_wit,
        component_wasm=merged.component_wasm,
        linked_wasm=linked_wasm,
        build=merged.build or (),
        custom_commands=dict(merged.custom_commands or {}),
        clean=merged.clean or (),
        dependencies=tuple(app.dependencies.get(name, ())),
    )
    logger.trace(f"[resolve_component] {name}: {resolved.as_dict()}")
    return resolved


def resolve_components(
    app: Application,
    profile: str | None = None,
    names: list[str] | None = None,
) -> list[ResolvedComponent]:
    """Resolve components in manifest declaration order.

    `names` restricts the result to a subset (still in declaration order).

    Raises:
        ConfigError: for unknown component names, templates or profiles.
    """
    logger = getAppLogger()
    if names is not None:
        unknown = [n for n in names if n not in app.components]
        if unknown:
            xmsg = f"Unknown component(s): {', '.join(unknown)}"
            raise ConfigError(xmsg)
        wanted = set(names)
    else:
        wanted = set(app.components)

    resolved = [
        resolve_component(definition, app, profile)
        for name, definition in app.components.items()
        if name in wanted
    ]
    logger.debug("Resolved %d component(s)", len(resolved))
    return resolved


def resolve_all_profiles(app: Application) -> dict[str, list[ResolvedComponent]]:
    """Resolve every component once per profile it offers.

    Components without profiles get a single entry with `profile=None`.
    """
    result: dict[str, list[ResolvedComponent]] = {}
    for name, definition in app.components.items():
        profiles = available_profiles(definition, app)
        if not profiles:
            result[name] = [resolve_component(definition, app)]
            continue
        result[name] = [resolve_component(definition, app, p) for p in profiles]
    return result
