# src/rpcbuild/utils/utils_schema.py
"""Manifest-shaped validation on top of `apathetic_schema`.

The summary type and message routing come from `apathetic_schema`; this
module adds what the manifest schema needs beyond it: `Literal` values,
`dict[str, T]` maps, required keys, and unknown keys treated as errors.
"""

from difflib import get_close_matches
from typing import Any, Literal, get_args, get_origin

from apathetic_schema import ApatheticSchema_ValidationSummary as ValidationSummary
from apathetic_schema import collect_msg
from apathetic_utils import cast_hint, schema_from_typeddict
from typing_extensions import NotRequired


# --- constants ----------------------------------------------------------


DEFAULT_HINT_CUTOFF: float = 0.75


# --- helpers --------------------------------------------------------


def new_summary() -> ValidationSummary:
    return ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=True,
    )


def collect_error(
    msg: str,
    *,
    summary: ValidationSummary,  # modified in function, not returned
) -> None:
    """Record a fatal message and mark the summary invalid."""
    collect_msg(msg, strict=True, summary=summary, is_error=True)
    summary.valid = False


def is_typeddict_class(tp: Any) -> bool:
    return (
        isinstance(tp, type)
        and hasattr(tp, "__annotations__")
        and hasattr(tp, "__total__")
    )


def _unwrap(expected_type: Any) -> Any:
    if get_origin(expected_type) is NotRequired:
        return get_args(expected_type)[0]
    return expected_type


def _infer_type_label(expected_type: Any) -> str:
    """Return a readable label for messages (e.g. 'list[str]', 'ExternalCommand')."""
    expected_type = _unwrap(expected_type)
    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is list and args:
        return f"list[{_infer_type_label(args[0])}]"
    if origin is dict and len(args) == 2:  # noqa: PLR2004
        return f"dict[str, {_infer_type_label(args[1])}]"
    if origin is Literal:
        return " | ".join(repr(a) for a in args)
    if isinstance(expected_type, type):
        return expected_type.__name__
    return str(expected_type)


def _close_match_hint(unknown: list[str], known: list[str]) -> str:
    hints: list[str] = []
    for k in unknown:
        close = get_close_matches(k, known, n=1, cutoff=DEFAULT_HINT_CUTOFF)
        if close:
            hints.append(f"'{k}' → '{close[0]}'")
    if not hints:
        return ""
    return "\nHint: did you mean " + ", ".join(hints) + "?"


# ---------------------------------------------------------------------------
# recursive validators
# ---------------------------------------------------------------------------


def validate_value(
    field_path: str,
    val: Any,
    expected_type: Any,
    *,
    summary: ValidationSummary,  # modified in function, not returned
) -> bool:
    """Validate `val` against a (possibly nested) type annotation.

    Supports str/bool/int scalars, Literal, list[T], dict[str, T] and
    TypedDict classes. Messages use the dotted `field_path`.
    """
    expected_type = _unwrap(expected_type)
    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if is_typeddict_class(expected_type):
        return validate_typed_dict(field_path, val, expected_type, summary=summary)

    if origin is list:
        if not isinstance(val, list):
            collect_error(
                f"{field_path}: expected {_infer_type_label(expected_type)},"
                f" got {type(val).__name__}",
                summary=summary,
            )
            return False
        subtype = args[0] if args else Any
        valid = True
        for i, item in enumerate(cast_hint(list[Any], val)):
            valid &= validate_value(
                f"{field_path}[{i}]", item, subtype, summary=summary
            )
        return valid

    if origin is dict:
        if not isinstance(val, dict):
            collect_error(
                f"{field_path}: expected an object with named keys,"
                f" got {type(val).__name__}",
                summary=summary,
            )
            return False
        subtype = args[1] if len(args) == 2 else Any  # noqa: PLR2004
        valid = True
        for key, item in cast_hint(dict[Any, Any], val).items():
            if not isinstance(key, str):
                collect_error(
                    f"{field_path}: keys must be strings, got {key!r}",
                    summary=summary,
                )
                valid = False
                continue
            valid &= validate_value(
                f"{field_path}.{key}", item, subtype, summary=summary
            )
        return valid

    if origin is Literal:
        if val in args:
            return True
        collect_error(
            f"{field_path}: expected {_infer_type_label(expected_type)}, got {val!r}",
            summary=summary,
        )
        return False

    if expected_type is Any:
        return True

    # bool is an int subclass; never accept it for other scalars
    if isinstance(val, bool) and expected_type is not bool:
        ok = False
    else:
        ok = isinstance(val, expected_type)
    if not ok:
        collect_error(
            f"{field_path}: expected {_infer_type_label(expected_type)},"
            f" got {type(val).__name__}",
            summary=summary,
        )
    return ok


def validate_typed_dict(
    field_path: str,
    val: Any,
    typedict_cls: type[Any],
    *,
    summary: ValidationSummary,  # modified in function, not returned
    ignore_keys: set[str] | None = None,
) -> bool:
    """Validate a dict against a TypedDict schema recursively.

    Unknown keys are errors (additional properties are forbidden), as are
    missing keys the TypedDict declares required.
    """
    if ignore_keys is None:
        ignore_keys = set()

    if not isinstance(val, dict):
        collect_error(
            f"{field_path}: expected an object with named keys for"
            f" {typedict_cls.__name__}, got {type(val).__name__}",
            summary=summary,
        )
        return False

    val_dict = cast_hint(dict[str, Any], val)
    schema = schema_from_typeddict(typedict_cls)
    required: frozenset[str] = getattr(typedict_cls, "__required_keys__", frozenset())
    valid = True

    for key in sorted(required):
        if key not in val_dict and key not in ignore_keys:
            collect_error(
                f"{field_path}: missing required key `{key}`", summary=summary
            )
            valid = False

    for key, expected_type in schema.items():
        if key not in val_dict or key in ignore_keys:
            continue
        valid &= validate_value(
            f"{field_path}.{key}", val_dict[key], expected_type, summary=summary
        )

    unknown = [k for k in val_dict if k not in schema and k not in ignore_keys]
    if unknown:
        joined = ", ".join(f"`{u}`" for u in unknown)
        plural = "s" if len(unknown) > 1 else ""
        msg = f"{field_path}: unknown key{plural} {joined}."
        msg += _close_match_hint(unknown, list(schema))
        collect_error(msg, summary=summary)
        valid = False

    return valid
