# src/rpcbuild/config/config_validate.py


from typing import Any

from apathetic_schema import ApatheticSchema_ValidationSummary as ValidationSummary
from apathetic_schema import collect_msg

from rpcbuild.logs import getAppLogger
from rpcbuild.utils import new_summary, validate_typed_dict, validate_value

from .config_types import InitialComponentFileConfig, ManifestConfig


def validate_manifest(raw: Any) -> ValidationSummary:
    """Check a raw manifest document against the manifest schema.

    Only key names and value types are checked here; which combination of
    keys makes a valid template/component/command shape is decided while
    parsing. Every problem is collected rather than stopping at the first.
    """
    logger = getAppLogger()
    summary = new_summary()

    if raw is None:
        collect_msg(
            "Manifest is empty; continuing with no components.",
            strict=False,
            summary=summary,
        )
        return summary

    logger.trace(f"[validate_manifest] Validating root ({type(raw).__name__})")
    validate_typed_dict("root", raw, ManifestConfig, summary=summary)

    logger.trace(
        f"[validate_manifest] valid={summary.valid}"
        f" errors={len(summary.errors)} warnings={len(summary.warnings)}"
    )
    return summary


def validate_initial_component_file(
    raw: Any, context: str = "file"
) -> ValidationSummary:
    """Check one `initialComponentFile` entry.

    Consumed by runtime file provisioning, not by the build; kept so the
    whole manifest family can be validated in one place.
    """
    summary = new_summary()
    validate_value(context, raw, InitialComponentFileConfig, summary=summary)
    return summary
