# src/rpcbuild/utils/__init__.py

from .utils_matching import expand_pattern, expand_patterns, split_glob
from .utils_paths import remove_path, resolve_against
from .utils_schema import (
    collect_error,
    is_typeddict_class,
    new_summary,
    validate_typed_dict,
    validate_value,
)


__all__ = [  # noqa: RUF022
    # utils_matching
    "expand_pattern",
    "expand_patterns",
    "split_glob",
    # utils_paths
    "remove_path",
    "resolve_against",
    # utils_schema
    "collect_error",
    "is_typeddict_class",
    "new_summary",
    "validate_typed_dict",
    "validate_value",
]
