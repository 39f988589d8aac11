# src/rpcbuild/constants.py
"""Central constants used across the project."""

from typing import Literal


FailurePolicy = Literal["continue", "stop"]

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_MAX_WORKERS: str = "MAX_WORKERS"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_MAX_WORKERS: int = 4
DEFAULT_FAILURE_POLICY: FailurePolicy = "continue"

# --- manifest defaults ---
DEFAULT_TEMP_DIR: str = "golem-temp"
LINKED_WASM_SUBDIR: str = "linked-wasm"

# Variables available to template-provided strings
TEMPLATE_VARIABLES: tuple[str, ...] = ("componentName", "component_name")
