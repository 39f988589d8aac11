# tests/utils/__init__.py

from .constants import DEFAULT_TEST_LOG_LEVEL, PROJ_ROOT
from .manifest import (
    make_app,
    make_command,
    make_component,
    make_manifest,
    set_mtime,
    write_file,
)
from .patch_everywhere import patch_everywhere
from .runner import FakeRunner
from .trace import TEST_TRACE, make_test_trace


__all__ = [  # noqa: RUF022
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
    "PROJ_ROOT",
    # manifest
    "make_app",
    "make_command",
    "make_component",
    "make_manifest",
    "set_mtime",
    "write_file",
    # patch_everywhere
    "patch_everywhere",
    # runner
    "FakeRunner",
    # trace
    "TEST_TRACE",
    "make_test_trace",
]
