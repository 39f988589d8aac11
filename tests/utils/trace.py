# tests/utils/trace.py
"""Trace helper for pytest diagnostics.

Writes straight to sys.__stderr__ so output survives pytest's capture.
Enable by setting TEST_TRACE=1 (or 'true', 'yes').
"""

import builtins
import os
import sys
import time
from collections.abc import Callable
from typing import Any


TEST_TRACE_ENABLED = os.getenv("TEST_TRACE", "").lower() in {"1", "true", "yes"}


def make_test_trace(icon: str = "🧪") -> Callable[..., Any]:
    def local_trace(label: str, *args: Any) -> Any:
        return TEST_TRACE(label, *args, icon=icon)

    return local_trace


def TEST_TRACE(label: str, *args: Any, icon: str = "🧪") -> None:  # noqa: N802
    if not TEST_TRACE_ENABLED:
        return

    ts = time.monotonic()
    builtins.print(
        f"{icon} [TEST TRACE {ts:.6f}] {label}",
        *args,
        file=sys.__stderr__,
        flush=True,
    )
