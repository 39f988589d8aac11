# src/rpcbuild/logs.py

import logging
from collections.abc import Callable
from typing import cast

from apathetic_logging import (
    Logger,
    registerDefaultLogLevel,
    registerLogger,
    registerLogLevelEnvVars,
)

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


class AppLogger(Logger):
    """App-specific logger class."""


# --- Logger initialization ---------------------------------------------------

# Must happen before any loggers are created.
logging.setLoggerClass(AppLogger)

# Registers TRACE, TEST and SILENT levels
AppLogger.extendLoggingModule()

# RPCBUILD_LOG_LEVEL first, then the generic LOG_LEVEL
registerLogLevelEnvVars(
    [f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}", DEFAULT_ENV_LOG_LEVEL]
)
registerDefaultLogLevel(DEFAULT_LOG_LEVEL)
registerLogger(PROGRAM_PACKAGE)

_APP_LOGGER = cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))


# --- Convenience utils ---------------------------------------------------------


def getAppLogger() -> AppLogger:  # noqa: N802
    """Return the configured app logger.

    Call this inside functions rather than at import time so tests can
    substitute an isolated logger.
    """
    return _APP_LOGGER


def make_output_sink(component: str) -> Callable[[str], None]:
    """Line callback forwarding a command's output to the debug log.

    Output of concurrently running components interleaves in the log, so
    every line carries the component name.
    """
    logger = getAppLogger()

    def sink(line: str) -> None:
        logger.debug("[%s] | %s", component, line)

    return sink
