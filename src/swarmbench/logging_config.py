"""
Logging setup for benchmark scripts.

Library modules only create `logging.getLogger(__name__)` loggers and never
configure handlers. What they report:

- swarmbench.core.run         INFO: start, cancel, finish with the score
                              ERROR: rejected starts
- swarmbench.core.telemetry   DEBUG: one line per fps sample
- swarmbench.core.population  DEBUG: one line per ramp

The two DEBUG streams fire every sampling interval, so they can be switched
on by themselves with `trace_samples` while the rest of the package stays at
`level`.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "swarmbench"
SAMPLE_LOGGERS = ("swarmbench.core.telemetry", "swarmbench.core.population")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    trace_samples: bool = False,
) -> logging.Logger:
    """
    Attach console (and optionally file) output to the package logger.

    Safe to call again: previous handlers are replaced, not stacked.

    Args:
        level: Level for the package, as a number or a name like "debug"
        log_file: Also write the log to this path (overwritten each run)
        trace_samples: Emit per-sample and per-ramp DEBUG lines

    Returns:
        The package logger
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    for name in SAMPLE_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if trace_samples else logging.NOTSET)

    # Handlers pass everything; the logger levels above do the filtering
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_file)
    return logger
