"""Central logging configuration utilities.

The SDK itself never installs handlers: library code only emits through
`LoggingPort` or module loggers, and the host application owns the sinks.
`configure_logging` is the opt-in composition-root helper (used by the CLI)
that wires separate stdout/stderr sinks and stamps every record with the id of
the job being tracked, taken from `job_id_var`.

The poll loop sets `job_id_var` at the start of its task; asyncio copies the
context into the task so concurrent sessions never see each other's id.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional
import contextvars

# Job id of the tracking session running in the current task
job_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "job_id", default="-"
)

DEFAULT_FORMAT = (
    "[%(asctime)s] %(levelname)s %(name)s job=%(job_id)s: %(message)s"
)


def coerce_level(level: int | str | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    key = str(level).upper().strip()
    mapping = logging.getLevelNamesMapping()
    return mapping.get(key, logging.INFO)


class _JobIdFilter(logging.Filter):
    """Inject the tracked job id from the contextvar into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        record.job_id = job_id_var.get()
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno <= self.max_level


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    quiet_aiohttp: bool = True,
) -> None:
    """Configure root logger with separate stdout/stderr sinks & job id.

    Notes
    -----
    * DEBUG/INFO go to stdout, WARNING and above to stderr.
    * aiohttp's own loggers are raised to WARNING unless `quiet_aiohttp` is False.
    """
    numeric_level = coerce_level(level)
    fmt = fmt or DEFAULT_FORMAT

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicate output on repeated calls
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(fmt)
    job_filter = _JobIdFilter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
    stdout_handler.addFilter(job_filter)
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(job_filter)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)

    if quiet_aiohttp:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logging.getLogger("acsdk").debug(
        "Logging configured level=%s quiet_aiohttp=%s", numeric_level, quiet_aiohttp
    )
