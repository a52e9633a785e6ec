"""Per-job log output with colours and secret masking."""

from __future__ import annotations

import logging
import os
import sys
import threading
from typing import Any, Mapping, MutableMapping, TextIO

RED = 31
GREEN = 32
YELLOW = 33
BLUE = 34
MAGENTA = 35
CYAN = 36
GRAY = 37

COLORS = (BLUE, YELLOW, GREEN, MAGENTA, RED, GRAY, CYAN)

_color_lock = threading.Lock()
_next_color = 0


def check_if_terminal(stream: Any) -> bool:
    """Return True when *stream* is attached to a terminal."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (ValueError, OSError):
        return False


class StepLogFormatter(logging.Formatter):
    """Formats records of one job, prefixed with the job's name."""

    def __init__(
        self,
        color: int,
        secrets: Mapping[str, str] | None = None,
        insecure_secrets: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__()
        self.color = color
        self.secrets = dict(secrets or {})
        self.insecure_secrets = insecure_secrets
        self.stream = stream

    def is_colored(self, stream: Any) -> bool:
        """Decide on colour from the stream and the CLICOLOR variables."""
        colored = check_if_terminal(stream)
        force = os.environ.get("CLICOLOR_FORCE")
        if force is not None:
            return force != "0"
        if os.environ.get("CLICOLOR") == "0":
            return False
        return colored

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if not self.insecure_secrets:
            for value in self.secrets.values():
                if value:
                    message = message.replace(value, "***")
        message = message.removesuffix("\n")

        job = getattr(record, "job", "")
        raw = getattr(record, "raw_output", False) is True
        dryrun = getattr(record, "dryrun", False) is True

        if self.is_colored(self.stream):
            if raw:
                return f"\x1b[{self.color}m|\x1b[0m {message}"
            if dryrun:
                return (
                    f"\x1b[1m\x1b[{GRAY}m\x1b[7m*DRYRUN*\x1b[0m "
                    f"\x1b[{self.color}m[{job}] \x1b[0m{message}"
                )
            return f"\x1b[{self.color}m[{job}] \x1b[0m{message}"

        if raw:
            return f"[{job}]   | {message}"
        if dryrun:
            return f"*DRYRUN* [{job}] {message}"
        return f"[{job}] {message}"


class _JobLoggerAdapter(logging.LoggerAdapter):
    """Adds the job's fields to every record, keeping per-call extras."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def with_job_logger(
    job_name: str,
    secrets: Mapping[str, str] | None = None,
    insecure_secrets: bool = False,
    dryrun: bool = False,
    stream: TextIO | None = None,
) -> logging.LoggerAdapter:
    """Create a logger for one job, with the next colour in turn."""
    global _next_color
    with _color_lock:
        color = COLORS[_next_color % len(COLORS)]
        _next_color += 1

    out = stream if stream is not None else sys.stdout
    formatter = StepLogFormatter(color, secrets, insecure_secrets, out)
    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    logger = logging.Logger(f"actrun.job.{job_name}")
    logger.addHandler(handler)
    logger.setLevel(logging.getLogger("actrun").level or logging.INFO)
    return _JobLoggerAdapter(logger, {"job": job_name, "dryrun": dryrun})