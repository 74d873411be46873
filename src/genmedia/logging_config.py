"""
Logging configuration for genmedia.

Logging is configured lazily so library users who never call set_verbosity
or configure_logging get no logs unless they configure logging themselves.

Verbosity levels:
- 0 (default): INFO: requests, provider switches, timings
- 1 (info): INFO + prompt text
- 2 (verbose): DEBUG + prompt text, vendor calls, poll ticks, clamped values

Records emitted inside log_context(provider=..., job=...) carry those fields,
so lines from concurrent requests can be told apart:

    INFO [genmedia.core.providers.fal] [provider=fal job=7c1e] fal.ai request queued

GENMEDIA_VERBOSITY env (0/1/2) is read when the CLI or server starts;
CLI flags override env.
"""

import contextlib
import contextvars
import logging
import os
from collections.abc import Iterator

LOG_FORMAT = "%(levelname)s [%(name)s]%(context)s %(message)s"
ROOT_LOGGER_NAME = "genmedia"

# verbosity -> (logger level, log prompt text)
_VERBOSITY: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_context: contextvars.ContextVar[tuple[tuple[str, str], ...]] = contextvars.ContextVar(
    "genmedia_log_context", default=()
)
_log_prompts: bool = False


class ContextFilter(logging.Filter):
    """Render the active log_context() fields into ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = _context.get()
        record.context = (
            " [" + " ".join(f"{key}={value}" for key, value in fields) + "]" if fields else ""
        )
        return True


@contextlib.contextmanager
def log_context(**fields: object) -> Iterator[None]:
    """
    Tag every genmedia log record in this block with key=value fields.

    Nested blocks extend the outer fields; empty values are skipped. Bound to
    the current thread/task via contextvars.
    """
    added = tuple((key, str(value)) for key, value in fields.items() if value)
    token = _context.set(_context.get() + added)
    try:
        yield
    finally:
        _context.reset(token)


def current_context() -> dict[str, str]:
    """Return the fields of the active log_context() blocks."""
    return dict(_context.get())


def _root_logger() -> logging.Logger:
    """Return the genmedia logger, adding the stderr handler on first use."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(ContextFilter())
        root.addHandler(handler)
    return root


def set_verbosity(level: int) -> None:
    """Set logging verbosity; values below 0 act as 0 and above 2 as 2."""
    global _log_prompts
    logger_level, _log_prompts = _VERBOSITY[min(max(level, 0), 2)]
    _root_logger().setLevel(logger_level)


def log_prompts() -> bool:
    """Return True if prompt text should be logged at INFO (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure logging from the CLI, the server, or library code.

    When quiet is True, only warnings and errors are shown and prompts are never logged.
    """
    global _log_prompts
    if quiet:
        _root_logger().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read GENMEDIA_VERBOSITY (0, 1, or 2); anything else means 0."""
    raw = os.environ.get("GENMEDIA_VERBOSITY", "0").strip()
    return int(raw) if raw in ("1", "2") else 0


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under genmedia (e.g. genmedia.core.generation)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "ContextFilter",
    "configure_logging",
    "current_context",
    "get_logger",
    "get_verbosity_from_env",
    "log_context",
    "log_prompts",
    "set_verbosity",
]
