"""
Completion polling for asynchronous vendor jobs.

A vendor that answers a submission with a job handle is re-queried at a
fixed interval until the job leaves its pending states. The wait is bounded
by PollPolicy.max_wait and can be stopped early through cancel_check.
"""

import time
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Any

from genmedia.core.config import Config
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import CancellationError, RequestTimeoutError

logger = get_logger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """Fixed-interval retry policy with a total wait budget (seconds)."""

    interval: float = 1.0
    max_wait: float = 300.0

    @classmethod
    def from_config(cls, config: Config) -> "PollPolicy":
        return cls(interval=config.poll_interval, max_wait=config.poll_timeout)


def _cancelled(cancel_check: Callable[[], bool] | None) -> bool:
    if cancel_check is None:
        return False
    try:
        return bool(cancel_check())
    except Exception:
        logger.debug("cancel_check raised; ignoring", exc_info=True)
        return False


def poll_until_complete(
    job: dict[str, Any],
    refresh: Callable[[], dict[str, Any]],
    *,
    status_of: Callable[[dict[str, Any]], str],
    pending: Collection[str],
    policy: PollPolicy,
    cancel_check: Callable[[], bool] | None = None,
    provider: str = "",
    label: str = "job",
) -> dict[str, Any]:
    """
    Re-fetch a vendor job until its status is no longer pending.

    Args:
        job: Job document returned by the submission call
        refresh: Callable returning the latest job document
        status_of: Extracts the status string from a job document
        pending: Statuses that mean "keep waiting"
        policy: Interval and total wait budget
        cancel_check: Optional callable returning True to stop waiting
        provider: Provider id, attached to raised errors
        label: Job description for log messages

    Returns:
        The first job document whose status is terminal. The caller decides
        whether that status means success or failure.

    Raises:
        CancellationError: If cancel_check returned True
        RequestTimeoutError: If the job is still pending after policy.max_wait
    """
    start = time.monotonic()
    polls = 0
    status = status_of(job)
    while status in pending:
        if _cancelled(cancel_check):
            raise CancellationError(f"Generation was cancelled while waiting for {label}.")
        elapsed = time.monotonic() - start
        if elapsed >= policy.max_wait:
            raise RequestTimeoutError(
                f"Timed out after {policy.max_wait:.0f}s waiting for {label} "
                f"(last status: {status}).",
                provider=provider,
            )
        time.sleep(policy.interval)
        if _cancelled(cancel_check):
            raise CancellationError(f"Generation was cancelled while waiting for {label}.")
        job = refresh()
        polls += 1
        status = status_of(job)
        logger.debug("Poll %d for %s: status=%s", polls, label, status)
    logger.debug("%s finished with status=%s after %d poll(s)", label, status, polls)
    return job
