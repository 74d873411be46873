"""Helpers shared by the route modules."""

from __future__ import annotations

import asyncio
import contextlib
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from genmedia.core.config import Config
from genmedia.core.providers import get_registry
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ValidationError

logger = get_logger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_INTERVAL = 0.5


async def read_json_body(request: Request) -> dict[str, Any]:
    """Return the decoded JSON object body.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON", field="body") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", field="body")
    return payload


def app_config(request: Request) -> Config:
    return request.app.state.config


def provider_for(payload: dict[str, Any]) -> str:
    """Pick the provider for this request: body field, else the current selection.

    Read once per request so a concurrent switch cannot change it mid-call.
    """
    provider = payload.get("provider")
    if provider is None or provider == "":
        return get_registry().current_id
    if not isinstance(provider, str):
        raise ValidationError("provider must be a string", field="provider")
    return provider


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected from %s; cancelling", request.url.path)
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def run_cancellable(request: Request, fn: Callable[[Callable[[], bool]], T]) -> T:
    """Run a blocking generation call in the threadpool.

    fn receives a cancel_check that turns True once the client disconnects.
    """
    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        return await run_in_threadpool(fn, cancel_event.is_set)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
