"""Provider selection endpoints.

GET /providers          - Descriptors and the current selection
PUT /providers/current  - Switch the current selection
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from genmedia.core.providers import get_registry
from genmedia.server.routes._common import read_json_body
from genmedia.utils.exceptions import ValidationError

router = APIRouter()


def _listing() -> dict[str, Any]:
    registry = get_registry()
    return {
        "current": registry.current_id,
        "providers": [descriptor.to_dict() for descriptor in registry.descriptors()],
    }


@router.get("/providers")
def list_providers() -> dict[str, Any]:
    """List providers with their capabilities and availability."""
    return _listing()


@router.put("/providers/current")
async def set_current_provider(request: Request) -> dict[str, Any]:
    """Switch the provider used by requests that do not name one."""
    payload = await read_json_body(request)
    provider = payload.get("provider")
    if not isinstance(provider, str) or not provider:
        raise ValidationError("provider is required", field="provider")
    get_registry().set_current(provider)
    return _listing()
