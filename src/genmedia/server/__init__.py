"""
HTTP proxy for genmedia.

Run with ``genmedia serve`` or ``uvicorn --factory genmedia.server:create_app``.
"""

from genmedia.server.app import create_app

__all__ = ["create_app"]
