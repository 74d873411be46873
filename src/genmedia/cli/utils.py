"""
Utility functions for the CLI.

Exit code constants and JSON output helpers used by CLI commands.
"""

import json
from typing import Any

# Exit codes (130 = common for SIGINT)
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_CANCELLED = 130


def format_json(payload: dict[str, Any]) -> str:
    """Render a result payload for stdout; long data URIs are kept intact."""
    return json.dumps(payload, indent=2)


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_CANCELLED",
    "format_json",
]
