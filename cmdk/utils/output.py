"""Shared console output utilities."""

import json
from typing import Any

from rich.console import Console

# Shared console instance for all CLI output
console = Console(color_system="auto")


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
