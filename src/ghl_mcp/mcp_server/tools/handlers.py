"""Handler table for all tool families.

Each family module defines its handlers plus a generic failure message per
operation. This module merges them into the tables the registry is built
from.
"""

from typing import Any, Awaitable, Callable, Dict

from ..context import ToolContext
from ..envelope import ToolResult
from . import blogs, custom_fields, objects, social_media

Handler = Callable[[Dict[str, Any], ToolContext], Awaitable[ToolResult]]

_FAMILY_MODULES = (social_media, custom_fields, blogs, objects)


def _merge(attribute: str) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for module in _FAMILY_MODULES:
        for name, value in getattr(module, attribute).items():
            if name in merged:
                raise ValueError(f"Duplicate {attribute} entry '{name}' in {module.__name__}")
            merged[name] = value
    return merged


# Map tool names to handlers
TOOL_HANDLERS: Dict[str, Handler] = _merge("HANDLERS")

FAILURE_MESSAGES: Dict[str, str] = _merge("FAILURE_MESSAGES")
