"""Adapters for the external programs gitpick drives."""

from .adapter import ToolResult, ToolRunner, tool_failure
from .picker import FzfPicker, Picker

__all__ = [
    "FzfPicker",
    "Picker",
    "ToolResult",
    "ToolRunner",
    "tool_failure",
]
