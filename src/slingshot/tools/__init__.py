"""MCP Tools for solution conversion."""

from .conversion import register_conversion_tools

__all__ = [
    "register_conversion_tools",
]
