"""MCP Resources for the format registry."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .tools.conversion import format_catalog

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP


def register_resources(server: FastMCP) -> None:
    """Register MCP resources."""

    @server.resource("slingshot://formats", mime_type="application/json")
    async def formats_resource() -> str:
        """Supported output formats (JSON).

        Contains: format names, descriptions, parameters with required flags.
        """
        return json.dumps(format_catalog(), indent=2)
