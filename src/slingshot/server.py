"""MCP Server for solution conversion."""

from __future__ import annotations

import logging
import os

from mcp.server.fastmcp import FastMCP

from .resources import register_resources
from .tools import register_conversion_tools
from .utils import configure_project_root

logger = logging.getLogger(__name__)


def create_server(project_path: str | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        project_path: Directory relative solution and output paths resolve
            against, unless the client provides roots.
    """
    configure_project_root(project_path, os.getcwd())
    mcp = FastMCP("slingshot-mcp")

    register_conversion_tools(mcp)
    register_resources(mcp)

    logger.info("Slingshot MCP Server initialized")
    return mcp
