"""Solution conversion MCP tools."""

import io
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from mcp.server.fastmcp import Context, FastMCP

from ..driver import convert_solution as run_pipeline
from ..driver import load_graph
from ..errors import SlingshotError
from ..solution import DependencyGraph
from ..utils import get_project_root, resolve_path, write_atomic
from ..writers import FORMATS, require_parameters

logger = logging.getLogger(__name__)


def format_catalog() -> list[dict]:
    """Registered formats with their parameters, in declaration order."""
    return [descriptor.to_dict() for descriptor in FORMATS.values()]


def describe_graph(graph: DependencyGraph) -> list[dict]:
    """Projects in build order with their direct dependencies by name."""
    return [
        {
            "name": project.name,
            "id": project.id,
            "kind": project.kind.value,
            "path": project.path,
            "output": project.output_path,
            "dependencies": [dep.name for dep in graph.direct_dependencies(project)],
        }
        for project in graph.order
    ]


def build_order(
    solution: str | None,
    mappings: Sequence[Sequence[str]] | None,
    root: Path | None,
) -> dict:
    """Parse a solution and report its build order."""
    name, graph = load_graph(solution, mappings or (), root)
    return {"solution": name, "projects": describe_graph(graph)}


def convert(
    format_name: str,
    parameters: Mapping[str, str] | None,
    solution: str | None,
    mappings: Sequence[Sequence[str]] | None,
    output: str | None,
    root: Path | None,
) -> dict:
    """Render a build script and either write it to output or return it."""
    require_parameters(format_name, parameters or {})
    buffer = io.StringIO()
    graph = run_pipeline(
        format_name,
        buffer,
        solution_path=solution,
        parameters=parameters,
        mappings=mappings or (),
        search_dir=root,
    )
    result: dict = {"format": format_name, "projects": graph.names}
    if output:
        target = write_atomic(resolve_path(output, root), buffer.getvalue())
        logger.info(f"Wrote {format_name} script to {target}")
        result["output"] = str(target)
    else:
        result["script"] = buffer.getvalue()
    return result


def _failure(e: Exception) -> dict:
    if isinstance(e, SlingshotError):
        return {"success": False, **e.to_dict()}
    logger.exception("Unexpected tool failure")
    return {"success": False, "error": str(e)}


def register_conversion_tools(server: FastMCP) -> None:
    """Register conversion tools with MCP server."""

    @server.tool()
    async def list_formats() -> dict:
        """
        List the build script formats slingshot can generate.

        Returns:
            Formats in declaration order, each with its parameters and
            whether they are required
        """
        return {"success": True, "data": format_catalog()}

    @server.tool()
    async def get_build_order(
        ctx: Context,
        solution: str | None = None,
        mappings: list[list[str]] | None = None,
    ) -> dict:
        """
        Show the order in which the projects of a Visual Studio solution build.

        Args:
            solution: Path to the .sln file or its directory. Relative paths
                resolve against the project root. When omitted the single .sln
                in the project root is used.
            mappings: Ordered [uri-prefix, file-prefix] pairs used to locate
                web projects (e.g. [["http://localhost/", "/srv/www/"]])

        Returns:
            Projects in build order with their direct dependencies
        """
        try:
            root = await get_project_root(ctx)
            return {"success": True, "data": build_order(solution, mappings, root)}
        except Exception as e:
            return _failure(e)

    @server.tool()
    async def convert_solution(
        ctx: Context,
        format: str,
        parameters: dict[str, str] | None = None,
        solution: str | None = None,
        mappings: list[list[str]] | None = None,
        output: str | None = None,
    ) -> dict:
        """
        Generate a NAnt build file or NMAKE makefile from a Visual Studio solution.

        Args:
            format: Output format ("nant" or "nmake"; see list_formats)
            parameters: Format parameters, e.g. {"build.basedir": "bin"}.
                build.basedir is required by every format.
            solution: Path to the .sln file or its directory (default: the
                single .sln in the project root)
            mappings: Ordered [uri-prefix, file-prefix] pairs for web projects
            output: File to write the script to. When omitted the script is
                returned inline.

        Returns:
            Output location or inline script, plus the project build order
        """
        try:
            root = await get_project_root(ctx)
            return {
                "success": True,
                "data": convert(format, parameters, solution, mappings, output, root),
            }
        except Exception as e:
            return _failure(e)
