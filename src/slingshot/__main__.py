"""Entry points for the slingshot command line and MCP server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from .driver import convert_solution, render_solution
from .errors import SlingshotError
from .utils import write_atomic
from .writers import FORMATS, list_formats, require_parameters

PROG = "slingshot"

logger = logging.getLogger(__name__)


def configure_logging(default_level: str = "INFO") -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", default_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def usage_text() -> str:
    """Usage summary listing every format and its parameters."""
    lines = [
        f"usage: {PROG} -<format> [-sln solution] [-map uri-prefix file-prefix]* "
        "[-out file] [name=value]*",
        f"       {PROG} --serve [--project path]",
        "",
        "formats: " + ", ".join(f"-{name}" for name in list_formats()),
        "",
        "if -sln is not specified, uses the only .sln file in the current directory",
        "",
        "parameters:",
    ]
    for descriptor in FORMATS.values():
        if not descriptor.parameters:
            continue
        lines.append(f"    {descriptor.name}:")
        for spec in descriptor.parameters:
            flag = "REQUIRED" if spec.required else "OPTIONAL"
            lines.append(f"      {spec.name}: {spec.description} ({flag})")
    lines += [
        "",
        "examples:",
        f"  {PROG} -nant build.basedir=..\\..\\bin",
        f"  {PROG} -nmake -sln Example.sln -map http://localhost/ C:\\Inetpub\\wwwroot\\ build.basedir=bin",
    ]
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Generate NAnt build files or NMAKE makefiles from Visual Studio solutions",
        allow_abbrev=False,
    )
    formats = parser.add_mutually_exclusive_group()
    for descriptor in FORMATS.values():
        formats.add_argument(
            f"-{descriptor.name}",
            dest="format",
            action="store_const",
            const=descriptor.name,
            help=descriptor.description,
        )
    parser.add_argument("-sln", dest="solution", default=None, help="Solution file (default: the only .sln in CWD)")
    parser.add_argument(
        "-map",
        dest="mappings",
        nargs=2,
        action="append",
        default=[],
        metavar=("URI_PREFIX", "FILE_PREFIX"),
        help="Map a web project location to a local path. Rules apply in order, first match wins.",
    )
    parser.add_argument("-out", dest="output", default=None, help="Write the script to this file instead of stdout")
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Run the MCP server on stdio instead of converting",
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Project root for relative paths given to the MCP server",
    )
    parser.add_argument("parameters", nargs="*", metavar="name=value", help="Format parameters")
    return parser


def parse_parameters(parser: argparse.ArgumentParser, items: list[str]) -> dict[str, str]:
    """Turn name=value arguments into an ordered mapping."""
    parameters: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            parser.error(f"invalid parameter '{item}', expected name=value")
        parameters[name] = value
    return parameters


async def serve(project_path: str | None) -> None:
    """Run the MCP server on stdio."""
    from .server import create_server

    logger.info(f"Starting Slingshot MCP Server (project: {project_path or os.getcwd()})...")
    mcp = create_server(project_path)
    try:
        await mcp.run_stdio_async()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        logger.info("Server stopped")


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface.

    Returns:
        Process exit code
    """
    args_list = sys.argv[1:] if argv is None else list(argv)
    if not args_list:
        sys.stderr.write(usage_text())
        return 1

    parser = build_parser()
    args = parser.parse_intermixed_args(args_list)

    if args.serve:
        configure_logging("INFO")
        try:
            asyncio.run(serve(args.project))
        except KeyboardInterrupt:
            pass
        return 0

    configure_logging("WARNING")
    if args.format is None:
        parser.error("no output format specified (" + ", ".join(f"-{n}" for n in list_formats()) + ")")
    parameters = parse_parameters(parser, args.parameters)

    try:
        require_parameters(args.format, parameters)
        if args.output:
            text = render_solution(args.format, args.solution, parameters, args.mappings)
            write_atomic(args.output, text)
            logger.info(f"Wrote {args.format} script to {args.output}")
        else:
            convert_solution(args.format, sys.stdout, args.solution, parameters, args.mappings)
    except SlingshotError as e:
        print(f"{PROG}: error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"{PROG}: error: cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    """Run the command line interface."""
    sys.exit(main())


def run_server() -> None:
    """Run the MCP server (slingshot-mcp)."""
    parser = argparse.ArgumentParser(
        prog="slingshot-mcp",
        description="Slingshot MCP Server - convert Visual Studio solutions via MCP",
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Project root path. Relative solution and output paths resolve against it.",
    )
    args = parser.parse_args()
    configure_logging("INFO")
    try:
        asyncio.run(serve(args.project))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
