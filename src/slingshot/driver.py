"""Solution conversion pipeline.

locate -> parse -> map paths -> order -> select writer -> emit. Each stage
raises its own SlingshotError subclass and the pipeline stops at the first
one. The script is rendered completely in memory before anything reaches
the caller's sink, so a failed run never leaves partial output behind.

Parameters are handed to the writer as given. Checking that the required ones
are present is up to the caller (see writers.require_parameters); writers
fall back to their defaults for anything missing.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TextIO

from .errors import EmitError, SlingshotError
from .solution import (
    DependencyGraph,
    PathMapping,
    apply_mappings,
    build_graph,
    build_mappings,
    parse_solution,
    resolve_solution,
)
from .writers import lookup
from .writers.base import emit

logger = logging.getLogger(__name__)

MappingPairs = Iterable[PathMapping | Sequence[str]]


def _mappings(mappings: MappingPairs) -> tuple[PathMapping, ...]:
    rules: list[PathMapping] = []
    for mapping in mappings:
        if isinstance(mapping, PathMapping):
            rules.append(mapping)
        else:
            rules.extend(build_mappings([mapping]))
    return tuple(rules)


def load_graph(
    solution_path: str | Path | None = None,
    mappings: MappingPairs = (),
    search_dir: str | Path | None = None,
) -> tuple[str, DependencyGraph]:
    """Parse a solution, apply path mappings and order its projects.

    Returns:
        (solution name, dependency graph)
    """
    rules = _mappings(mappings)
    path = resolve_solution(solution_path, search_dir)
    solution = parse_solution(path, rules)
    changed = apply_mappings(solution, rules)
    if changed:
        logger.info(f"Rewrote {changed} project paths using {len(rules)} mappings")
    return solution.name, build_graph(solution.projects)


def _render(
    format_name: str,
    solution_path: str | Path | None,
    parameters: Mapping[str, str] | None,
    mappings: MappingPairs,
    search_dir: str | Path | None,
) -> tuple[str, DependencyGraph]:
    params = dict(parameters or {})
    name, graph = load_graph(solution_path, mappings, search_dir)

    descriptor = lookup(format_name)
    buffer = io.StringIO()
    try:
        descriptor.writer(graph, params, buffer, solution_name=name)
    except SlingshotError:
        raise
    except Exception as e:
        logger.exception(f"{format_name} writer failed")
        raise EmitError(format_name, str(e)) from e

    logger.info(f"Rendered {format_name} script for {name} ({len(graph.order)} projects)")
    return buffer.getvalue(), graph


def render_solution(
    format_name: str,
    solution_path: str | Path | None = None,
    parameters: Mapping[str, str] | None = None,
    mappings: MappingPairs = (),
    search_dir: str | Path | None = None,
) -> str:
    """Convert a solution and return the build script as text."""
    text, _ = _render(format_name, solution_path, parameters, mappings, search_dir)
    return text


def convert_solution(
    format_name: str,
    sink: TextIO,
    solution_path: str | Path | None = None,
    parameters: Mapping[str, str] | None = None,
    mappings: MappingPairs = (),
    search_dir: str | Path | None = None,
) -> DependencyGraph:
    """Convert a solution into a build script written to sink.

    Args:
        format_name: Registered output format (nant, nmake)
        sink: Text stream receiving the script
        solution_path: Solution file or directory. When omitted the single
            .sln in search_dir (or CWD) is used.
        parameters: Format parameters (name -> value)
        mappings: Ordered (uri-prefix, file-prefix) rules
        search_dir: Base directory for locating and resolving the solution

    Returns:
        The dependency graph the script was generated from

    Raises:
        SlingshotError: The first failure of any stage
    """
    text, graph = _render(format_name, solution_path, parameters, mappings, search_dir)
    emit(sink, text, format_name)
    return graph
