"""Solution model, descriptor parsing, path mapping and dependency ordering."""

from .graph import DependencyGraph, build_graph, find_cycle
from .locator import find_solution, resolve_solution
from .model import (
    AssemblyReference,
    BuildAction,
    BuildConfiguration,
    Project,
    ProjectFile,
    ProjectKind,
    ReferenceKind,
    Solution,
)
from .parser import parse_solution
from .pathmap import PathMapping, apply_mappings, build_mappings, map_path

__all__ = [
    "AssemblyReference",
    "BuildAction",
    "BuildConfiguration",
    "DependencyGraph",
    "PathMapping",
    "Project",
    "ProjectFile",
    "ProjectKind",
    "ReferenceKind",
    "Solution",
    "apply_mappings",
    "build_graph",
    "build_mappings",
    "find_cycle",
    "find_solution",
    "map_path",
    "parse_solution",
    "resolve_solution",
]
