"""Errors raised by the solution compiler pipeline.

Every stage raises a distinct subclass of SlingshotError. Nothing in the
pipeline recovers from these; callers render them (CLI) or wrap them in a
result envelope (MCP tools).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class SlingshotError(Exception):
    """Base exception for solution conversion errors."""

    kind = "error"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind, "error": str(self)}


class NoSolutionFoundError(SlingshotError):
    """Raised when a directory contains no solution file."""

    kind = "no_solution_found"

    def __init__(self, directory: str, message: str | None = None):
        super().__init__(message or f"{directory} does not contain any '.sln' files")
        self.directory = directory


class AmbiguousSolutionError(SlingshotError):
    """Raised when a directory contains more than one solution file."""

    kind = "ambiguous_solution"

    def __init__(self, directory: str, candidates: Sequence[str]):
        names = ", ".join(candidates)
        super().__init__(f"{directory} contains too many '.sln' files: {names}")
        self.directory = directory
        self.candidates = list(candidates)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["candidates"] = self.candidates
        return result


class DescriptorParseError(SlingshotError):
    """Raised when a solution or project descriptor is malformed."""

    kind = "descriptor_parse_error"

    def __init__(
        self,
        path: str,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ):
        location = path
        if line is not None:
            location += f"({line}"
            if column is not None:
                location += f",{column}"
            location += ")"
        super().__init__(f"{location}: {message}")
        self.path = path
        self.message = message
        self.line = line
        self.column = column

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = self.path
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        return result


class MissingProjectFileError(SlingshotError):
    """Raised when a project descriptor referenced by a solution can't be read."""

    kind = "missing_project_file"

    def __init__(self, project: str, path: str, reason: str = "file not found"):
        super().__init__(f"project '{project}': {reason}: {path}")
        self.project = project
        self.path = path
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["project"] = self.project
        result["path"] = self.path
        return result


class UnresolvedDependencyError(SlingshotError):
    """Raised when a project depends on an identifier absent from the solution."""

    kind = "unresolved_dependency"

    def __init__(self, project: str, reference: str):
        super().__init__(
            f"Project '{project}' contains reference to unknown project '{reference}'"
        )
        self.project = project
        self.reference = reference

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["project"] = self.project
        result["reference"] = self.reference
        return result


class CyclicDependencyError(SlingshotError):
    """Raised when the project dependency graph contains a cycle."""

    kind = "cyclic_dependency"

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        path = " -> ".join([*self.cycle, self.cycle[0]]) if self.cycle else ""
        super().__init__(f"cyclic project dependency: {path}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["cycle"] = self.cycle
        return result


class UnsupportedFormatError(SlingshotError):
    """Raised when the requested output format is not registered."""

    kind = "unsupported_format"

    def __init__(self, format_name: str, available: Sequence[str] = ()):
        message = f"'{format_name}' is an unsupported format."
        if available:
            message += f" Supported formats: {', '.join(available)}"
        super().__init__(message)
        self.format_name = format_name
        self.available = list(available)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["format"] = self.format_name
        result["available"] = self.available
        return result


class MissingParameterError(SlingshotError):
    """Raised when required format parameters were not supplied."""

    kind = "missing_parameter"

    def __init__(self, format_name: str, names: Sequence[str]):
        self.format_name = format_name
        self.names = list(names)
        super().__init__(
            f"format '{format_name}' requires parameter(s): {', '.join(self.names)}"
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["format"] = self.format_name
        result["missing"] = self.names
        return result


class EmitError(SlingshotError):
    """Raised when a writer fails to produce or deliver its script."""

    kind = "emit_error"

    def __init__(self, format_name: str, reason: str):
        super().__init__(f"could not write '{format_name}' script: {reason}")
        self.format_name = format_name
        self.reason = reason
