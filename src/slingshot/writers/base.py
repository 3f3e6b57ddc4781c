"""Writer contract and format metadata."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TextIO

from ..errors import EmitError

if TYPE_CHECKING:
    from ..solution import DependencyGraph

BuildParameters = Mapping[str, str]
"""Ordered name -> value pairs handed to the selected writer."""

BASEDIR = "build.basedir"
CONFIGURATION = "build.configuration"


class SolutionWriter(Protocol):
    """Serializes an ordered project graph into a build script.

    Writers must emit projects in graph.order and must not reorder them.
    """

    def __call__(
        self,
        graph: DependencyGraph,
        parameters: BuildParameters,
        sink: TextIO,
        *,
        solution_name: str = "",
    ) -> None: ...


@dataclass(frozen=True)
class ParameterSpec:
    """A parameter a format recognizes."""

    name: str
    required: bool
    description: str

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "required": self.required, "description": self.description}


@dataclass(frozen=True)
class FormatDescriptor:
    """A registered output format."""

    name: str
    description: str
    writer: SolutionWriter
    parameters: tuple[ParameterSpec, ...] = ()

    @property
    def required_parameters(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
        }


def emit(sink: TextIO, text: str, format_name: str) -> None:
    """Write a rendered script to the sink in one call."""
    try:
        sink.write(text)
        sink.flush()
    except (OSError, ValueError, UnicodeError) as e:
        raise EmitError(format_name, str(e)) from e
