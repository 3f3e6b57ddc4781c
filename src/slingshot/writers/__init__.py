"""Build script writers and the format registry."""

from .base import BuildParameters, FormatDescriptor, ParameterSpec, SolutionWriter
from .nant import write_nant
from .nmake import write_nmake
from .registry import (
    FORMATS,
    list_formats,
    lookup,
    missing_parameters,
    parameters_for,
    require_parameters,
)

__all__ = [
    "FORMATS",
    "BuildParameters",
    "FormatDescriptor",
    "ParameterSpec",
    "SolutionWriter",
    "list_formats",
    "lookup",
    "missing_parameters",
    "parameters_for",
    "require_parameters",
    "write_nant",
    "write_nmake",
]
