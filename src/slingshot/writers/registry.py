"""Static table of output formats.

The table is built once at import time and never modified. It is the single
source of truth for which formats exist and which parameters each of them
requires; usage text and the MCP tools read it from here.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from ..errors import MissingParameterError, UnsupportedFormatError
from .base import BASEDIR, CONFIGURATION, BuildParameters, FormatDescriptor, ParameterSpec
from .nant import write_nant
from .nmake import write_nmake

_BASEDIR_SPEC = ParameterSpec(BASEDIR, True, "directory receiving the built assemblies")
_CONFIGURATION_SPEC = ParameterSpec(
    CONFIGURATION, False, "project configuration to compile (default Debug)"
)

FORMATS: Final[Mapping[str, FormatDescriptor]] = MappingProxyType(
    {
        descriptor.name: descriptor
        for descriptor in (
            FormatDescriptor(
                name="nant",
                description="NAnt build file (XML), one target per project",
                writer=write_nant,
                parameters=(
                    _BASEDIR_SPEC,
                    _CONFIGURATION_SPEC,
                    ParameterSpec("project.name", False, "name of the NAnt project (default: solution name)"),
                ),
            ),
            FormatDescriptor(
                name="nmake",
                description="NMAKE makefile, one rule per project",
                writer=write_nmake,
                parameters=(
                    _BASEDIR_SPEC,
                    _CONFIGURATION_SPEC,
                    ParameterSpec("csc", False, "C# compiler command (default csc)"),
                    ParameterSpec("vbc", False, "VB.NET compiler command (default vbc)"),
                    ParameterSpec("resgen", False, "resource compiler command for .resx files (default resgen)"),
                ),
            ),
        )
    }
)


def list_formats() -> list[str]:
    """Registered format names in declaration order."""
    return list(FORMATS)


def lookup(name: str) -> FormatDescriptor:
    """Get a format by name.

    Raises:
        UnsupportedFormatError: If no format has that name
    """
    try:
        return FORMATS[name]
    except KeyError:
        raise UnsupportedFormatError(name, list_formats()) from None


def parameters_for(name: str) -> list[ParameterSpec]:
    """Parameters recognized by a format, in declaration order."""
    return list(lookup(name).parameters)


def missing_parameters(name: str, parameters: BuildParameters) -> list[str]:
    """Required parameters of a format absent from parameters."""
    return [p for p in lookup(name).required_parameters if not parameters.get(p)]


def require_parameters(name: str, parameters: BuildParameters) -> None:
    """Check that parameters carry every required parameter of a format.

    The conversion pipeline does not validate parameters itself; the command
    line and the MCP tools call this before converting.

    Raises:
        UnsupportedFormatError: If no format has that name
        MissingParameterError: If required parameters are absent or empty
    """
    missing = missing_parameters(name, parameters)
    if missing:
        raise MissingParameterError(name, missing)
