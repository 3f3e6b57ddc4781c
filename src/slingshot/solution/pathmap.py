"""Prefix remapping of descriptor paths.

Web projects are declared in a solution by URL (http://localhost/App/App.csproj).
Users supply ordered (uri-prefix, file-prefix) pairs to turn such locations into
files on disk. Rules are tried in the order given and the first match wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .model import Solution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathMapping:
    """One prefix substitution rule."""

    source_prefix: str
    target_prefix: str

    def matches(self, path: str) -> bool:
        return path.startswith(self.source_prefix)

    def apply(self, path: str) -> str:
        remainder = path[len(self.source_prefix):]
        if "\\" in self.target_prefix and "/" not in self.target_prefix:
            remainder = remainder.replace("/", "\\")
        return self.target_prefix + remainder


def build_mappings(pairs: Iterable[Sequence[str]]) -> tuple[PathMapping, ...]:
    """Build an ordered mapping table from (source, target) pairs."""
    mappings = []
    for pair in pairs:
        if len(pair) != 2:
            raise ValueError(f"mapping needs a source and a target prefix: {list(pair)}")
        mappings.append(PathMapping(pair[0], pair[1]))
    return tuple(mappings)


def map_path(path: str, mappings: Sequence[PathMapping]) -> str:
    """Rewrite path with the first mapping whose source prefix matches.

    Comparison is case-sensitive and literal. Paths no rule matches are
    returned unchanged.
    """
    for mapping in mappings:
        if mapping.matches(path):
            return mapping.apply(path)
    return path


def is_remote(path: str) -> bool:
    """Whether a declared location is a URI rather than a file path."""
    scheme, sep, _ = path.partition("://")
    return bool(sep) and scheme.isalpha() and len(scheme) > 1


def apply_mappings(solution: Solution, mappings: Sequence[PathMapping]) -> int:
    """Rewrite every path-valued project field in place.

    Returns:
        Number of fields that changed
    """
    if not mappings:
        return 0

    changed = 0
    for project in solution.projects:
        for attr in ("path", "output_path"):
            value = getattr(project, attr)
            mapped = map_path(value, mappings)
            if mapped != value:
                logger.debug(f"Mapped {project.name}.{attr}: {value} -> {mapped}")
                setattr(project, attr, mapped)
                changed += 1
    return changed
