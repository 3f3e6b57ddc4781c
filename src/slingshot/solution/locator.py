"""Solution file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import AmbiguousSolutionError, NoSolutionFoundError

logger = logging.getLogger(__name__)


def find_solution(directory: str | Path | None = None) -> Path:
    """Find the only .sln file in a directory.

    Unlike project root detection this does not walk up the tree: the
    solution has to be in the directory itself.

    Args:
        directory: Directory to search. Defaults to CWD.

    Returns:
        Path to the solution file

    Raises:
        NoSolutionFoundError: If the directory has no .sln file
        AmbiguousSolutionError: If it has more than one
    """
    current = Path(directory) if directory is not None else Path.cwd()
    candidates = sorted(p for p in current.glob("*.sln") if p.is_file())

    if not candidates:
        raise NoSolutionFoundError(str(current))
    if len(candidates) > 1:
        raise AmbiguousSolutionError(str(current), [p.name for p in candidates])

    logger.debug(f"Found solution: {candidates[0]}")
    return candidates[0]


def resolve_solution(
    solution_path: str | Path | None = None,
    search_dir: str | Path | None = None,
) -> Path:
    """Validate an explicit solution path or locate one in search_dir."""
    if solution_path is None:
        return find_solution(search_dir)

    path = Path(solution_path)
    if not path.is_absolute() and search_dir is not None:
        path = Path(search_dir) / path
    if path.is_dir():
        return find_solution(path)
    if not path.is_file():
        raise NoSolutionFoundError(str(path.parent), f"solution file not found: {path}")
    return path
