"""Solution (.sln) descriptor parser.

A solution is a line-oriented text file:

    Microsoft Visual Studio Solution File, Format Version 8.00
    Project("{FAE04EC0-...}") = "Core", "Core\\Core.csproj", "{1B0C...}"
        ProjectSection(ProjectDependencies) = postProject
            {9D2E...} = {9D2E...}
        EndProjectSection
    EndProject
    Global
        GlobalSection(ProjectDependencies) = postSolution
            {1B0C...}.0 = {9D2E...}
        EndGlobalSection
    EndGlobal

Both dependency layouts (per-project section, VS 2005+; global section,
VS 2002/2003) are honoured. Project references declared inside the project
descriptors are merged into the same dependency set.
"""

from __future__ import annotations

import logging
import ntpath
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..errors import DescriptorParseError, MissingProjectFileError
from .model import Project, Solution, native_path
from .pathmap import PathMapping, is_remote, map_path
from .projects import ProjectReference, normalize_guid, read_project, read_template

logger = logging.getLogger(__name__)

SOLUTION_HEADER = "Microsoft Visual Studio Solution File, Format Version"

PROJECT_LINE_PATTERN = re.compile(
    r'^Project\("(?P<type>[^"]+)"\)\s*=\s*"(?P<name>[^"]+)"\s*,\s*"(?P<path>[^"]+)"\s*,\s*"(?P<id>[^"]+)"\s*$'
)
SECTION_DEPENDENCY_PATTERN = re.compile(r"^(?P<target>\{[^}]+\})\s*=\s*\{[^}]+\}$")
GLOBAL_DEPENDENCY_PATTERN = re.compile(r"^(?P<source>\{[^}]+\})\.\d+\s*=\s*(?P<target>\{[^}]+\})$")


class ProjectType(str, Enum):
    """Project type GUIDs found in solution files."""

    CSHARP = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"
    CSHARP_SDK = "{9A19103F-16F7-4668-BE54-9A1E7A4F7556}"
    VB = "{F184B08F-C81C-45F6-A57F-5ABD9991F28F}"
    ENTERPRISE = "{FE3BBBB6-72D5-11D2-9ACE-00C04F79A2A4}"


BUILDABLE_TYPES = frozenset(
    t.value for t in (ProjectType.CSHARP, ProjectType.CSHARP_SDK, ProjectType.VB)
)


@dataclass
class _Entry:
    """A Project(...) block as declared in the solution."""

    type_id: str
    name: str
    path: str
    project_id: str
    line: int
    dependencies: list[str] = field(default_factory=list)


def parse_solution(
    path: str | Path,
    mappings: Sequence[PathMapping] = (),
) -> Solution:
    """Parse a solution and every project descriptor it references.

    Args:
        path: Solution file
        mappings: Prefix mappings used to locate remote (web) projects

    Returns:
        Solution with its projects in declaration order; project paths are
        still as declared (see pathmap.apply_mappings)

    Raises:
        DescriptorParseError: On malformed solution or project descriptors,
            or when two projects share an identifier or a name
        MissingProjectFileError: When a referenced descriptor can't be read
    """
    solution_path = Path(path)
    try:
        with open(solution_path, encoding="utf-8-sig") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise DescriptorParseError(str(solution_path), f"cannot read solution: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise DescriptorParseError(str(solution_path), f"not a text file: {e.reason}") from e

    version, entries, global_deps = _scan(str(solution_path), lines)
    solution = Solution(path=str(solution_path), format_version=version)
    base_dir = solution_path.parent

    pending: list[tuple[Project, list[ProjectReference], int]] = []
    for entry in entries:
        for project in _expand(entry, base_dir, mappings, str(solution_path)):
            if solution.get_project(project.id) is not None:
                raise DescriptorParseError(
                    str(solution_path), f"duplicate project identifier {project.id}", entry.line
                )
            # Project names double as NAnt target names.
            if solution.find_by_name(project.name) is not None:
                raise DescriptorParseError(
                    str(solution_path), f"duplicate project name '{project.name}'", entry.line
                )
            project.index = len(solution.projects)
            solution.projects.append(project)
            references = read_project(project, _locate(project, base_dir, mappings))
            pending.append((project, references, entry.line))

    for project, references, line in pending:
        for reference in references:
            project.dependencies.add(_resolve_reference(solution, reference))
        for target in global_deps.get(project.id, []):
            project.dependencies.add(target)
        if project.id in project.dependencies:
            raise DescriptorParseError(
                str(solution_path), f"project '{project.name}' references itself", line
            )

    logger.info(f"Parsed solution {solution.name}: {len(solution.projects)} projects")
    return solution


def _scan(
    path: str, lines: list[str]
) -> tuple[str, list[_Entry], dict[str, list[str]]]:
    """Tokenize solution lines into project entries and global dependencies."""
    number = 0
    while number < len(lines) and not lines[number].strip():
        number += 1
    if number >= len(lines) or not lines[number].strip().startswith(SOLUTION_HEADER):
        raise DescriptorParseError(
            path, "this is not a 'Microsoft Visual Studio Solution File' file", number + 1
        )
    version = lines[number].strip()[len(SOLUTION_HEADER):].strip()

    entries: list[_Entry] = []
    global_deps: dict[str, list[str]] = {}
    current: _Entry | None = None
    section: str | None = None

    for number, raw in enumerate(lines[number + 1:], start=number + 2):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if current is None and line.startswith("Project("):
            match = PROJECT_LINE_PATTERN.match(line)
            if not match:
                raise DescriptorParseError(path, "malformed Project declaration", number)
            current = _Entry(
                type_id=normalize_guid(match.group("type")),
                name=match.group("name"),
                path=match.group("path"),
                project_id=normalize_guid(match.group("id")),
                line=number,
            )
        elif current is not None and line == "EndProject":
            if section is not None:
                raise DescriptorParseError(path, "EndProject inside an open ProjectSection", number)
            entries.append(current)
            current = None
        elif current is not None and line.startswith("Project("):
            raise DescriptorParseError(path, f"missing EndProject for '{current.name}'", number)
        elif line.startswith("ProjectSection(") or line.startswith("GlobalSection("):
            section = line[line.index("(") + 1:line.index(")")] if ")" in line else ""
        elif line in ("EndProjectSection", "EndGlobalSection"):
            section = None
        elif section == "ProjectDependencies" and current is not None:
            match = SECTION_DEPENDENCY_PATTERN.match(line)
            if not match:
                raise DescriptorParseError(path, "malformed project dependency", number)
            current.dependencies.append(normalize_guid(match.group("target")))
        elif section == "ProjectDependencies":
            match = GLOBAL_DEPENDENCY_PATTERN.match(line)
            if not match:
                raise DescriptorParseError(path, "malformed project dependency", number)
            source = normalize_guid(match.group("source"))
            global_deps.setdefault(source, []).append(normalize_guid(match.group("target")))

    if current is not None:
        raise DescriptorParseError(path, f"missing EndProject for '{current.name}'", current.line)

    for entry in entries:
        if entry.dependencies:
            global_deps.setdefault(entry.project_id, []).extend(entry.dependencies)
    return version, entries, global_deps


def _expand(
    entry: _Entry,
    base_dir: Path,
    mappings: Sequence[PathMapping],
    solution_path: str,
) -> list[Project]:
    """Turn a solution entry into zero or more projects."""
    if entry.type_id in BUILDABLE_TYPES:
        return [Project(id=entry.project_id, name=entry.name, path=entry.path)]

    if entry.type_id == ProjectType.ENTERPRISE:
        template = Project(id=entry.project_id, name=entry.name, path=entry.path)
        location = _locate(template, base_dir, mappings)
        return [
            Project(id=item.project_id, name=item.name, path=item.path)
            for item in read_template(location, entry.path, entry.name)
        ]

    logger.debug(f"Skipping '{entry.name}' ({entry.type_id}) in {solution_path}")
    return []


def _locate(project: Project, base_dir: Path, mappings: Sequence[PathMapping]) -> Path:
    """Find a project descriptor on disk, applying prefix mappings."""
    location = map_path(project.path, mappings)
    if is_remote(location):
        raise MissingProjectFileError(
            project.name, location, reason="a prefix mapping needs to be specified"
        )
    return base_dir / native_path(location)


def _resolve_reference(solution: Solution, reference: ProjectReference) -> str:
    """Resolve a project reference to a project identifier.

    Unresolvable references keep their raw GUID or path so that graph
    construction reports them.
    """
    if reference.project_id and solution.get_project(reference.project_id) is not None:
        return reference.project_id
    if reference.path:
        wanted = ntpath.normcase(ntpath.normpath(reference.path))
        for project in solution.projects:
            if ntpath.normcase(ntpath.normpath(project.path)) == wanted:
                return project.id
        return reference.path
    return reference.project_id or reference.name
