"""In-memory representation of a solution and its projects.

Paths held by these entities use the descriptor's own (Windows) conventions:
backslash separators, relative to the solution directory unless the solution
declared a remote location. Use native_path() before touching the filesystem.
"""

from __future__ import annotations

import ntpath
import os
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_CONFIGURATION = "Debug"


class ProjectKind(str, Enum):
    """Languages the compiler knows how to build."""

    CSHARP = "csharp"
    VB = "vb"


class BuildAction(str, Enum):
    """Build action attached to a project file."""

    COMPILE = "Compile"
    EMBEDDED_RESOURCE = "EmbeddedResource"
    CONTENT = "Content"
    NONE = "None"


class ReferenceKind(str, Enum):
    """Non-project reference flavours."""

    ASSEMBLY = "assembly"
    COM = "com"


OUTPUT_EXTENSIONS = {
    "library": ".dll",
    "module": ".netmodule",
    "exe": ".exe",
    "winexe": ".exe",
}

COMPILER_TARGETS = {
    "library": "library",
    "module": "module",
    "exe": "exe",
    "winexe": "winexe",
}


def native_path(path: str) -> str:
    """Convert a descriptor path to the host OS separator."""
    return path.replace("\\", os.sep).replace("/", os.sep)


def descriptor_path(path: str) -> str:
    """Convert a host path to descriptor (backslash) form."""
    return path.replace("/", "\\")


@dataclass
class BuildConfiguration:
    """Settings for one named configuration (usually Debug or Release)."""

    name: str
    output_path: str = ""
    documentation_file: str = ""
    debug_symbols: bool = False
    allow_unsafe_blocks: bool = False
    check_overflow: bool = False
    define_constants: str = ""

    @property
    def defines(self) -> list[str]:
        """Split DefineConstants (';' or ',' separated) into symbols."""
        parts = self.define_constants.replace(",", ";").split(";")
        return [p.strip() for p in parts if p.strip()]


@dataclass
class ProjectFile:
    """A file included in a project, relative to the project directory."""

    relative_path: str
    build_action: BuildAction = BuildAction.NONE

    @property
    def is_resx(self) -> bool:
        return ntpath.splitext(self.relative_path)[1].lower() == ".resx"


@dataclass
class AssemblyReference:
    """A reference to an assembly that is not another project in the solution."""

    name: str
    kind: ReferenceKind = ReferenceKind.ASSEMBLY
    hint_path: str = ""
    copy_local: bool = False

    @property
    def file_name(self) -> str:
        return self.name + ".dll"


@dataclass
class Project:
    """A project declared in a solution."""

    id: str
    name: str
    path: str
    """Descriptor location as declared by the solution."""

    kind: ProjectKind = ProjectKind.CSHARP
    assembly_name: str = ""
    output_type: str = "Library"
    root_namespace: str = ""
    output_path: str = ""
    """Artifact path: project directory, configuration output path, output file."""

    configurations: dict[str, BuildConfiguration] = field(default_factory=dict)
    files: list[ProjectFile] = field(default_factory=list)
    references: list[AssemblyReference] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    dependencies: set[str] = field(default_factory=set)
    """Identifiers of the projects this one must be built after."""

    index: int = 0
    """Declaration position within the solution."""

    @property
    def directory(self) -> str:
        return ntpath.dirname(self.path)

    @property
    def output_file(self) -> str:
        extension = OUTPUT_EXTENSIONS.get(self.output_type.lower(), ".exe")
        return (self.assembly_name or self.name) + extension

    @property
    def compiler_target(self) -> str:
        return COMPILER_TARGETS.get(self.output_type.lower(), "exe")

    def configuration(self, name: str | None = None) -> BuildConfiguration:
        """Get a configuration by name, falling back to the default one."""
        if name and name in self.configurations:
            return self.configurations[name]
        if DEFAULT_CONFIGURATION in self.configurations:
            return self.configurations[DEFAULT_CONFIGURATION]
        if self.configurations:
            return next(iter(self.configurations.values()))
        return BuildConfiguration(name=name or DEFAULT_CONFIGURATION)

    def files_with(self, action: BuildAction) -> list[ProjectFile]:
        return [f for f in self.files if f.build_action == action]

    @property
    def source_files(self) -> list[ProjectFile]:
        return self.files_with(BuildAction.COMPILE)

    @property
    def resx_files(self) -> list[ProjectFile]:
        return [f for f in self.files_with(BuildAction.EMBEDDED_RESOURCE) if f.is_resx]

    @property
    def resource_files(self) -> list[ProjectFile]:
        return [f for f in self.files_with(BuildAction.EMBEDDED_RESOURCE) if not f.is_resx]

    def resolve(self, relative_path: str) -> str:
        """Path of a project-relative file, relative to the solution directory."""
        return ntpath.join(self.directory, relative_path) if self.directory else relative_path

    def resource_name(self, file: ProjectFile) -> str:
        """Manifest name of an embedded resource (namespace + dotted path)."""
        dotted = file.relative_path.replace("\\", ".").replace("/", ".")
        if file.is_resx:
            stem = ntpath.splitext(ntpath.basename(file.relative_path))[0]
            dotted = stem + ".resources"
        return f"{self.root_namespace}.{dotted}" if self.root_namespace else dotted


@dataclass
class Solution:
    """A parsed solution descriptor and its projects in declaration order."""

    path: str
    format_version: str = ""
    projects: list[Project] = field(default_factory=list)

    @property
    def name(self) -> str:
        return os.path.splitext(os.path.basename(self.path))[0]

    def get_project(self, project_id: str) -> Project | None:
        """Get a project by identifier."""
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def find_by_name(self, name: str) -> Project | None:
        """Get the first project with the given display name."""
        for project in self.projects:
            if project.name == name:
                return project
        return None
