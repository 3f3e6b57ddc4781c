"""Project descriptor readers.

Two dialects are understood:

- VS.NET 2002/2003 files (<VisualStudioProject><CSHARP|VisualBasic>), where
  settings live in attributes and project references carry the GUID of the
  referenced project.
- MSBuild files (<Project>, with or without the 2003 namespace, including
  SDK-style projects), where settings are PropertyGroup elements and project
  references point at the other descriptor by path.

Enterprise templates (.etp) are containers listing other descriptors.
"""

from __future__ import annotations

import logging
import ntpath
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from ..errors import DescriptorParseError, MissingProjectFileError
from .model import (
    AssemblyReference,
    BuildAction,
    BuildConfiguration,
    Project,
    ProjectFile,
    ProjectKind,
    ReferenceKind,
    descriptor_path,
)

logger = logging.getLogger(__name__)

LEGACY_LANGUAGES = {"CSHARP": ProjectKind.CSHARP, "VisualBasic": ProjectKind.VB}

# Condition=" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' "
CONFIG_CONDITION_PATTERN = re.compile(
    r"'\$\(Configuration\)(?:\|\$\(Platform\))?'\s*==\s*'(?P<name>[^|']+)(?:\|[^']*)?'"
)

SDK_SOURCE_EXTENSIONS = {ProjectKind.CSHARP: "*.cs", ProjectKind.VB: "*.vb"}
SDK_EXCLUDED_DIRS = frozenset({"bin", "obj"})

PROJECT_EXTENSIONS = frozenset({".csproj", ".vbproj"})


@dataclass(frozen=True)
class ProjectReference:
    """A project-to-project reference before it is resolved to an identifier."""

    project_id: str | None = None
    path: str | None = None
    """Referenced descriptor, relative to the solution directory."""

    name: str = ""


@dataclass(frozen=True)
class TemplateEntry:
    """A project listed by an enterprise template."""

    project_id: str
    name: str
    path: str


def normalize_guid(value: str) -> str:
    """Normalize a GUID to upper-case braced form."""
    value = value.strip().strip("{}").upper()
    return "{" + value + "}" if value else ""


def _local(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _child_text(element: ET.Element, name: str) -> str:
    child = _child(element, name)
    if child is not None and child.text:
        return child.text.strip()
    return ""


def _is_true(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def load_xml(file_path: Path, project_name: str) -> ET.Element:
    """Read and parse an XML descriptor.

    Raises:
        MissingProjectFileError: If the file can't be read
        DescriptorParseError: If the XML is malformed
    """
    try:
        with open(file_path, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        raise MissingProjectFileError(project_name, str(file_path)) from None
    except OSError as e:
        raise MissingProjectFileError(
            project_name, str(file_path), reason=e.strerror or "unreadable"
        ) from e

    try:
        return ET.fromstring(data)
    except ET.ParseError as e:
        line, column = e.position
        raise DescriptorParseError(str(file_path), f"malformed XML: {e}", line, column + 1) from e


def read_project(project: Project, file_path: Path) -> list[ProjectReference]:
    """Populate project from its descriptor file.

    Args:
        project: Project declared by the solution (id, name, path set)
        file_path: Location of the descriptor on disk

    Returns:
        Project references declared by the descriptor, unresolved
    """
    root = load_xml(file_path, project.name)
    root_tag = _local(root.tag)

    if root_tag == "VisualStudioProject":
        references = _read_legacy(project, root, file_path)
    elif root_tag == "Project":
        references = _read_msbuild(project, root, file_path)
    else:
        raise DescriptorParseError(
            str(file_path), f"unrecognized project descriptor root <{root_tag}>"
        )

    config = project.configuration()
    project.output_path = ntpath.join(
        project.directory, descriptor_path(config.output_path), project.output_file
    )
    logger.debug(
        f"Read {project.name}: {len(project.files)} files, "
        f"{len(project.references)} references, {len(references)} project references"
    )
    return references


def _read_legacy(project: Project, root: ET.Element, file_path: Path) -> list[ProjectReference]:
    language = None
    for tag, kind in LEGACY_LANGUAGES.items():
        language = _child(root, tag)
        if language is not None:
            project.kind = kind
            break
    if language is None:
        project_type = root.get("ProjectType", "unknown")
        raise DescriptorParseError(str(file_path), f"unsupported project type: {project_type}")

    build = _child(language, "Build")
    settings = _child(build, "Settings") if build is not None else None
    if settings is not None:
        project.assembly_name = settings.get("AssemblyName", "")
        project.output_type = settings.get("OutputType", "") or project.output_type
        project.root_namespace = settings.get("RootNamespace", "")
        for config in _children(settings, "Config"):
            name = config.get("Name", "")
            project.configurations[name] = BuildConfiguration(
                name=name,
                output_path=config.get("OutputPath", ""),
                documentation_file=config.get("DocumentationFile", ""),
                debug_symbols=_is_true(config.get("DebugSymbols")),
                allow_unsafe_blocks=_is_true(config.get("AllowUnsafeBlocks")),
                check_overflow=_is_true(config.get("CheckForOverflowUnderflow")),
                define_constants=config.get("DefineConstants", ""),
            )

    references: list[ProjectReference] = []
    refs = _child(build, "References") if build is not None else None
    for ref in _children(refs, "Reference") if refs is not None else []:
        if ref.get("Project"):
            references.append(
                ProjectReference(project_id=normalize_guid(ref.get("Project", "")), name=ref.get("Name", ""))
            )
        elif ref.get("AssemblyName"):
            project.references.append(
                AssemblyReference(
                    name=ref.get("AssemblyName", ""),
                    hint_path=ref.get("HintPath", ""),
                    copy_local=_is_true(ref.get("Private")),
                )
            )
        elif ref.get("Guid"):
            project.references.append(
                AssemblyReference(
                    name="Interop." + ref.get("Name", ""),
                    kind=ReferenceKind.COM,
                    copy_local=True,
                )
            )

    imports = _child(build, "Imports") if build is not None else None
    for imp in _children(imports, "Import") if imports is not None else []:
        if imp.get("Namespace"):
            project.imports.append(imp.get("Namespace", ""))

    files = _child(language, "Files")
    include = _child(files, "Include") if files is not None else None
    for entry in _children(include, "File") if include is not None else []:
        project.files.append(
            ProjectFile(
                relative_path=entry.get("RelPath", ""),
                build_action=_build_action(entry.get("BuildAction", "")),
            )
        )

    return references


def _build_action(value: str) -> BuildAction:
    try:
        return BuildAction(value)
    except ValueError:
        return BuildAction.NONE


def _config_name(condition: str | None) -> str | None:
    if not condition:
        return None
    match = CONFIG_CONDITION_PATTERN.search(condition)
    return match.group("name").strip() if match else None


def _read_msbuild(project: Project, root: ET.Element, file_path: Path) -> list[ProjectReference]:
    if file_path.suffix.lower() == ".vbproj":
        project.kind = ProjectKind.VB
    sdk_style = bool(root.get("Sdk")) or bool(_children(root, "Sdk"))

    global_props: dict[str, str] = {}
    config_props: dict[str, dict[str, str]] = {}
    for group in _children(root, "PropertyGroup"):
        group_config = _config_name(group.get("Condition"))
        for prop in group:
            target = group_config or _config_name(prop.get("Condition"))
            value = (prop.text or "").strip()
            if target:
                config_props.setdefault(target, {})[_local(prop.tag)] = value
            elif not prop.get("Condition"):
                global_props[_local(prop.tag)] = value

    project.assembly_name = global_props.get("AssemblyName") or file_path.stem
    project.output_type = global_props.get("OutputType") or project.output_type
    project.root_namespace = global_props.get("RootNamespace") or project.assembly_name

    if not config_props:
        framework = global_props.get("TargetFramework", "")
        for name in ("Debug", "Release"):
            default_output = f"bin\\{name}\\" + (f"{framework}\\" if framework else "")
            config_props[name] = {"OutputPath": default_output}
    for name, props in config_props.items():
        merged = {**global_props, **props}
        project.configurations[name] = BuildConfiguration(
            name=name,
            output_path=merged.get("OutputPath", f"bin\\{name}\\"),
            documentation_file=merged.get("DocumentationFile", ""),
            debug_symbols=_is_true(merged.get("DebugSymbols")),
            allow_unsafe_blocks=_is_true(merged.get("AllowUnsafeBlocks")),
            check_overflow=_is_true(merged.get("CheckForOverflowUnderflow")),
            define_constants=merged.get("DefineConstants", ""),
        )

    references: list[ProjectReference] = []
    for group in _children(root, "ItemGroup"):
        for item in group:
            tag = _local(item.tag)
            include = item.get("Include", "")
            if not include:
                continue
            if tag in ("Compile", "EmbeddedResource", "Content", "None"):
                for relative in _expand_include(include, file_path.parent):
                    project.files.append(ProjectFile(relative, BuildAction(tag)))
            elif tag == "Reference":
                project.references.append(
                    AssemblyReference(
                        name=include.split(",")[0].strip(),
                        hint_path=_child_text(item, "HintPath"),
                        copy_local=_is_true(_child_text(item, "Private")),
                    )
                )
            elif tag == "COMReference":
                project.references.append(
                    AssemblyReference(name="Interop." + include, kind=ReferenceKind.COM, copy_local=True)
                )
            elif tag == "ProjectReference":
                guid = _child_text(item, "Project")
                references.append(
                    ProjectReference(
                        project_id=normalize_guid(guid) if guid else None,
                        path=ntpath.normpath(ntpath.join(project.directory, descriptor_path(include))),
                        name=_child_text(item, "Name") or ntpath.splitext(ntpath.basename(include))[0],
                    )
                )

    if sdk_style and not project.source_files:
        pattern = SDK_SOURCE_EXTENSIONS[project.kind]
        for source in sorted(file_path.parent.rglob(pattern)):
            relative = source.relative_to(file_path.parent)
            if SDK_EXCLUDED_DIRS.intersection(p.lower() for p in relative.parts[:-1]):
                continue
            project.files.append(ProjectFile("\\".join(relative.parts), BuildAction.COMPILE))

    return references


def _expand_include(include: str, project_dir: Path) -> list[str]:
    """Expand an item Include (';' separated, wildcards allowed)."""
    results = []
    for part in include.split(";"):
        part = descriptor_path(part.strip())
        if not part:
            continue
        if "*" in part or "?" in part:
            pattern = part.replace("\\", "/")
            for match in sorted(project_dir.glob(pattern)):
                if match.is_file():
                    results.append("\\".join(match.relative_to(project_dir).parts))
        else:
            results.append(part)
    return results


def read_template(
    file_path: Path,
    declared_path: str,
    name: str,
    seen: frozenset[str] = frozenset(),
) -> list[TemplateEntry]:
    """List the projects contained in an enterprise template, recursively.

    Args:
        file_path: Location of the .etp file on disk
        declared_path: Location relative to the solution directory
        name: Template name for diagnostics
        seen: Templates already being expanded (guards against self-inclusion)
    """
    key = str(file_path.resolve())
    if key in seen:
        raise DescriptorParseError(str(file_path), "enterprise template includes itself")
    seen = seen | {key}

    root = load_xml(file_path, name)
    general = _child(root, "GENERAL")
    if _local(root.tag) != "EFPROJECT" or general is None:
        raise DescriptorParseError(str(file_path), "not an enterprise template (<EFPROJECT>)")

    ids: dict[str, str] = {}
    # VS.NET writes both capitalizations of the References element.
    for refs_tag in ("References", "REFERENCES"):
        refs = _child(general, refs_tag)
        for ref in _children(refs, "Reference") if refs is not None else []:
            ids[_child_text(ref, "FILE")] = normalize_guid(_child_text(ref, "GUIDPROJECTID"))

    views = _child(general, "Views")
    explorer = _child(views, "ProjectExplorer") if views is not None else None
    files = [_local_text(f) for f in _children(explorer, "File")] if explorer is not None else []

    base = ntpath.dirname(declared_path)
    entries: list[TemplateEntry] = []
    for entry in files:
        extension = ntpath.splitext(entry)[1].lower()
        stem = ntpath.splitext(ntpath.basename(entry))[0]
        path = ntpath.join(base, descriptor_path(entry)) if base else descriptor_path(entry)
        if extension == ".etp":
            child_file = file_path.parent / entry.replace("\\", "/")
            entries.extend(read_template(child_file, path, stem, seen))
        elif extension in PROJECT_EXTENSIONS:
            project_id = ids.get(entry, "")
            if not project_id:
                raise DescriptorParseError(
                    str(file_path), f"no GUIDPROJECTID reference for '{entry}'"
                )
            entries.append(TemplateEntry(project_id=project_id, name=stem, path=path))
    return entries


def _local_text(element: ET.Element) -> str:
    return (element.text or "").strip()
