"""NMAKE makefile writer.

Every project becomes one rule whose target is the assembly in
$(BUILD_BASEDIR) and whose prerequisites are the assemblies of its direct
dependencies followed by its source and resource files. Every .resx file
is compiled to a .resources file below $(BUILD_BASEDIR)\\obj\\<project> by
its own resgen rule before it is embedded.
"""

from __future__ import annotations

import logging
import ntpath
import re
from typing import TYPE_CHECKING, TextIO

from ..solution.model import Project, ProjectKind, ReferenceKind
from .base import BASEDIR, CONFIGURATION, BuildParameters, emit

if TYPE_CHECKING:
    from ..solution import DependencyGraph

logger = logging.getLogger(__name__)

FORMAT_NAME = "nmake"
BASEDIR_MACRO = "$(BUILD_BASEDIR)"
COMPILER_MACROS = {ProjectKind.CSHARP: "$(CSC)", ProjectKind.VB: "$(VBC)"}
DEFAULT_MACROS = {"csc": "csc", "vbc": "vbc", "resgen": "resgen"}
CONTINUATION = " \\\n\t"


def macro_name(parameter: str) -> str:
    """Map a parameter name (build.basedir) to a macro name (BUILD_BASEDIR)."""
    return re.sub(r"[^A-Za-z0-9_]", "_", parameter).upper()


def _quote(path: str) -> str:
    return f'"{path}"' if " " in path else path


def _artifact(project: Project) -> str:
    return f"{BASEDIR_MACRO}\\{project.output_file}"


def _references(graph: DependencyGraph, project: Project) -> list[str]:
    paths = []
    for reference in project.references:
        if reference.kind == ReferenceKind.COM:
            paths.append(f"{BASEDIR_MACRO}\\{reference.file_name}")
        elif reference.hint_path and not reference.copy_local:
            paths.append(project.resolve(reference.hint_path))
        else:
            paths.append(reference.file_name)
    paths.extend(_artifact(dep) for dep in graph.direct_dependencies(project))
    return paths


def _resource_dir(project: Project) -> str:
    return f"{BASEDIR_MACRO}\\obj\\{project.name}"


def _embedded_resources(project: Project) -> list[tuple[str, str]]:
    """(file to embed, manifest name) pairs; .resx entries point at resgen output."""
    embedded = [
        (f"{_resource_dir(project)}\\{project.resource_name(f)}", project.resource_name(f))
        for f in project.resx_files
    ]
    embedded += [
        (project.resolve(f.relative_path), project.resource_name(f)) for f in project.resource_files
    ]
    return embedded


def _resgen_rules(project: Project) -> list[str]:
    lines = []
    directory = _resource_dir(project)
    for resx in project.resx_files:
        target = f"{directory}\\{project.resource_name(resx)}"
        source = project.resolve(resx.relative_path)
        lines += [
            f"{_quote(target)}: {_quote(source)}",
            f'\t@if not exist "{directory}" mkdir "{directory}"',
            f"\t$(RESGEN) /nologo {_quote(source)} {_quote(target)}",
            "",
        ]
    return lines


def _rule(graph: DependencyGraph, project: Project, configuration_name: str | None) -> list[str]:
    config = project.configuration(configuration_name)
    sources = [project.resolve(f.relative_path) for f in project.source_files]
    resources = _embedded_resources(project)
    prerequisites = [_artifact(dep) for dep in graph.direct_dependencies(project)]
    prerequisites += sources + [path for path, _ in resources]

    header = f"{_artifact(project)}:"
    if prerequisites:
        header += " " + CONTINUATION.join(_quote(p) for p in prerequisites)

    flags = ["/nologo", f"/target:{project.compiler_target}", "/out:$@"]
    flags.append("/debug+" if config.debug_symbols else "/debug-")
    if config.defines:
        flags.append("/define:" + ",".join(config.defines))
    if project.kind == ProjectKind.CSHARP:
        if config.allow_unsafe_blocks:
            flags.append("/unsafe")
        if config.check_overflow:
            flags.append("/checked+")
        if config.documentation_file:
            flags.append(f"/doc:{BASEDIR_MACRO}\\{ntpath.basename(config.documentation_file)}")
    else:
        if project.root_namespace:
            flags.append(f"/rootnamespace:{project.root_namespace}")
        if project.imports:
            flags.append("/imports:" + ",".join(project.imports))
    flags += [f"/r:{_quote(r)}" for r in _references(graph, project)]
    for path, manifest_name in resources:
        flags.append(f"/res:{_quote(path)},{manifest_name}")

    command = f"\t{COMPILER_MACROS[project.kind]} " + CONTINUATION.join(flags + [_quote(s) for s in sources])
    return [
        f"# {project.name}",
        header,
        f'\t@if not exist "{BASEDIR_MACRO}" mkdir "{BASEDIR_MACRO}"',
        command,
        "",
    ] + _resgen_rules(project)


def write_nmake(
    graph: DependencyGraph,
    parameters: BuildParameters,
    sink: TextIO,
    *,
    solution_name: str = "",
) -> None:
    """Write an NMAKE makefile for the ordered projects."""
    lines = []
    if solution_name:
        lines.append(f"# Generated by slingshot from {solution_name}.sln")
        lines.append("")

    macros = {macro_name(k): v for k, v in DEFAULT_MACROS.items()}
    macros.setdefault(macro_name(BASEDIR), "bin")
    for key, value in parameters.items():
        macros[macro_name(key)] = value
    for name, value in macros.items():
        lines.append(f"{name} = {value}")
    lines.append("")

    artifacts = [_artifact(p) for p in graph.order]
    lines.append("all:" + (" " + CONTINUATION.join(artifacts) if artifacts else ""))
    lines.append("")

    configuration_name = parameters.get(CONFIGURATION)
    for project in graph.order:
        lines.extend(_rule(graph, project, configuration_name))

    lines.append("clean:")
    for artifact in artifacts:
        lines.append(f'\t-@if exist "{artifact}" del /q "{artifact}"')
    for project in graph.order:
        if project.resx_files:
            directory = _resource_dir(project)
            lines.append(f'\t-@if exist "{directory}" rmdir /s /q "{directory}"')
    lines.append("")

    logger.debug(f"Rendered NMAKE script with {len(graph.order)} rules")
    emit(sink, "\n".join(lines), FORMAT_NAME)
