"""NAnt build file writer.

Produces one <target> per project, named after the project, whose depends
attribute lists the project's direct dependencies in solution declaration
order. A "build" target depends on every project in build order, and a
"clean" target removes the compiled assemblies. A project named like one of
those two targets cannot be expressed and is an EmitError.
"""

from __future__ import annotations

import logging
import ntpath
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, TextIO

from ..errors import EmitError
from ..solution.model import Project, ProjectKind, ReferenceKind
from .base import BASEDIR, CONFIGURATION, BuildParameters, emit

if TYPE_CHECKING:
    from ..solution import DependencyGraph

logger = logging.getLogger(__name__)

FORMAT_NAME = "nant"
BASEDIR_REF = "${" + BASEDIR + "}"
COMPILER_TASKS = {ProjectKind.CSHARP: "csc", ProjectKind.VB: "vbc"}
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'
RESERVED_TARGETS = ("build", "clean")


def _artifact(project: Project) -> str:
    return f"{BASEDIR_REF}\\{project.output_file}"


def _include_set(parent: ET.Element, tag: str, names: list[str], **attrs: str) -> None:
    if not names:
        return
    fileset = ET.SubElement(parent, tag, {"basedir": ".", **attrs})
    for name in names:
        ET.SubElement(fileset, "include", name=name)


def _reference_paths(graph: DependencyGraph, project: Project) -> list[str]:
    paths = []
    for reference in project.references:
        if reference.kind == ReferenceKind.COM:
            paths.append(f"{BASEDIR_REF}\\{reference.file_name}")
        elif reference.hint_path and not reference.copy_local:
            paths.append(project.resolve(reference.hint_path))
        else:
            paths.append(reference.file_name)
    paths.extend(_artifact(dep) for dep in graph.direct_dependencies(project))
    return paths


def _project_target(
    graph: DependencyGraph, project: Project, configuration_name: str | None
) -> ET.Element:
    depends = [dep.name for dep in graph.direct_dependencies(project)]
    attrs = {"name": project.name}
    if depends:
        attrs["depends"] = ",".join(depends)
    attrs["description"] = f"Build {project.output_file}"
    target = ET.Element("target", attrs)

    ET.SubElement(target, "mkdir", dir=BASEDIR_REF)

    config = project.configuration(configuration_name)
    compile_attrs = {
        "target": project.compiler_target,
        "output": _artifact(project),
        "debug": str(config.debug_symbols).lower(),
    }
    if config.defines:
        compile_attrs["define"] = ",".join(config.defines)
    if project.kind == ProjectKind.CSHARP:
        if config.allow_unsafe_blocks:
            compile_attrs["unsafe"] = "true"
        if config.check_overflow:
            compile_attrs["checked"] = "true"
        if config.documentation_file:
            compile_attrs["doc"] = f"{BASEDIR_REF}\\{ntpath.basename(config.documentation_file)}"
    else:
        if config.check_overflow:
            compile_attrs["removeintchecks"] = "false"
        if project.root_namespace:
            compile_attrs["rootnamespace"] = project.root_namespace
        if project.imports:
            compile_attrs["imports"] = ",".join(project.imports)

    compiler = ET.SubElement(target, COMPILER_TASKS[project.kind], compile_attrs)
    _include_set(compiler, "sources", [project.resolve(f.relative_path) for f in project.source_files])
    _include_set(compiler, "references", _reference_paths(graph, project))
    resources = [project.resolve(f.relative_path) for f in project.resx_files + project.resource_files]
    if project.root_namespace:
        _include_set(compiler, "resources", resources, prefix=project.root_namespace, dynamicprefix="true")
    else:
        _include_set(compiler, "resources", resources, dynamicprefix="true")
    return target


def write_nant(
    graph: DependencyGraph,
    parameters: BuildParameters,
    sink: TextIO,
    *,
    solution_name: str = "",
) -> None:
    """Write a NAnt build file for the ordered projects.

    Raises:
        EmitError: If a project name clashes with the build or clean target
    """
    for project in graph.order:
        if project.name in RESERVED_TARGETS:
            raise EmitError(
                FORMAT_NAME, f"project '{project.name}' clashes with the '{project.name}' target"
            )

    name =parameters.get("project.name") or solution_name or "solution"
    root = ET.Element("project", {"name": name, "default": "build", "basedir": "."})
    if solution_name:
        root.append(ET.Comment(f" Generated by slingshot from {solution_name}.sln "))

    for key, value in parameters.items():
        ET.SubElement(root, "property", name=key, value=value)
    if BASEDIR not in parameters:
        ET.SubElement(root, "property", name=BASEDIR, value="bin", overwrite="false")

    configuration_name = parameters.get(CONFIGURATION)
    for project in graph.order:
        root.append(_project_target(graph, project, configuration_name))

    build_attrs = {"name": "build"}
    if graph.order:
        build_attrs["depends"] = ",".join(graph.names)
    build_attrs["description"] = "Build every project in the solution"
    ET.SubElement(root, "target", build_attrs)

    clean = ET.SubElement(root, "target", name="clean", description="Delete build outputs")
    for project in graph.order:
        ET.SubElement(clean, "delete", file=_artifact(project), failonerror="false")
        config = project.configuration(configuration_name)
        if config.documentation_file:
            ET.SubElement(
                clean,
                "delete",
                file=f"{BASEDIR_REF}\\{ntpath.basename(config.documentation_file)}",
                failonerror="false",
            )

    ET.indent(root, space="    ")
    # ET's own declaration uses the locale encoding for str output.
    text = XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"
    logger.debug(f"Rendered NAnt script with {len(graph.order)} project targets")
    emit(sink, text, FORMAT_NAME)
