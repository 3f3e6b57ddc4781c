"""Pytest fixtures for slingshot tests."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

CSHARP_TYPE = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"
VB_TYPE = "{F184B08F-C81C-45F6-A57F-5ABD9991F28F}"
ENTERPRISE_TYPE = "{FE3BBBB6-72D5-11D2-9ACE-00C04F79A2A4}"
FOLDER_TYPE = "{2150E333-8FDC-42A3-9474-1A3956D46DE8}"

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"


def make_guid(index: int) -> str:
    return f"{{{index:08X}-0000-0000-0000-000000000000}}"


@dataclass
class ProjectSpec:
    """A project to lay out on disk."""

    name: str
    guid: str
    language: str = "csharp"
    layout: str = "msbuild"
    output_type: str = "Library"
    references: list[str] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=lambda: ["Class1.cs"])
    path: str | None = None

    @property
    def extension(self) -> str:
        return ".vbproj" if self.language == "vb" else ".csproj"

    @property
    def declared_path(self) -> str:
        return self.path or f"{self.name}\\{self.name}{self.extension}"


class SolutionBuilder:
    """Writes a solution and its project descriptors below a directory."""

    def __init__(self, root: Path, name: str = "Example"):
        self.root = root
        self.name = name
        self.projects: dict[str, ProjectSpec] = {}
        self.extra_lines: list[str] = []
        self.global_deps: list[tuple[str, str]] = []

    def add(self, name: str, **kwargs) -> ProjectSpec:
        if kwargs.get("language") == "vb":
            kwargs.setdefault("sources", ["Module1.vb"])
        spec = ProjectSpec(name=name, guid=kwargs.pop("guid", make_guid(len(self.projects) + 1)), **kwargs)
        self.projects[name] = spec
        return spec

    def solution_text(self) -> str:
        lines = ["", "Microsoft Visual Studio Solution File, Format Version 9.00"]
        for spec in self.projects.values():
            type_id = VB_TYPE if spec.language == "vb" else CSHARP_TYPE
            lines.append(f'Project("{type_id}") = "{spec.name}", "{spec.declared_path}", "{spec.guid}"')
            if spec.depends_on:
                lines.append("\tProjectSection(ProjectDependencies) = postProject")
                for dep in spec.depends_on:
                    guid = self.projects[dep].guid
                    lines.append(f"\t\t{guid} = {guid}")
                lines.append("\tEndProjectSection")
            lines.append("EndProject")
        lines.extend(self.extra_lines)
        lines.append("Global")
        if self.global_deps:
            lines.append("\tGlobalSection(ProjectDependencies) = postSolution")
            counts: dict[str, int] = {}
            for source, target in self.global_deps:
                src = self.projects[source].guid
                n = counts.get(src, 0)
                counts[src] = n + 1
                lines.append(f"\t\t{src}.{n} = {self.projects[target].guid}")
            lines.append("\tEndGlobalSection")
        lines.append("EndGlobal")
        return "\r\n".join(lines) + "\r\n"

    def write(self, with_projects: bool = True) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{self.name}.sln"
        path.write_text(self.solution_text(), encoding="utf-8-sig")
        if with_projects:
            for spec in self.projects.values():
                if spec.path and "://" in spec.path:
                    continue
                self.write_project(spec)
        return path

    def write_project(self, spec: ProjectSpec, directory: Path | None = None) -> Path:
        location = directory or (self.root / spec.declared_path.replace("\\", "/")).parent
        location.mkdir(parents=True, exist_ok=True)
        path = location / f"{spec.name}{spec.extension}"
        if spec.layout == "legacy":
            text = self.legacy_text(spec)
        else:
            text = self.msbuild_text(spec)
        path.write_text(text, encoding="utf-8")
        for source in spec.sources:
            (location / source.replace("\\", "/")).parent.mkdir(parents=True, exist_ok=True)
            (location / source.replace("\\", "/")).write_text("// source\n", encoding="utf-8")
        return path

    def legacy_text(self, spec: ProjectSpec) -> str:
        tag = "VisualBasic" if spec.language == "vb" else "CSHARP"
        refs = ['                <Reference Name="System" AssemblyName="System" />']
        for name in spec.references:
            refs.append(
                f'                <Reference Name="{name}" Project="{self.projects[name].guid}" '
                'Package="{F184B08F-C81C-45F6-A57F-5ABD9991F28F}" />'
            )
        files = "\n".join(
            f'                <File RelPath="{s}" SubType="Code" BuildAction="Compile" />' for s in spec.sources
        )
        imports = ""
        if spec.language == "vb":
            imports = (
                "            <Imports>\n"
                '                <Import Namespace="System" />\n'
                '                <Import Namespace="System.Data" />\n'
                "            </Imports>\n"
            )
        return (
            "<VisualStudioProject>\n"
            f'    <{tag} ProjectType="Local" ProductVersion="7.10.3077" SchemaVersion="2.0" '
            f'ProjectGuid="{spec.guid}">\n'
            "        <Build>\n"
            f'            <Settings AssemblyName="{spec.name}" OutputType="{spec.output_type}" '
            f'RootNamespace="{spec.name}">\n'
            '                <Config Name="Debug" OutputPath="bin\\Debug\\" DebugSymbols="true" '
            'DefineConstants="DEBUG;TRACE" AllowUnsafeBlocks="false" />\n'
            '                <Config Name="Release" OutputPath="bin\\Release\\" DebugSymbols="false" '
            'DefineConstants="TRACE" />\n'
            "            </Settings>\n"
            "            <References>\n" + "\n".join(refs) + "\n"
            "            </References>\n"
            f"{imports}"
            "        </Build>\n"
            "        <Files>\n"
            "            <Include>\n"
            f"{files}\n"
            "            </Include>\n"
            "        </Files>\n"
            f"    </{tag}>\n"
            "</VisualStudioProject>\n"
        )

    def msbuild_text(self, spec: ProjectSpec) -> str:
        project_dir = spec.declared_path.rsplit("\\", 1)[0]
        project_refs = []
        for name in spec.references:
            target = self.projects[name]
            target_dir = target.declared_path.rsplit("\\", 1)[0]
            if project_dir == target_dir:
                include = target.declared_path.rsplit("\\", 1)[-1]
            else:
                include = f"..\\{target.declared_path}"
            project_refs.append(
                f'    <ProjectReference Include="{include}">\n'
                f"      <Project>{target.guid}</Project>\n"
                f"      <Name>{name}</Name>\n"
                "    </ProjectReference>"
            )
        compile_items = "\n".join(f'    <Compile Include="{s}" />' for s in spec.sources)
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            f'<Project ToolsVersion="4.0" DefaultTargets="Build" xmlns="{MSBUILD_NAMESPACE}">\n'
            "  <PropertyGroup>\n"
            f"    <ProjectGuid>{spec.guid}</ProjectGuid>\n"
            f"    <OutputType>{spec.output_type}</OutputType>\n"
            f"    <RootNamespace>{spec.name}</RootNamespace>\n"
            f"    <AssemblyName>{spec.name}</AssemblyName>\n"
            "  </PropertyGroup>\n"
            "  <PropertyGroup Condition=\" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' \">\n"
            "    <DebugSymbols>true</DebugSymbols>\n"
            "    <OutputPath>bin\\Debug\\</OutputPath>\n"
            "    <DefineConstants>DEBUG;TRACE</DefineConstants>\n"
            "  </PropertyGroup>\n"
            "  <PropertyGroup Condition=\" '$(Configuration)|$(Platform)' == 'Release|AnyCPU' \">\n"
            "    <OutputPath>bin\\Release\\</OutputPath>\n"
            "    <DefineConstants>TRACE</DefineConstants>\n"
            "  </PropertyGroup>\n"
            "  <ItemGroup>\n"
            '    <Reference Include="System" />\n'
            '    <Reference Include="System.Xml, Version=4.0.0.0, Culture=neutral" />\n'
            "  </ItemGroup>\n"
            "  <ItemGroup>\n"
            f"{compile_items}\n"
            "  </ItemGroup>\n"
            "  <ItemGroup>\n" + "\n".join(project_refs) + "\n"
            "  </ItemGroup>\n"
            "</Project>\n"
        )


@pytest.fixture
def solution_builder(tmp_path):
    """Factory for solutions laid out below tmp_path."""
    return SolutionBuilder(tmp_path)


@pytest.fixture
def chain_solution(solution_builder):
    """A -> B -> C chain: B references A, C references B."""
    solution_builder.add("A")
    solution_builder.add("B", references=["A"])
    solution_builder.add("C", references=["B"])
    return solution_builder.write()


@pytest.fixture
def legacy_solution(solution_builder):
    """VS.NET 2003 solution with legacy descriptors and global dependencies."""
    solution_builder.add("Core", layout="legacy")
    solution_builder.add("Utils", layout="legacy", language="vb")
    solution_builder.add("App", layout="legacy", output_type="Exe", references=["Core"])
    solution_builder.global_deps.append(("App", "Utils"))
    return solution_builder.write()
