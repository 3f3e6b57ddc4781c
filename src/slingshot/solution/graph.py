"""Project dependency graph and build ordering.

The order is the lexicographically smallest topological order by project
name: every dependency comes before its dependents, and projects with no
constraint between them appear in ascending name order. That makes the
generated scripts identical across runs and platforms.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..errors import CyclicDependencyError, UnresolvedDependencyError
from .model import Project

logger = logging.getLogger(__name__)


def _sort_key(project: Project) -> tuple[str, int]:
    return (project.name, project.index)


@dataclass(frozen=True)
class DependencyGraph:
    """Projects in build order plus dependency lookups."""

    order: tuple[Project, ...]

    def project(self, project_id: str) -> Project:
        for project in self.order:
            if project.id == project_id:
                return project
        raise KeyError(project_id)

    def direct_dependencies(self, project: Project) -> list[Project]:
        """Projects this one depends on, in solution declaration order."""
        deps = [self.project(dep_id) for dep_id in project.dependencies]
        return sorted(deps, key=lambda p: p.index)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.order]


def _check_references(projects: Sequence[Project]) -> dict[str, Project]:
    by_id = {p.id: p for p in projects}
    for project in sorted(projects, key=_sort_key):
        for dep_id in sorted(project.dependencies):
            if dep_id not in by_id:
                raise UnresolvedDependencyError(project.name, dep_id)
    return by_id


def find_cycle(projects: Sequence[Project]) -> list[Project] | None:
    """Depth-first search for a dependency cycle.

    Roots and neighbours are visited in name order so the reported cycle is
    stable. Every dependency must resolve to a project in the sequence.

    Returns:
        Projects forming the cycle, starting at the first one revisited, or
        None if the graph is acyclic
    """
    by_id = {p.id: p for p in projects}
    done: set[str] = set()
    on_path: dict[str, int] = {}
    path: list[Project] = []

    def neighbours(project: Project) -> Iterable[Project]:
        return sorted((by_id[d] for d in project.dependencies), key=_sort_key)

    for root in sorted(projects, key=_sort_key):
        if root.id in done:
            continue
        # Explicit stack of (project, iterator over its dependencies).
        stack = [(root, iter(neighbours(root)))]
        on_path[root.id] = 0
        path.append(root)
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                path.pop()
                del on_path[node.id]
                done.add(node.id)
                continue
            if child.id in on_path:
                return path[on_path[child.id]:]
            if child.id in done:
                continue
            on_path[child.id] = len(path)
            path.append(child)
            stack.append((child, iter(neighbours(child))))
    return None


def build_graph(projects: Sequence[Project]) -> DependencyGraph:
    """Order projects so that dependencies are built first.

    Raises:
        UnresolvedDependencyError: If a dependency names no project in the sequence
        CyclicDependencyError: If the dependencies form a cycle
    """
    by_id = _check_references(projects)

    cycle = find_cycle(projects)
    if cycle:
        names = [p.name for p in cycle]
        logger.error(f"Dependency cycle: {' -> '.join(names)}")
        raise CyclicDependencyError(names)

    remaining = {p.id: len(p.dependencies) for p in projects}
    dependents: dict[str, list[Project]] = {p.id: [] for p in projects}
    for project in projects:
        for dep_id in project.dependencies:
            dependents[dep_id].append(project)

    ready = [(_sort_key(p), p.id) for p in projects if remaining[p.id] == 0]
    heapq.heapify(ready)
    order: list[Project] = []
    while ready:
        _, project_id = heapq.heappop(ready)
        project = by_id[project_id]
        order.append(project)
        for dependent in dependents[project_id]:
            remaining[dependent.id] -= 1
            if remaining[dependent.id] == 0:
                heapq.heappush(ready, (_sort_key(dependent), dependent.id))

    logger.debug(f"Build order: {', '.join(p.name for p in order)}")
    return DependencyGraph(order=tuple(order))
