"""Dependency Graph Builder: evaluation order for derived fields.

Every derived field gets an edge from each of its parents.  Kahn's
algorithm groups fields into levels (ties kept in schema order), so a
derived field always comes after every parent, whether that parent is an
input field or another derived field.  Parents declared on non-derived
fields are ignored.

Built fresh for every validation pass; the schema can change in between.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.exceptions import (
    CyclicDependency,
    DanglingParentReference,
    SchemaDefinitionError,
)
from ..schemas.form import FormSchema


@dataclass
class DependencyGraph:
    """Evaluation order over a schema's fields.

    Attributes:
        levels: Topological levels; fields within a level are independent
            and listed in schema order.
        parents: field id -> resolvable parent ids (derived fields only).
        derived_ids: Ids of derived fields, in schema order.
    """

    levels: list[list[str]]
    parents: dict[str, list[str]]
    derived_ids: list[str]

    @property
    def order(self) -> list[str]:
        """All orderable field ids, parents before children."""
        return [fid for level in self.levels for fid in level]

    @property
    def derived_order(self) -> list[str]:
        """Derived field ids in evaluation order."""
        derived = set(self.derived_ids)
        return [fid for fid in self.order if fid in derived]


@dataclass
class DependencyPlan:
    """Non-raising analysis result used by the validator.

    Attributes:
        graph: Order over every field that can be evaluated.
        diagnostics: Schema defects found (cycles, dangling parents).
        blocked: field id -> id of the broken field that prevents computing
            it.  Includes cycle members and dangling fields themselves.
    """

    graph: DependencyGraph
    diagnostics: list[SchemaDefinitionError] = field(default_factory=list)
    blocked: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.diagnostics


def analyze_dependencies(schema: FormSchema) -> DependencyPlan:
    """Order the schema's fields and collect every wiring defect."""
    position = {f.id: idx for idx, f in enumerate(schema.fields)}
    diagnostics: list[SchemaDefinitionError] = []
    broken: dict[str, str] = {}

    # Resolvable parents per derived field; dangling references are reported
    parents: dict[str, list[str]] = {}
    for f in schema.fields:
        if not f.is_derived:
            continue
        resolved: list[str] = []
        for parent_id in dict.fromkeys(f.parent_field_ids):
            if parent_id in position:
                resolved.append(parent_id)
            else:
                diagnostics.append(DanglingParentReference(f.id, parent_id))
                broken.setdefault(f.id, f.id)
        parents[f.id] = resolved

    # Reverse adjacency: field -> derived fields that read it
    dependents: dict[str, list[str]] = {fid: [] for fid in position}
    for child, child_parents in parents.items():
        for parent_id in child_parents:
            dependents[parent_id].append(child)

    levels, remaining = _topological_levels(position, parents, dependents)

    if remaining:
        cyclic = _nodes_on_cycles(remaining, parents)
        ordered = sorted(cyclic, key=position.__getitem__)
        if ordered:
            diagnostics.append(CyclicDependency(ordered))
        for fid in ordered:
            broken.setdefault(fid, fid)

    blocked = _propagate_blocked(broken, dependents, position)
    if blocked:
        levels = [
            [fid for fid in level if fid not in blocked] for level in levels
        ]
        levels = [level for level in levels if level]

    graph = DependencyGraph(
        levels=levels,
        parents=parents,
        derived_ids=[f.id for f in schema.fields if f.is_derived],
    )
    return DependencyPlan(graph=graph, diagnostics=diagnostics, blocked=blocked)


def build_dependency_graph(schema: FormSchema) -> DependencyGraph:
    """Strict variant of :func:`analyze_dependencies`.

    Raises:
        DanglingParentReference: A derived field names an id that is not in
            the schema.
        CyclicDependency: Derived fields depend on each other in a loop.
    """
    plan = analyze_dependencies(schema)
    if plan.diagnostics:
        raise plan.diagnostics[0]
    return plan.graph


# -- internals ---------------------------------------------------------------


def _topological_levels(
    position: dict[str, int],
    parents: dict[str, list[str]],
    dependents: dict[str, list[str]],
) -> tuple[list[list[str]], set[str]]:
    """Kahn's algorithm returning grouped levels and the unprocessed ids."""
    in_degree = {fid: len(parents.get(fid, ())) for fid in position}

    current_level = sorted(
        (fid for fid, deg in in_degree.items() if deg == 0),
        key=position.__getitem__,
    )
    levels: list[list[str]] = []
    processed: set[str] = set()

    while current_level:
        levels.append(current_level)
        next_level: list[str] = []
        for fid in current_level:
            processed.add(fid)
            for dependent in dependents[fid]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    next_level.append(dependent)
        current_level = sorted(next_level, key=position.__getitem__)

    return levels, set(position) - processed


def _nodes_on_cycles(remaining: set[str], parents: dict[str, list[str]]) -> set[str]:
    """Ids in *remaining* that can reach themselves through parent edges.

    Everything Kahn leaves behind is either on a cycle or downstream of
    one; only the former are reported as cyclic.
    """
    cyclic: set[str] = set()
    for start in remaining:
        stack = [p for p in parents.get(start, ()) if p in remaining]
        seen: set[str] = set()
        while stack:
            node = stack.pop()
            if node == start:
                cyclic.add(start)
                break
            if node in seen:
                continue
            seen.add(node)
            stack.extend(p for p in parents.get(node, ()) if p in remaining)
    return cyclic


def _propagate_blocked(
    broken: dict[str, str],
    dependents: dict[str, list[str]],
    position: dict[str, int],
) -> dict[str, str]:
    """Mark every field downstream of a broken one, remembering the cause."""
    blocked = dict(broken)
    queue = sorted(broken, key=position.__getitem__)
    while queue:
        fid = queue.pop(0)
        for dependent in dependents.get(fid, ()):
            if dependent not in blocked:
                blocked[dependent] = blocked[fid]
                queue.append(dependent)
    return blocked
