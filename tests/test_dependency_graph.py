"""Tests for dependency analysis (topological ordering and cycle detection)."""

from __future__ import annotations

import pytest

from formsmith.core.exceptions import CyclicDependency, DanglingParentReference
from formsmith.derivation.graph import analyze_dependencies, build_dependency_graph
from formsmith.schemas.field import FieldDefinition
from formsmith.schemas.form import FormSchema


# -- helpers -------------------------------------------------------------


def _input(fid: str) -> FieldDefinition:
    return FieldDefinition(id=fid, type="number", label=fid)


def _derived(fid: str, *parents: str) -> FieldDefinition:
    return FieldDefinition(
        id=fid, type="number", label=fid, is_derived=True, parent_field_ids=list(parents)
    )


def _schema(*fields: FieldDefinition) -> FormSchema:
    return FormSchema(id="s", name="Graph", fields=list(fields))


# -- ordering ------------------------------------------------------------


class TestOrdering:
    def test_chain_declared_in_reverse(self):
        """C depends on B depends on A, declared C, B, A."""
        schema = _schema(_derived("C", "B"), _derived("B", "A"), _input("A"))
        graph = build_dependency_graph(schema)
        assert graph.derived_order == ["B", "C"]
        assert graph.levels == [["A"], ["B"], ["C"]]

    def test_independent_fields_keep_schema_order(self):
        schema = _schema(_input("z"), _input("a"), _input("m"))
        assert build_dependency_graph(schema).levels == [["z", "a", "m"]]

    def test_diamond(self):
        schema = _schema(
            _derived("D", "B", "C"),
            _input("A"),
            _derived("C", "A"),
            _derived("B", "A"),
        )
        graph = build_dependency_graph(schema)
        order = graph.order
        assert order.index("A") < order.index("B") < order.index("D")
        assert order.index("C") < order.index("D")
        assert graph.levels[1] == ["C", "B"]

    def test_parents_on_non_derived_fields_ignored(self):
        plain = FieldDefinition(id="x", type="text", parent_field_ids=["missing"])
        plan = analyze_dependencies(_schema(plain))
        assert plan.is_valid
        assert plan.graph.order == ["x"]

    def test_duplicate_parent_ids_counted_once(self):
        schema = _schema(_input("A"), _derived("B", "A", "A"))
        assert build_dependency_graph(schema).derived_order == ["B"]


# -- cycles ----------------------------------------------------------------


class TestCycles:
    def test_two_field_cycle_names_both(self):
        schema = _schema(_input("A"), _derived("X", "Y"), _derived("Y", "X"))
        with pytest.raises(CyclicDependency) as exc_info:
            build_dependency_graph(schema)
        assert exc_info.value.field_ids == ["X", "Y"]
        assert "X, Y" in str(exc_info.value)

    def test_self_loop(self):
        schema = _schema(_derived("S", "S"))
        plan = analyze_dependencies(schema)
        assert isinstance(plan.diagnostics[0], CyclicDependency)
        assert plan.diagnostics[0].field_ids == ["S"]

    def test_downstream_of_cycle_not_reported_as_cyclic(self):
        schema = _schema(_derived("X", "Y"), _derived("Y", "X"), _derived("Z", "X"))
        plan = analyze_dependencies(schema)
        assert [d.field_ids for d in plan.diagnostics] == [["X", "Y"]]
        assert plan.blocked == {"X": "X", "Y": "Y", "Z": "X"}

    def test_rest_of_schema_still_ordered(self):
        schema = _schema(
            _input("A"), _derived("B", "A"), _derived("X", "Y"), _derived("Y", "X")
        )
        plan = analyze_dependencies(schema)
        assert plan.graph.derived_order == ["B"]
        assert not plan.is_valid


# -- dangling parents ------------------------------------------------------


class TestDanglingParents:
    def test_reported(self):
        schema = _schema(_derived("B", "gone"))
        with pytest.raises(DanglingParentReference) as exc_info:
            build_dependency_graph(schema)
        assert exc_info.value.field_id == "B"
        assert exc_info.value.missing_id == "gone"

    def test_blocks_dependents(self):
        schema = _schema(_input("A"), _derived("B", "A", "gone"), _derived("C", "B"))
        plan = analyze_dependencies(schema)
        assert len(plan.diagnostics) == 1
        assert plan.blocked == {"B": "B", "C": "B"}
        assert plan.graph.derived_order == []
        assert plan.graph.order == ["A"]
