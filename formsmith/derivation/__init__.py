"""Derived fields: dependency ordering, formula resolution and evaluation."""

from .evaluator import DerivationResult, DerivedValueEvaluator
from .formula import FormulaReference, ResolvedFormula, resolve_formula
from .graph import (
    DependencyGraph,
    DependencyPlan,
    analyze_dependencies,
    build_dependency_graph,
)
from .interpreters import (
    ArithmeticInterpreter,
    FormulaInterpreter,
    SubstitutionInterpreter,
    get_interpreter,
)

__all__ = [
    "DependencyGraph",
    "DependencyPlan",
    "analyze_dependencies",
    "build_dependency_graph",
    "FormulaReference",
    "ResolvedFormula",
    "resolve_formula",
    "FormulaInterpreter",
    "ArithmeticInterpreter",
    "SubstitutionInterpreter",
    "get_interpreter",
    "DerivedValueEvaluator",
    "DerivationResult",
]
