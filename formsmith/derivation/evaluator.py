"""Derived Value Evaluator: compute derived fields in dependency order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ..core.exceptions import FormulaEvaluationError, SchemaDefinitionError
from ..schemas.field import FieldDefinition
from ..schemas.form import FormSchema, ValueSet
from ..utils.logger import get_logger
from .formula import resolve_formula
from .graph import DependencyPlan, analyze_dependencies
from .interpreters import ArithmeticInterpreter, FormulaInterpreter

logger = get_logger(__name__)


@dataclass
class DerivationResult:
    """Output of :meth:`DerivedValueEvaluator.compute_all`.

    Attributes:
        values: Copy of the input values with every computable derived
            field filled in.
        computed: field id -> derived value, for fields computed this pass.
        errors: Per-field formula errors (the field's value is left ``""``).
        skipped: field id -> failed parent id, for fields not computed
            because a parent's formula failed.
        plan: Dependency analysis the pass was run from.
    """

    values: ValueSet
    computed: dict[str, str] = field(default_factory=dict)
    errors: dict[str, SchemaDefinitionError] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    plan: Optional[DependencyPlan] = None


class DerivedValueEvaluator:
    """Resolves formula references and hands the result to an interpreter.

    Deterministic for the same parent values and formula text.
    """

    def __init__(self, interpreter: Optional[FormulaInterpreter] = None):
        self.interpreter = interpreter or ArithmeticInterpreter()

    def evaluate(
        self,
        field_def: FieldDefinition,
        parents: Sequence[FieldDefinition],
        parent_values: Mapping[str, str],
    ) -> str:
        """Compute one derived field from its resolved parent values.

        Raises:
            UnresolvedFormulaReference: The formula names something that is
                not one of *parents*.
        """
        resolved = resolve_formula(field_def, parents, parent_values)
        value = self.interpreter.interpret(resolved)
        logger.debug("Derived field %s = %r", field_def.id, value)
        return value

    def compute_all(
        self,
        schema: FormSchema,
        values: Mapping[str, str],
        plan: Optional[DependencyPlan] = None,
    ) -> DerivationResult:
        """Fill in every derived field that can be computed.

        Derived values never come from *values*: each derived field starts
        from ``""`` and is overwritten by its computed value.  Blocked fields
        (cycles, dangling parents and their dependents) and fields whose
        formula fails stay ``""``.  An interpreter that raises
        anything else is reported as a :class:`FormulaEvaluationError` for
        that field.  *values* is not modified.
        """
        plan = plan or analyze_dependencies(schema)
        working: ValueSet = {fid: v for fid, v in values.items()}
        fields_by_id = {f.id: f for f in schema.fields}

        for fid in plan.graph.derived_ids:
            working[fid] = ""

        result = DerivationResult(values=working, plan=plan)

        for fid in plan.graph.derived_order:
            field_def = fields_by_id[fid]
            parent_ids = plan.graph.parents.get(fid, [])
            failed = next(
                (pid for pid in parent_ids if pid in result.errors or pid in result.skipped),
                None,
            )
            if failed is not None:
                result.skipped[fid] = result.skipped.get(failed, failed)
                continue
            parents = [fields_by_id[pid] for pid in parent_ids]
            parent_values = {pid: working.get(pid, "") for pid in parent_ids}
            try:
                value = self.evaluate(field_def, parents, parent_values)
            except SchemaDefinitionError as exc:
                logger.warning("Cannot compute derived field %s: %s", fid, exc)
                result.errors[fid] = exc
                continue
            except Exception as exc:
                logger.warning("Interpreter failed on derived field %s", fid, exc_info=True)
                result.errors[fid] = FormulaEvaluationError(fid, str(exc) or type(exc).__name__)
                continue
            working[fid] = value
            result.computed[fid] = value

        return result
