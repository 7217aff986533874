"""FormValidator: orchestrates derivation and rule evaluation for a schema."""

from __future__ import annotations

import math
import time as _time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import pandas as pd
from tqdm.auto import tqdm

from ..derivation.evaluator import DerivedValueEvaluator
from ..derivation.graph import analyze_dependencies
from ..derivation.interpreters import FormulaInterpreter, get_interpreter
from ..rules.evaluator import evaluate_field
from ..schemas.form import ErrorSet, FormSchema, ValueSet
from ..utils.logger import get_logger
from .config import FormConfig
from .exceptions import (
    CyclicDependency,
    DanglingParentReference,
    FormulaEvaluationError,
    SchemaDefinitionError,
    UnresolvedFormulaReference,
    ValidationFailure,
)
from .hooks import (
    DerivedValueEvent,
    FieldErrorEvent,
    ValidationEndEvent,
    ValidationHooks,
    ValidationStartEvent,
    _fire_hook,
)

logger = get_logger(__name__)

ERRORS_COLUMN = "__errors"


@dataclass
class ValidationResult:
    """Result from :meth:`FormValidator.run`.

    Attributes:
        errors: One message per offending field (last failure wins).
        values: Working copy of the input values with derived fields filled.
        diagnostics: Schema-level problems (cycles, dangling parents,
            formula failures, blocked derived fields).  At most one per
            field and kind; a repeated defect keeps its latest message.
    """

    errors: ErrorSet = field(default_factory=dict)
    values: ValueSet = field(default_factory=dict)
    diagnostics: list[ValidationFailure] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no field has an error."""
        return not self.errors

    @property
    def has_schema_errors(self) -> bool:
        """True if the schema itself is broken (not just the input)."""
        return len(self.diagnostics) > 0


@dataclass
class BatchValidationResult:
    """Result from :meth:`FormValidator.validate_many`.

    Attributes:
        data: Input rows (DataFrame or list[dict], matching the input type)
            with derived fields filled in and an ``__errors`` column.
        results: Per-row validation results.
    """

    data: pd.DataFrame | list[dict[str, Any]]
    results: list[ValidationResult] = field(default_factory=list)

    @property
    def invalid_rows(self) -> list[int]:
        return [idx for idx, r in enumerate(self.results) if not r.is_valid]

    @property
    def success_rate(self) -> float:
        """Fraction of rows that validated without errors."""
        total = len(self.results)
        if total == 0:
            return 1.0
        return 1.0 - len(self.invalid_rows) / total


def _schema_message(field_label: str, error: SchemaDefinitionError) -> str:
    if isinstance(error, CyclicDependency):
        return f"{field_label} has a circular dependency"
    if isinstance(error, DanglingParentReference):
        return f"{field_label} depends on a missing field ({error.missing_id})"
    if isinstance(error, UnresolvedFormulaReference):
        return f"{field_label} formula references unknown field '{error.reference}'"
    if isinstance(error, FormulaEvaluationError):
        return f"{field_label} could not be computed ({error.reason})"
    return f"{field_label} is misconfigured: {error.message}"


def _coerce_cell(value: Any) -> str:
    """Turn a DataFrame/JSON cell into the engine's string value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    return str(value)


class FormValidator:
    """Validates value sets against a schema.

    Each pass: analyze field dependencies, compute derived values in
    dependency order, then evaluate the rules of every non-derived field.
    Schema defects and formula failures become per-field errors and
    diagnostics; they never abort the pass.  Inputs are never modified and
    no state is kept between passes.
    """

    def __init__(
        self,
        config: Optional[FormConfig] = None,
        interpreter: Optional[FormulaInterpreter] = None,
        hooks: Optional[ValidationHooks] = None,
    ):
        self.config = config or FormConfig()
        self.hooks = hooks or ValidationHooks()
        self.derived = DerivedValueEvaluator(
            interpreter or get_interpreter(self.config.interpreter)
        )

    # -- primary API -----------------------------------------------------

    def validate(self, schema: FormSchema, values: Mapping[str, str]) -> ErrorSet:
        """Return the error set for *values* (empty when the form is valid)."""
        return self.run(schema, values).errors

    def run(self, schema: FormSchema, values: Mapping[str, str]) -> ValidationResult:
        """Full validation pass, including derived values and diagnostics."""
        _fire_hook(self.hooks.on_validation_start, ValidationStartEvent(
            schema_id=schema.id,
            num_fields=len(schema.fields),
            num_values=len(values),
        ))
        start = _time.monotonic()

        fields_by_id = {f.id: f for f in schema.fields}
        failures: dict[str, ValidationFailure] = {}
        schema_failures: dict[tuple[str, str], ValidationFailure] = {}

        def record(fid: str, message: str, kind: str) -> None:
            failure = ValidationFailure(field_id=fid, message=message, kind=kind)
            failures[fid] = failure
            if failure.is_schema_level:
                schema_failures[(fid, kind)] = failure
            _fire_hook(self.hooks.on_field_error, FieldErrorEvent(
                field_id=fid, message=message, kind=kind,
            ))

        # (1) Dependency analysis
        plan = analyze_dependencies(schema)
        for error in plan.diagnostics:
            ids = error.field_ids if isinstance(error, CyclicDependency) else [error.field_id]
            for fid in ids:
                label = fields_by_id[fid].message_label
                record(fid, _schema_message(label, error), error.kind)
        if plan.diagnostics:
            logger.warning(
                "Schema %s has %d dependency problem(s): %s",
                schema.id, len(plan.diagnostics), "; ".join(str(e) for e in plan.diagnostics),
            )

        # (2) Derived values, in topological order
        derivation = self.derived.compute_all(schema, values, plan=plan)
        for fid, value in derivation.computed.items():
            _fire_hook(self.hooks.on_derived_value, DerivedValueEvent(field_id=fid, value=value))
        for fid, error in derivation.errors.items():
            record(fid, _schema_message(fields_by_id[fid].message_label, error), error.kind)

        blocked = {
            fid: cause for fid, cause in plan.blocked.items() if fid != cause
        }
        blocked.update(derivation.skipped)
        for fid, cause in blocked.items():
            label = fields_by_id[fid].message_label
            cause_label = fields_by_id[cause].message_label
            record(
                fid,
                f"{label} cannot be computed because {cause_label} is invalid",
                "blocked_dependency",
            )

        # (3) Rules for every non-derived field
        working = derivation.values
        for f in schema.fields:
            if f.is_derived:
                continue
            message = evaluate_field(
                f, working.get(f.id, ""), enforce_ranges=self.config.enforce_ranges
            )
            if message is not None:
                record(f.id, message, "input")

        # (4) Errors in schema order
        errors: ErrorSet = {
            f.id: failures[f.id].message for f in schema.fields if f.id in failures
        }
        diagnostics = sorted(
            schema_failures.values(), key=lambda d: schema.index_of(d.field_id)
        )

        _fire_hook(self.hooks.on_validation_end, ValidationEndEvent(
            schema_id=schema.id,
            num_errors=len(errors),
            num_diagnostics=len(diagnostics),
            elapsed_seconds=_time.monotonic() - start,
        ))
        return ValidationResult(errors=errors, values=working, diagnostics=diagnostics)

    def validate_many(
        self,
        schema: FormSchema,
        data: pd.DataFrame | list[dict[str, Any]],
    ) -> BatchValidationResult:
        """Validate a batch of submissions, one value set per row.

        Accepts a DataFrame or ``list[dict]`` keyed by field id.  Output type
        matches input type: derived fields are written back and every row
        gets an ``__errors`` entry (its error set).
        """
        if isinstance(data, list):
            rows = data
            input_is_list = True
        else:
            rows = data.to_dict(orient="records")
            input_is_list = False

        results: list[ValidationResult] = []
        for row in tqdm(
            rows,
            desc=f"Validating {schema.name}",
            unit="row",
            disable=not self.config.enable_progress_bar,
        ):
            values = {str(k): _coerce_cell(v) for k, v in row.items()}
            results.append(self.run(schema, values))

        derived_ids = [f.id for f in schema.fields if f.is_derived]
        invalid = sum(1 for r in results if not r.is_valid)
        logger.info(
            "Validated %d submission(s) for schema %s: %d invalid",
            len(results), schema.id, invalid,
        )

        if input_is_list:
            out_rows: list[dict[str, Any]] = []
            for row, result in zip(rows, results):
                merged = dict(row)
                for fid in derived_ids:
                    merged[fid] = result.values.get(fid, "")
                merged[ERRORS_COLUMN] = dict(result.errors)
                out_rows.append(merged)
            return BatchValidationResult(data=out_rows, results=results)

        df_out = data.copy()
        for fid in derived_ids:
            df_out[fid] = [r.values.get(fid, "") for r in results]
        df_out[ERRORS_COLUMN] = [dict(r.errors) for r in results]
        return BatchValidationResult(data=df_out, results=results)


def validate(schema: FormSchema, values: Mapping[str, str]) -> ErrorSet:
    """Validate *values* against *schema* with the default configuration."""
    return FormValidator().validate(schema, values)
