"""Formula interpreters: pluggable meaning for resolved formulas.

The core guarantees reference resolution and evaluation order; what a
formula computes is decided here.  Two strategies ship:

- ``SubstitutionInterpreter``: the formula text with values filled in.
- ``ArithmeticInterpreter``: ``simpleeval`` evaluation of arithmetic over
  numbers and ISO dates, falling back to substitution for anything that is
  not an arithmetic expression.
"""

from __future__ import annotations

import ast
import operator
from datetime import date, timedelta
from typing import Any, Callable, Protocol, Union, runtime_checkable

from simpleeval import (
    InvalidExpression,
    NameNotDefined,
    NumberTooHigh,
    SimpleEval,
    safe_add,
    safe_mult,
    safe_power,
)

from ..core.exceptions import (
    ConfigurationError,
    FormulaEvaluationError,
    UnresolvedFormulaReference,
)
from ..utils.logger import get_logger
from .formula import ResolvedFormula

logger = get_logger(__name__)

Operand = Union[int, float, date]

MAX_EXPONENT = 1000


@runtime_checkable
class FormulaInterpreter(Protocol):
    """Protocol all interpreters must satisfy.

    Implementations can be plain classes; no inheritance required.
    """

    def interpret(self, formula: ResolvedFormula) -> str: ...


class SubstitutionInterpreter:
    """Fill parent values into the formula text and return it."""

    def interpret(self, formula: ResolvedFormula) -> str:
        return formula.substituted()


class _NotArithmetic(Exception):
    """A parent value is neither a number nor an ISO date."""


def _to_operand(raw: str) -> Operand:
    text = raw.strip()
    try:
        number = float(text)
    except ValueError:
        pass
    else:
        return int(number) if number.is_integer() and "." not in text else number
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise _NotArithmetic(f"'{raw}' is neither a number nor an ISO date") from None


# -- date-aware operators ----------------------------------------------------


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, date) and isinstance(right, date):
        raise TypeError("cannot add two dates")
    if isinstance(left, date):
        return left + timedelta(days=right)
    if isinstance(right, date):
        return right + timedelta(days=left)
    return safe_add(left, right)


def _sub(left: Any, right: Any) -> Any:
    if isinstance(left, date) and isinstance(right, date):
        return (left - right).days
    if isinstance(left, date):
        return left - timedelta(days=right)
    return operator.sub(left, right)


def _power(base: Any, exponent: Any) -> Any:
    if abs(exponent) > MAX_EXPONENT:
        raise NumberTooHigh(f"Exponent {exponent} is larger than {MAX_EXPONENT}")
    return safe_power(base, exponent)


ARITHMETIC_OPERATORS: dict[type, Callable[..., Any]] = {
    ast.Add: _add,
    ast.Sub: _sub,
    ast.Mult: safe_mult,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: _power,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


def format_result(result: Operand) -> str:
    """Render a computed value: ISO dates, integral floats without ``.0``."""
    if isinstance(result, date):
        return result.isoformat()
    if isinstance(result, float):
        rounded = round(result, 10)
        if rounded.is_integer():
            return str(int(rounded))
        return str(rounded)
    return str(result)


class ArithmeticInterpreter:
    """Evaluate ``+ - * / // % **`` over numbers and ISO dates.

    ``date - date`` gives a day count; ``date + n`` / ``date - n`` shift by
    days.  Bare names that are not parent references raise
    :class:`UnresolvedFormulaReference`.  A formula whose parents are still
    empty evaluates to ``""``, as does one whose result is out of range.
    Formulas nested too deeply to evaluate raise
    :class:`FormulaEvaluationError`.
    """

    def interpret(self, formula: ResolvedFormula) -> str:
        if formula.is_empty:
            return ""
        if any(not ref.value.strip() for ref in formula.references.values()):
            return ""

        try:
            names = {
                placeholder: _to_operand(ref.value)
                for placeholder, ref in formula.references.items()
            }
        except _NotArithmetic as exc:
            logger.debug("Formula for field %s is free text: %s", formula.field_id, exc)
            return formula.substituted()

        evaluator = SimpleEval(operators=ARITHMETIC_OPERATORS, functions={}, names=names)
        try:
            result = evaluator.eval(formula.template.strip())
        except NameNotDefined as exc:
            raise UnresolvedFormulaReference(formula.field_id, exc.name) from None
        except (NumberTooHigh, ZeroDivisionError, OverflowError) as exc:
            logger.debug("Formula for field %s cannot be computed: %s", formula.field_id, exc)
            return ""
        except (RecursionError, MemoryError):
            raise FormulaEvaluationError(
                formula.field_id, "formula is too deeply nested"
            ) from None
        except (SyntaxError, InvalidExpression, IndexError, KeyError, TypeError) as exc:
            logger.debug("Formula for field %s is free text: %s", formula.field_id, exc)
            return formula.substituted()

        if isinstance(result, bool) or not isinstance(result, (int, float, date)):
            return formula.substituted()
        try:
            return format_result(result)
        except ValueError as exc:
            # int too large to render as a string
            logger.debug("Formula for field %s cannot be computed: %s", formula.field_id, exc)
            return ""


INTERPRETERS: dict[str, Callable[[], FormulaInterpreter]] = {
    "arithmetic": ArithmeticInterpreter,
    "substitution": SubstitutionInterpreter,
}


def get_interpreter(name: str) -> FormulaInterpreter:
    """Instantiate an interpreter by its configuration name."""
    try:
        return INTERPRETERS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown interpreter '{name}'. Available: {sorted(INTERPRETERS)}"
        ) from None
