"""Formula reference resolution.

Authors refer to parent fields inside a formula either in braces
(``{Birth Year}``, ``{1712345678901}``) or bare (``100 - Age``).  Bare
references match parent labels and ids on word boundaries, longest first;
ids made only of digits must be braced so they cannot be confused with
numeric literals.  A leading ``"<own label> ="`` is dropped, so
``Age = Current Year - Birth Year`` and ``Current Year - Birth Year`` mean
the same thing.

Resolution turns the formula into a template whose references are
placeholder identifiers, plus the value bound to each placeholder.  What
the template *means* is up to a :mod:`~formsmith.derivation.interpreters`
strategy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ..core.exceptions import UnresolvedFormulaReference
from ..schemas.field import FieldDefinition

_BRACED = r"\{([^{}]+)\}"
_ASSIGNMENT = re.compile(r"^\s*([^=]+?)\s*=(?!=)\s*(.*)$", re.DOTALL)
_PLACEHOLDER_PREFIX = "fs_ref"


@dataclass(frozen=True)
class FormulaReference:
    """One parent field referenced by a formula."""

    placeholder: str
    field_id: str
    token: str
    value: str


@dataclass(frozen=True)
class ResolvedFormula:
    """A formula with every parent reference bound to a value.

    Attributes:
        field_id: The derived field owning the formula.
        template: Formula text with references replaced by placeholders.
        references: placeholder -> bound reference, in order of first use.
    """

    field_id: str
    template: str
    references: dict[str, FormulaReference] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.template.strip()

    def value_of(self, placeholder: str) -> Optional[str]:
        ref = self.references.get(placeholder)
        return ref.value if ref is not None else None

    def substituted(self) -> str:
        """The formula text with every reference replaced by its value."""
        if not self.references:
            return self.template
        pattern = re.compile("|".join(re.escape(p) for p in self.references))
        return pattern.sub(lambda m: self.references[m.group(0)].value, self.template)


def strip_assignment(field_def: FieldDefinition, formula: str) -> str:
    """Drop a leading ``"<label> ="`` naming the field itself."""
    match = _ASSIGNMENT.match(formula)
    if match is None:
        return formula
    target = match.group(1).strip().strip("{}").strip()
    own_names = {field_def.id}
    if field_def.label:
        own_names.add(field_def.label.strip())
    if target in own_names:
        return match.group(2)
    return formula


def _bare_pattern(lookup: Mapping[str, FieldDefinition]) -> Optional[str]:
    names = [name for name in lookup if not name.isdigit()]
    if not names:
        return None
    names.sort(key=len, reverse=True)
    alternation = "|".join(re.escape(name) for name in names)
    return rf"(?<!\w)({alternation})(?!\w)"


def resolve_formula(
    field_def: FieldDefinition,
    parents: Sequence[FieldDefinition],
    parent_values: Mapping[str, str],
) -> ResolvedFormula:
    """Bind every parent reference in *field_def*'s formula.

    Args:
        field_def: The derived field.
        parents: Its parent definitions, in declared order.
        parent_values: Resolved value per parent id (missing means ``""``).

    Raises:
        UnresolvedFormulaReference: A braced reference matches no parent.
    """
    # Labels win over ids when both spell the same text
    lookup: dict[str, FieldDefinition] = {}
    for parent in parents:
        lookup.setdefault(parent.id, parent)
    for parent in parents:
        label = parent.label.strip()
        if label:
            lookup[label] = parent

    formula = strip_assignment(field_def, field_def.formula)
    references: dict[str, FormulaReference] = {}
    by_field: dict[str, str] = {}

    def bind(token: str) -> str:
        parent = lookup.get(token)
        if parent is None:
            raise UnresolvedFormulaReference(field_def.id, token)
        placeholder = by_field.get(parent.id)
        if placeholder is None:
            placeholder = f"{_PLACEHOLDER_PREFIX}{len(by_field)}_"
            by_field[parent.id] = placeholder
            references[placeholder] = FormulaReference(
                placeholder=placeholder,
                field_id=parent.id,
                token=token,
                value=parent_values.get(parent.id, "") or "",
            )
        return placeholder

    bare = _bare_pattern(lookup)
    pattern = re.compile(f"{_BRACED}|{bare}" if bare else _BRACED)

    def replace(match: re.Match) -> str:
        braced = match.group(1)
        if braced is not None:
            return bind(braced.strip())
        return bind(match.group(2))

    template = pattern.sub(replace, formula)
    return ResolvedFormula(field_id=field_def.id, template=template, references=references)


def is_placeholder(name: str) -> bool:
    return name.startswith(_PLACEHOLDER_PREFIX) and name.endswith("_")
