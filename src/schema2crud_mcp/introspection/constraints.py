"""Value-domain recovery from declared enumerations and check constraints.

Check clauses are matched against three shapes of a single-column
"allowed values" expression:

- ``status IN ('draft', 'published')``
- ``status = ANY ((ARRAY['a'::varchar, 'b'::varchar])::text[])``
- ``status = ANY (ARRAY['a', 'b']::character varying[])``

Domains are ranked by an explicit priority list: declared enumeration,
then parsed check constraint, then boolean type inference.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, Final

from .constants import ConstraintKind, ConstraintSource
from .models import ConstraintMetadata

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .facts import ColumnDescriptor

_IN_LIST_RE: Final[re.Pattern[str]] = re.compile(r"\bIN\s*\(\s*([^)]+?)\s*\)", re.IGNORECASE)
_ANY_PAREN_ARRAY_RE: Final[re.Pattern[str]] = re.compile(
    r"=\s*ANY\s*\(\s*\(\s*ARRAY\s*\[\s*([^\]]+?)\s*\]\s*\)", re.IGNORECASE
)
_ANY_ARRAY_RE: Final[re.Pattern[str]] = re.compile(
    r"=\s*ANY\s*\(\s*ARRAY\s*\[\s*([^\]]+?)\s*\]", re.IGNORECASE
)
_CAST_RE: Final[re.Pattern[str]] = re.compile(r"::[\w\s]+(?:\[\])?")
_QUOTES_RE: Final[re.Pattern[str]] = re.compile(r"^['\"]|['\"]$")

BOOLEAN_TYPES: Final[frozenset[str]] = frozenset({"boolean", "bool"})
BOOLEAN_VALUES: Final[tuple[str, ...]] = ("true", "false")


@dataclass(frozen=True, slots=True)
class DomainPriority:
    """Named level in the domain decision list."""

    name: str
    kind: ConstraintKind
    provenance: ConstraintSource
    confidence: int


DECLARED_ENUM: Final = DomainPriority(
    "declared_enum", ConstraintKind.ENUM, ConstraintSource.POSTGRES_ENUM, 100
)
CHECK_CONSTRAINT: Final = DomainPriority(
    "check_constraint", ConstraintKind.CHECK_CONSTRAINT, ConstraintSource.CHECK_CONSTRAINT, 95
)
BOOLEAN_TYPE: Final = DomainPriority(
    "boolean_type", ConstraintKind.BOOLEAN, ConstraintSource.INFERENCE, 100
)
NO_DOMAIN: Final = DomainPriority("none", ConstraintKind.UNKNOWN, ConstraintSource.INFERENCE, 0)

# Highest priority first
DOMAIN_PRIORITIES: Final[tuple[DomainPriority, ...]] = (
    DECLARED_ENUM,
    CHECK_CONSTRAINT,
    BOOLEAN_TYPE,
)


def _clean_literal(raw: str) -> str:
    value = _CAST_RE.sub("", raw.strip()).strip()
    return _QUOTES_RE.sub("", value)


def _split_literals(body: str) -> list[str]:
    return [value for value in (_clean_literal(part) for part in body.split(",")) if value]


def extract_domain(check_clause: str | None) -> list[str] | None:
    """Recover the allowed values of a check clause.

    Args:
        check_clause: Check-constraint expression text

    Returns:
        Values in declaration order, or None when no known shape matches

    Example:
        >>> extract_domain("status IN ('draft', 'published')")
        ['draft', 'published']
        >>> extract_domain("x > 5") is None
        True
    """
    if not check_clause:
        return None

    for pattern in (_IN_LIST_RE, _ANY_PAREN_ARRAY_RE, _ANY_ARRAY_RE):
        match = pattern.search(check_clause)
        if match:
            values = _split_literals(match.group(1))
            return values or None
    return None


def is_boolean_column(column: ColumnDescriptor) -> bool:
    return column.data_type.lower() in BOOLEAN_TYPES or column.udt_name.lower() in BOOLEAN_TYPES


def select_domain(
    column: ColumnDescriptor,
    *,
    check_values: Sequence[str] | None = None,
    enum_values: Sequence[str] | None = None,
) -> tuple[DomainPriority, list[str]]:
    """Walk the priority list and return the first level that has values."""
    candidates: dict[str, list[str]] = {
        DECLARED_ENUM.name: list(enum_values or []),
        CHECK_CONSTRAINT.name: list(check_values or []),
        BOOLEAN_TYPE.name: list(BOOLEAN_VALUES) if is_boolean_column(column) else [],
    }
    for level in DOMAIN_PRIORITIES:
        values = candidates[level.name]
        if values:
            return level, values
    return NO_DOMAIN, []


def create_constraint_metadata(
    column: ColumnDescriptor,
    *,
    check_values: Sequence[str] | None = None,
    enum_values: Sequence[str] | None = None,
) -> ConstraintMetadata:
    """Combine declared and parsed domains into ConstraintMetadata.

    Args:
        column: Column the domain belongs to
        check_values: Values parsed from a check clause, if any
        enum_values: Labels of a declared enumeration, if any

    Returns:
        ConstraintMetadata whose confidence reflects the winning provenance
    """
    level, values = select_domain(column, check_values=check_values, enum_values=enum_values)
    return ConstraintMetadata(
        kind=level.kind,
        confidence_score=level.confidence,
        candidate_default=values[0] if values else None,
        provenance=level.provenance,
        values=values,
        nullable=column.nullable,
    )
