"""Filtering strategy resolution.

Maps a column and its semantic kind to the query predicates it supports.
Lookup order: semantic kind table, catalog type table, substring heuristics
on the raw type, then the `unknown` fallback. The resolver is total.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .constants import Constants, FieldKind, Predicate
from .models import FilteringStrategy

if TYPE_CHECKING:
    from .facts import ColumnDescriptor

P = Predicate

DATE_STRATEGY: Final = FilteringStrategy(
    category="date", allowed_predicates=(P.EQUALS, P.RANGE), format="date"
)
DATETIME_STRATEGY: Final = FilteringStrategy(
    category="datetime", allowed_predicates=(P.EQUALS, P.RANGE), format="date-time"
)
TIME_STRATEGY: Final = FilteringStrategy(
    category="time", allowed_predicates=(P.EQUALS, P.RANGE), format="time"
)
INTEGER_STRATEGY: Final = FilteringStrategy(
    category="numeric", allowed_predicates=(P.EQUALS, P.RANGE, P.IN_ARRAY)
)
DECIMAL_STRATEGY: Final = FilteringStrategy(
    category="numeric", allowed_predicates=(P.EQUALS, P.RANGE)
)
STRING_STRATEGY: Final = FilteringStrategy(
    category="string",
    allowed_predicates=(P.EQUALS, P.CONTAINS, P.STARTS_WITH, P.ENDS_WITH),
)
CHAR_STRATEGY: Final = FilteringStrategy(
    category="string", allowed_predicates=(P.EQUALS, P.CONTAINS)
)
LONG_TEXT_STRATEGY: Final = FilteringStrategy(
    category="text", allowed_predicates=(P.CONTAINS, P.FULLTEXT)
)
BOOLEAN_STRATEGY: Final = FilteringStrategy(
    category="boolean", allowed_predicates=(P.EQUALS, P.NULL_CHECK)
)
UUID_STRATEGY: Final = FilteringStrategy(
    category="uuid", allowed_predicates=(P.EQUALS, P.IN_ARRAY, P.NULL_CHECK)
)
ENUM_STRATEGY: Final = FilteringStrategy(
    category="enum", allowed_predicates=(P.EQUALS, P.IN_ARRAY, P.NOT_IN_ARRAY)
)
FOREIGN_KEY_STRATEGY: Final = FilteringStrategy(
    category="foreign_key", allowed_predicates=(P.EQUALS, P.IN_ARRAY, P.NULL_CHECK)
)
UNKNOWN_STRATEGY: Final = FilteringStrategy(category="unknown", allowed_predicates=(P.EQUALS,))

FIELD_FILTERING_STRATEGIES: Final[dict[FieldKind, FilteringStrategy]] = {
    FieldKind.DATE: DATE_STRATEGY,
    FieldKind.TIMESTAMP: DATETIME_STRATEGY,
    FieldKind.TIMESTAMPTZ: DATETIME_STRATEGY,
    FieldKind.TIME: TIME_STRATEGY,
    FieldKind.NUMBER: INTEGER_STRATEGY,
    FieldKind.DECIMAL: DECIMAL_STRATEGY,
    FieldKind.BIGINT: INTEGER_STRATEGY,
    FieldKind.VARCHAR: STRING_STRATEGY,
    FieldKind.CHAR: CHAR_STRATEGY,
    FieldKind.TEXTAREA: LONG_TEXT_STRATEGY,
    FieldKind.BOOLEAN: BOOLEAN_STRATEGY,
    FieldKind.UUID: UUID_STRATEGY,
    FieldKind.ENUM_SELECT: ENUM_STRATEGY,
    FieldKind.FOREIGN_KEY_DROPDOWN: FOREIGN_KEY_STRATEGY,
}

# Substring heuristics on the raw type, checked in order
_TYPE_SUBSTRING_STRATEGIES: Final[tuple[tuple[tuple[str, ...], FilteringStrategy], ...]] = (
    (("timestamp", "date"), DATETIME_STRATEGY),
    (("int", "numeric", "decimal"), INTEGER_STRATEGY),
    (("varchar", "text", "char"), STRING_STRATEGY),
    (("bool",), BOOLEAN_STRATEGY),
    (("uuid",), UUID_STRATEGY),
)


def resolve_strategy(column: ColumnDescriptor, field_kind: FieldKind | str) -> FilteringStrategy:
    """Resolve the filtering strategy for a column.

    Args:
        column: Physical column descriptor
        field_kind: Semantic kind; unrecognized values are accepted

    Returns:
        A strategy that always allows at least one predicate
    """
    try:
        kind = FieldKind(field_kind)
    except ValueError:
        kind = None

    if kind is not None and kind in FIELD_FILTERING_STRATEGIES:
        return FIELD_FILTERING_STRATEGIES[kind]

    data_type = (column.data_type or "").lower()
    udt_name = (column.udt_name or "").lower()

    mapped = Constants.TYPE_MAPPING.get(data_type) or Constants.TYPE_MAPPING.get(udt_name)
    if mapped is not None and mapped in FIELD_FILTERING_STRATEGIES:
        return FIELD_FILTERING_STRATEGIES[mapped]

    for needles, strategy in _TYPE_SUBSTRING_STRATEGIES:
        if any(needle in data_type for needle in needles):
            return strategy

    return UNKNOWN_STRATEGY
