"""Business-rule derivation and the per-table error-code taxonomy.

Rules come from a small fixed catalog matched against each column's
semantic kind and name. Error codes are derived from the table's unique
constraints, inbound foreign keys and the derived rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .constants import NUMERIC_KINDS, TEMPORAL_KINDS, FieldKind
from .models import BusinessRule
from .utils import error_code_token

if TYPE_CHECKING:
    from .models import EnrichedColumn, ForeignKeyReference, UniqueConstraints


@dataclass(frozen=True, slots=True)
class RulePattern:
    """One entry of the rule catalog.

    A column matches when its kind is in `kinds` and, if `name_keywords` is
    non-empty, its name contains one of the keywords.
    """

    rule_type: str
    kinds: frozenset[FieldKind]
    error_code: str
    message: str
    name_keywords: tuple[str, ...] = ()

    def matches(self, column: EnrichedColumn) -> bool:
        if column.field_kind not in self.kinds:
            return False
        if not self.name_keywords:
            return True
        col_name = column.name.lower()
        return any(keyword in col_name for keyword in self.name_keywords)


RULE_CATALOG: Final[tuple[RulePattern, ...]] = (
    RulePattern(
        rule_type="not_future_date",
        kinds=TEMPORAL_KINDS,
        error_code="FUTURE_DATE",
        message="{field} cannot be in the future",
        name_keywords=("birth", "dob", "born"),
    ),
    RulePattern(
        rule_type="positive_number",
        kinds=NUMERIC_KINDS,
        error_code="MUST_BE_POSITIVE",
        message="{field} must be a positive number",
        name_keywords=("price", "amount", "quantity", "qty", "cost", "fee", "salary"),
    ),
    RulePattern(
        rule_type="email_format",
        kinds=frozenset({FieldKind.EMAIL}),
        error_code="INVALID_EMAIL",
        message="{field} must be a valid email address",
    ),
    RulePattern(
        rule_type="url_format",
        kinds=frozenset({FieldKind.URL}),
        error_code="INVALID_URL",
        message="{field} must be a valid URL",
    ),
    RulePattern(
        rule_type="phone_format",
        kinds=frozenset({FieldKind.PHONE}),
        error_code="INVALID_PHONE",
        message="{field} must be a valid phone number",
    ),
)


def derive_rules(columns: list[EnrichedColumn]) -> list[BusinessRule]:
    """Emit every matching rule for every column, in column order."""
    return [
        BusinessRule(
            field=column.name,
            rule_type=pattern.rule_type,
            message=pattern.message.format(field=column.name),
            error_code=pattern.error_code,
        )
        for column in columns
        for pattern in RULE_CATALOG
        if pattern.matches(column)
    ]


def generate_error_codes(
    table_name: str,
    *,
    unique_constraints: UniqueConstraints,
    foreign_key_references: list[ForeignKeyReference],
    business_rules: list[BusinessRule],
) -> dict[str, str]:
    """Derive the table's error-code map.

    Keys are symbolic reasons, values are `<TABLE>_<REASON>` identifiers.

    Example:
        >>> codes = generate_error_codes(
        ...     "users",
        ...     unique_constraints=UniqueConstraints(single_field=["email"]),
        ...     foreign_key_references=[],
        ...     business_rules=[],
        ... )
        >>> codes["DUPLICATE_EMAIL"]
        'USERS_DUPLICATE_EMAIL'
    """
    prefix = error_code_token(table_name)
    codes: dict[str, str] = {}

    def add(key: str) -> None:
        codes.setdefault(key, f"{prefix}_{key}")

    add("NOT_FOUND")
    add("VALIDATION_ERROR")

    for field in unique_constraints.single_field:
        add(f"DUPLICATE_{error_code_token(field)}")

    for fields in unique_constraints.composite:
        key = f"DUPLICATE_{'_'.join(error_code_token(f) for f in fields)}"
        if key in codes:
            key = f"DUPLICATE_{'_AND_'.join(error_code_token(f) for f in fields)}"
        add(key)

    if foreign_key_references:
        add("CANNOT_DELETE_HAS_REFERENCES")
        for reference in foreign_key_references:
            add(f"CANNOT_DELETE_HAS_{error_code_token(reference.table)}")

    for rule in business_rules:
        add(f"{rule.error_code}_{error_code_token(rule.field)}")

    return codes
