"""
Column mapping domain logic for the Laravel CRUD generator.

Maps Laravel validation-rule strings to migration column specs. Rules are
treated as token sets: ``nullable|integer`` and ``integer|nullable`` give the
same column. Unknown tokens are ignored.
"""

from typing import FrozenSet, List, Mapping

from ..constants import RULE_TOKEN_COLUMN_TYPES, ColumnTypes, RuleTokens
from .models import ColumnSpec


def rule_tokens(rule: str) -> FrozenSet[str]:
    """
    Return the token names of a rule string.

    Parameters are dropped, so ``required|string|max:255`` gives
    ``{"required", "string", "max"}``. Matching is case-sensitive.
    """
    tokens = set()
    for token in rule.split(RuleTokens.SEPARATOR):
        token = token.strip()
        if token:
            tokens.add(token.split(RuleTokens.PARAMETER_SEPARATOR, 1)[0])
    return frozenset(tokens)


def column_type_for(tokens: FrozenSet[str]) -> str:
    """First entry of the ordered type table present in ``tokens``, else string."""
    for token, column_type in RULE_TOKEN_COLUMN_TYPES:
        if token in tokens:
            return column_type
    return ColumnTypes.DEFAULT


def map_column(field: str, rule: str) -> ColumnSpec:
    """
    Map one schema field to a migration column.

    Example:
        >>> map_column("age", "nullable|integer")
        ColumnSpec(name='age', sql_type='integer', nullable=True)
    """
    tokens = rule_tokens(rule)
    return ColumnSpec(
        name=field,
        sql_type=column_type_for(tokens),
        nullable=RuleTokens.NULLABLE in tokens,
    )


def map_columns(schema: Mapping[str, str]) -> List[ColumnSpec]:
    """Map every field of a schema, keeping the schema's field order."""
    return [map_column(field, rule) for field, rule in schema.items()]
