"""
Clause builders for generated queries.

Each builder reads the normalized utterance and returns one optional
fragment (with its leading space) or an empty string.
"""

import re

from querylens.core.schema_model import SchemaModel
from querylens.translator.resolver import (
    TEXT_TYPES,
    find_column_by_name,
    find_column_by_type,
)


LIMIT_PATTERN = re.compile(r'limit\s+(\d+)', re.ASCII)
SORT_BY_PATTERN = re.compile(r'sort by\s+(\w+)', re.ASCII)

NO_LIMIT_WORDS = ('no limit', 'unlimited')
DESC_WORDS = ('desc', 'descending', 'reverse')
ALPHABETIC_WORDS = ('alphabetic', 'alphabetical', 'a-z')
ALPHABETIC_NAMES = ('title', 'name', 'lastname')

DEFAULT_LIMIT = 20


def normalize(utterance: str) -> str:
    """Lowercase and trim an utterance."""
    return (utterance or '').lower().strip()


def build_limit_clause(q: str, default_limit: int = DEFAULT_LIMIT) -> str:
    """LIMIT fragment: none when asked for, an explicit N, else the default."""
    if any(w in q for w in NO_LIMIT_WORDS):
        return ""
    match = LIMIT_PATTERN.search(q)
    if match:
        return f" LIMIT {match.group(1)}"
    return f" LIMIT {default_limit}"


def build_sort_clause(schema: SchemaModel, q: str, table: str) -> str:
    """
    ORDER BY fragment for a table.

    "sort by <word>" names a column directly; otherwise "a-z" style
    words sort on the table's main text column.
    """
    sort_col = None
    descending = any(w in q for w in DESC_WORDS)
    direction = "DESC" if descending else "ASC"

    match = SORT_BY_PATTERN.search(q)
    if match:
        sort_col = find_column_by_name(schema, table, [match.group(1)])

    if not sort_col and any(w in q for w in ALPHABETIC_WORDS):
        sort_col = find_column_by_type(schema, table, TEXT_TYPES, ALPHABETIC_NAMES)
        if not descending:
            direction = "ASC"

    if not sort_col and 'z-a' in q:
        sort_col = find_column_by_type(schema, table, TEXT_TYPES, ALPHABETIC_NAMES)
        direction = "DESC"

    return f" ORDER BY {sort_col} {direction}" if sort_col else ""
