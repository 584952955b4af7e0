"""
Schema Resolver

Maps loose text cues onto concrete table and column names. Every
lookup is greedy: the first match in schema order wins.
"""

from typing import Optional, Sequence, List

from querylens.core.schema_model import SchemaModel, Column


TEXT_TYPES = ('TEXT', 'VARCHAR')
NUMERIC_TYPES = ('INTEGER', 'REAL', 'NUMERIC', 'FLOAT')
TEMPORAL_TYPES = ('DATE', 'DATETIME', 'INTEGER')

# Name fragments that mark surrogate or identifier columns
IDENTIFIER_HINTS = ('id', 'isbn', 'code')


def find_table(schema: SchemaModel, word: str) -> Optional[str]:
    """
    Resolve one lowercase token to a table name.

    Tries an exact case-insensitive match, then the token with a
    single trailing "s" removed.
    """
    if not word:
        return None

    for name in schema.table_names:
        if name.lower() == word:
            return name

    if word.endswith('s'):
        singular = word[:-1]
        for name in schema.table_names:
            if name.lower() == singular:
                return name

    return None


def find_primary_table(schema: SchemaModel, utterance: str) -> Optional[str]:
    """Return the table named by the first token that resolves to one."""
    for word in utterance.split():
        table = find_table(schema, word)
        if table:
            return table
    return None


def _columns(schema: SchemaModel, table: Optional[str]) -> Sequence[Column]:
    table_data = schema.get_table(table) if table else None
    if table_data is None:
        return ()
    return table_data.columns


def _type_matches(column: Column, types: Sequence[str]) -> bool:
    declared = (column.data_type or '').upper()
    return bool(declared) and any(t in declared for t in types)


def _name_matches(column: Column, keywords: Sequence[str]) -> bool:
    name = column.name.lower()
    return any(k in name for k in keywords)


def find_column_by_type(
    schema: SchemaModel,
    table: Optional[str],
    types: Sequence[str],
    priority_names: Sequence[str] = (),
) -> Optional[str]:
    """
    Pick the column that best represents a kind of value.

    Args:
        schema: Schema snapshot
        table: Table to search
        types: Declared-type fragments that qualify a column (uppercase)
        priority_names: Name fragments that make a qualifying column win outright

    Returns:
        Column name, or None when no column has a qualifying type
    """
    cols = _columns(schema, table)

    if priority_names:
        for col in cols:
            if _type_matches(col, types) and _name_matches(col, priority_names):
                return col.name

    candidates: List[Column] = [c for c in cols if _type_matches(c, types)]
    if not candidates:
        return None

    for col in candidates:
        if not _name_matches(col, IDENTIFIER_HINTS):
            return col.name
    return candidates[0].name


def find_column_by_name(
    schema: SchemaModel,
    table: Optional[str],
    keywords: Sequence[str],
) -> Optional[str]:
    """Return the first column whose lowercase name contains any keyword."""
    for col in _columns(schema, table):
        if _name_matches(col, keywords):
            return col.name
    return None
