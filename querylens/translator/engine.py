"""
QueryLens - Free-text to SQL Translator
========================================
Rule-based translator that turns a free-text request into a single
read-only SQLite statement using only the loaded schema snapshot.

Pipeline:
    normalize -> primary table -> intent rules (first hit wins)
                                   -> filter / sort / limit clauses

Supports:
- "show books sort by title desc limit 5"
- "books under 20"
- "find rowling in author"
- "how many authors"
- "newest orders", "oldest book"
- "most expensive products"

The search term and numeric literal are copied into the statement
as typed. Read-only enforcement happens where statements execute.
"""

import logging
import re
from typing import Any, Callable, List, Mapping, Optional, Union

from querylens.config import TranslatorConfig
from querylens.core.schema_model import SchemaModel
from querylens.translator.clauses import build_limit_clause, build_sort_clause, normalize
from querylens.translator.resolver import (
    NUMERIC_TYPES,
    TEMPORAL_TYPES,
    TEXT_TYPES,
    find_column_by_name,
    find_column_by_type,
    find_primary_table,
)

logger = logging.getLogger(__name__)


HELP_SQL = (
    "SELECT 'Try asking: \"Show all books\", \"Count authors\", "
    "\"Newest orders\", or \"Find Rowling in Author\"' as \"Help\";"
)
CATALOG_COUNT_SQL = "SELECT count(*) as TotalTables FROM sqlite_master WHERE type='table';"
CATALOG_LIST_SQL = (
    "SELECT name as TableName FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite_%';"
)

COMPARISON_PATTERN = re.compile(
    r'(under|less than|below|over|more than|above|cheaper than)\s+(\d+)',
    re.ASCII,
)
LESS_THAN_WORDS = ('under', 'less than', 'below', 'cheaper than')

SHOW_PREFIXES = ('show', 'list', 'get', 'select')
COUNT_WORDS = ('count', 'how many')
OLDEST_WORDS = ('oldest', 'first')
NEWEST_WORDS = ('newest', 'latest', 'recent')
PRICE_WORDS = ('expensive', 'cost', 'price')

NUMERIC_NAMES = ('price', 'cost', 'amount', 'quantity', 'total')
SEARCH_NAMES = ('title', 'name', 'firstname', 'lastname', 'description', 'bio')
TEMPORAL_NAMES = ('year', 'date', 'time', 'created')
PRICE_NAMES = ('price', 'cost', 'amount')

SchemaInput = Union[SchemaModel, Mapping[str, Any], None]


class LocalTranslator:
    """
    Translates free text into SQL against one schema snapshot.

    The snapshot is replaced wholesale by set_schema; translate only
    reads it, so each instance can serve its own database.
    """

    def __init__(self, schema: SchemaInput = None, config: Optional[TranslatorConfig] = None):
        self.config = config or TranslatorConfig()
        self._schema = SchemaModel()
        self.set_schema(schema)

    @property
    def schema(self) -> SchemaModel:
        return self._schema

    def set_schema(self, schema: SchemaInput):
        """Replace the held snapshot."""
        if schema is None:
            schema = SchemaModel()
        elif not isinstance(schema, SchemaModel):
            schema = SchemaModel.from_dict(schema)
        self._schema = schema
        logger.debug(f"Translator schema set: {schema.table_names}")

    def translate(self, utterance: str) -> str:
        """
        Translate a free-text request into a SQL statement.

        Args:
            utterance: Raw text from the user

        Returns:
            A single statement ending in ";". Falls back to listing the
            tables when nothing else applies.
        """
        schema = self._schema
        q = normalize(utterance)
        primary = find_primary_table(schema, q)

        rules: List[Callable[[SchemaModel, str, Optional[str]], Optional[str]]] = [
            self._help,
            self._numeric_filter,
            self._find,
            self._show,
            self._count,
            self._oldest,
            self._newest,
            self._most_expensive,
            self._table_fallback,
        ]
        for rule in rules:
            sql = rule(schema, q, primary)
            if sql:
                logger.debug(f"{rule.__name__.lstrip('_')} rule matched {q!r}")
                return sql

        return CATALOG_LIST_SQL

    def _limit(self, q: str) -> str:
        return build_limit_clause(q, self.config.default_limit)

    def _help(self, schema, q, primary):
        if q == 'help' or 'what can you do' in q:
            return HELP_SQL
        return None

    def _numeric_filter(self, schema, q, primary):
        match = COMPARISON_PATTERN.search(q)
        if not match or not primary:
            return None

        column = find_column_by_type(schema, primary, NUMERIC_TYPES, NUMERIC_NAMES)
        if not column:
            return None

        operator = '<' if match.group(1) in LESS_THAN_WORDS else '>'
        sort = build_sort_clause(schema, q, primary)
        if not sort:
            sort = f" ORDER BY {column} {'DESC' if operator == '>' else 'ASC'}"
        return (
            f'SELECT * FROM "{primary}" WHERE {column} {operator} {match.group(2)}'
            f'{sort}{self._limit(q)};'
        )

    def _find(self, schema, q, primary):
        if 'find' not in q:
            return None

        if primary:
            table = primary
            term = q
            for keyword in ('find', 'in', table.lower()):
                term = re.sub(rf'\b{re.escape(keyword)}\b', '', term)
            term = term.strip()
        else:
            table = self._infer_search_table(schema)
            term = q.replace('find', '').strip()

        if not table:
            return None

        column = find_column_by_type(schema, table, TEXT_TYPES, SEARCH_NAMES)
        if not column or not term:
            return None

        return (
            f"SELECT * FROM \"{table}\" WHERE {column} LIKE '%{term}%'"
            f"{build_sort_clause(schema, q, table)}{self._limit(q)};"
        )

    def _infer_search_table(self, schema: SchemaModel) -> Optional[str]:
        for name in self.config.find_fallback_tables:
            if name in schema:
                return name
        names = schema.table_names
        return names[0] if names else None

    def _show(self, schema, q, primary):
        if primary and q.startswith(SHOW_PREFIXES):
            return self._select_all(schema, q, primary)
        return None

    def _count(self, schema, q, primary):
        if not any(w in q for w in COUNT_WORDS):
            return None
        if primary:
            return f'SELECT COUNT(*) as Total FROM "{primary}";'
        return CATALOG_COUNT_SQL

    def _oldest(self, schema, q, primary):
        if primary and any(w in q for w in OLDEST_WORDS):
            column = find_column_by_type(schema, primary, TEMPORAL_TYPES, TEMPORAL_NAMES)
            if column:
                return f'SELECT * FROM "{primary}" ORDER BY {column} ASC LIMIT 1;'
        return None

    def _newest(self, schema, q, primary):
        if primary and any(w in q for w in NEWEST_WORDS):
            column = find_column_by_type(schema, primary, TEMPORAL_TYPES, TEMPORAL_NAMES)
            if column:
                return (
                    f'SELECT * FROM "{primary}" ORDER BY {column} DESC '
                    f'LIMIT {self.config.recent_limit};'
                )
        return None

    def _most_expensive(self, schema, q, primary):
        if not any(w in q for w in PRICE_WORDS):
            return None
        candidates = [primary] if primary else schema.table_names
        for table in candidates:
            column = find_column_by_name(schema, table, PRICE_NAMES)
            if column:
                return f'SELECT * FROM "{table}" ORDER BY {column} DESC{self._limit(q)};'
        return None

    def _table_fallback(self, schema, q, primary):
        if primary:
            return self._select_all(schema, q, primary)
        return None

    def _select_all(self, schema: SchemaModel, q: str, table: str) -> str:
        return f'SELECT * FROM "{table}"{build_sort_clause(schema, q, table)}{self._limit(q)};'
