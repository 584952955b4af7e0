"""Core modules for QueryLens."""

from querylens.core.schema_model import SchemaModel, Table, Column, ForeignKey
from querylens.core.connection import DatabaseConnectionManager, DatabaseConnectionError, QueryResult
from querylens.core.schema_scanner import SchemaScanner

__all__ = [
    "SchemaModel",
    "Table",
    "Column",
    "ForeignKey",
    "DatabaseConnectionManager",
    "DatabaseConnectionError",
    "QueryResult",
    "SchemaScanner",
]
