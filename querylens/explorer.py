"""
Explorer session.

Ties the open database, its schema snapshot and the translator
together behind the two front ends: the direct query box and the
free-text box.
"""

import logging
from typing import List, Optional

from querylens.config import QueryLensConfig, DatabaseConfig
from querylens.core.connection import (
    DatabaseConnectionError,
    DatabaseConnectionManager,
    QueryResult,
)
from querylens.core.schema_model import SchemaModel
from querylens.core.schema_scanner import SchemaScanner
from querylens.translator.engine import LocalTranslator

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD = "Could not understand the query."
QUICK_SELECT_LIMIT = 50


class QueryExplorer:
    """
    One open database with its translator.

    Every (re)open rescans the schema and hands the new snapshot to
    the translator, replacing whatever it knew before.
    """

    def __init__(self, config: QueryLensConfig):
        self.config = config
        self.translator = LocalTranslator(config=config.translator)
        self.conn_manager: Optional[DatabaseConnectionManager] = None
        self.last_sql: Optional[str] = None

    @property
    def schema(self) -> SchemaModel:
        return self.translator.schema

    @property
    def tables(self) -> List[str]:
        return self.schema.table_names

    def open(self) -> SchemaModel:
        """Connect to the configured database and load its schema."""
        return self._load(self.config.database)

    def refresh(self) -> SchemaModel:
        """Rescan the schema and replace the translator's snapshot."""
        if self.conn_manager is None:
            return self.open()
        schema = SchemaScanner(self.conn_manager).scan()
        self.translator.set_schema(schema)
        logger.info(f"Loaded schema with {len(schema)} tables")
        return schema

    def switch_database(self, db_path: Optional[str]) -> SchemaModel:
        """
        Open a different database file in place of the current one.

        The current database stays open and loaded if the new one
        cannot be opened or scanned.
        """
        logger.info(f"Switching database to {db_path or ':memory:'}")
        current = self.config.database
        return self._load(DatabaseConfig(
            db_path=db_path,
            read_only=current.read_only,
            max_rows=current.max_rows,
            connection_timeout=current.connection_timeout,
        ))

    def _load(self, db_config: DatabaseConfig) -> SchemaModel:
        """Open and scan a database, then make it the current one."""
        manager = DatabaseConnectionManager(db_config)
        try:
            if not manager.test_connection():
                raise DatabaseConnectionError(
                    f"Failed to open database {db_config.db_path or ':memory:'}"
                )
            schema = SchemaScanner(manager).scan()
        except Exception:
            manager.close()
            raise

        self.close()
        self.conn_manager = manager
        self.config.database = db_config
        self.translator.set_schema(schema)
        logger.info(f"Loaded schema with {len(schema)} tables")
        return schema

    def quick_select_sql(self, table: str) -> str:
        """Starter query for a table, newest rows first by its first column."""
        table_data = self.schema.get_table(table)
        first_col = table_data.columns[0].name if table_data and table_data.columns else "rowid"
        return f'SELECT * FROM "{table}"\nORDER BY {first_col} DESC\nLIMIT {QUICK_SELECT_LIMIT};'

    def quick_select(self, table: Optional[str] = None) -> Optional[QueryResult]:
        """
        Run the starter query for a table.

        Args:
            table: Table to preview, defaults to the first table

        Returns:
            None when the database has no tables
        """
        if self.conn_manager is None:
            self.open()
        if table is None:
            if not self.tables:
                return None
            table = self.tables[0]
        return self.run_sql(self.quick_select_sql(table))

    def run_sql(self, sql: str) -> QueryResult:
        """Execute a statement from the query box."""
        if self.conn_manager is None:
            self.open()
        self.last_sql = sql
        result = self.conn_manager.execute(sql)
        if not result.success:
            logger.debug(f"Query failed: {result.error}")
        return result

    def ask(self, utterance: str) -> Optional[QueryResult]:
        """
        Translate free text and execute the generated statement.

        Returns:
            None for blank input, otherwise the execution result
        """
        if not utterance or not utterance.strip():
            return None

        try:
            sql = self.translator.translate(utterance)
        except Exception as e:
            logger.error(f"Translation failed for {utterance!r}: {e}")
            self.last_sql = None
            return QueryResult(success=False, sql="", error=NOT_UNDERSTOOD)

        return self.run_sql(sql)

    def close(self):
        """Close the current database."""
        if self.conn_manager:
            self.conn_manager.close()
            self.conn_manager = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
