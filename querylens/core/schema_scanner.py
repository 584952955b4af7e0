"""
Schema Scanner

Extracts the schema snapshot the translator works from: tables in
catalog order, columns in declaration order, primary keys and
foreign keys.
"""

from typing import Dict, List, Optional, Any
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Inspector

from querylens.core.connection import DatabaseConnectionManager
from querylens.core.schema_model import SchemaModel, Table, Column, ForeignKey

logger = logging.getLogger(__name__)


class SchemaScanner:
    """
    Builds a SchemaModel from a live database.

    Table order comes from the catalog rather than the inspector,
    which sorts names alphabetically.
    """

    def __init__(self, connection_manager: DatabaseConnectionManager):
        """
        Initialize the schema scanner.

        Args:
            connection_manager: Database connection manager
        """
        self.conn_manager = connection_manager
        self._inspector: Optional[Inspector] = None

    @property
    def inspector(self) -> Inspector:
        """Get SQLAlchemy inspector."""
        if self._inspector is None:
            self._inspector = inspect(self.conn_manager.engine)
        return self._inspector

    def scan(self) -> SchemaModel:
        """
        Perform a complete schema scan.

        Returns:
            A fresh SchemaModel snapshot
        """
        logger.info("Starting schema scan...")

        table_names = self.conn_manager.get_table_names()
        logger.info(f"Found {len(table_names)} tables to scan")

        tables = []
        for table_name in table_names:
            try:
                tables.append(self._scan_table(table_name))
                logger.debug(f"Scanned table: {table_name}")
            except Exception as e:
                logger.error(f"Error scanning table {table_name}: {e}")
                tables.append(Table(name=table_name))

        schema = SchemaModel.from_tables(tables)
        logger.info(f"Schema scan complete. Scanned {len(schema)} tables.")
        return schema

    def _scan_table(self, table_name: str) -> Table:
        """Scan a single table."""
        columns = tuple(self._get_columns(table_name))

        foreign_keys = []
        for fk in self._get_foreign_keys(table_name):
            referred_table = fk.get("referred_table") or ""
            pairs = zip(fk.get("constrained_columns", []), fk.get("referred_columns", []))
            for source, target in pairs:
                foreign_keys.append(ForeignKey(
                    source_column=source,
                    target_table=referred_table,
                    target_column=target,
                ))

        return Table(name=table_name, columns=columns, foreign_keys=tuple(foreign_keys))

    def _get_columns(self, table_name: str) -> List[Column]:
        """
        Get columns with their declared types as written.

        The inspector maps declared types onto SQLite affinities
        (INT -> INTEGER, STRING -> NUMERIC), so the raw table_info
        rows are read instead.
        """
        quoted = table_name.replace('"', '""')
        with self.conn_manager.get_connection() as conn:
            rows = conn.exec_driver_sql(f'PRAGMA table_info("{quoted}")').fetchall()

        # table_info rows: cid, name, type, notnull, dflt_value, pk
        return [
            Column(
                name=row[1],
                data_type=row[2] or "",
                is_primary_key=bool(row[5]),
            )
            for row in rows
        ]

    def _get_foreign_keys(self, table_name: str) -> List[Dict[str, Any]]:
        """Get foreign key information for a table."""
        try:
            return self.inspector.get_foreign_keys(table_name)
        except Exception as e:
            logger.warning(f"Could not get foreign keys for {table_name}: {e}")
            return []
