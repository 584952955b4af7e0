"""
Database Connection Manager

Opens the SQLite database being explored and executes statements
from either front end, enforcing read-only access at this boundary.
"""

from dataclasses import dataclass, field
from typing import Optional, Any, List, Tuple, Generator
from contextlib import contextmanager
import logging
import re
import time

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, Connection
from sqlalchemy.exc import SQLAlchemyError

from querylens.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Custom exception for database connection errors."""
    pass


@dataclass
class QueryResult:
    """Result of executing a SQL statement."""
    success: bool
    sql: str
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    row_count: int = 0
    execution_time_ms: float = 0.0
    error: Optional[str] = None


class DatabaseConnectionManager:
    """
    Manages the connection to the database being explored.

    Statements are validated before they reach the driver: generated
    free-text queries interpolate user text, so write statements and
    stacked statements are refused here when read-only is on.
    """

    UNSAFE_PATTERNS = [
        re.compile(r'\b(INSERT|UPDATE|DELETE|DROP|ALTER|CREATE|TRUNCATE)\b', re.I),
        re.compile(r'\bREPLACE\s+INTO\b', re.I),
        re.compile(r'\b(ATTACH|DETACH)\b', re.I),
    ]

    # String literals and quoted identifiers, with doubled quotes as escapes
    QUOTED_PATTERN = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")

    def __init__(self, config: DatabaseConfig):
        """
        Initialize the connection manager.

        Args:
            config: Database configuration object
        """
        self.config = config
        self._engine: Optional[Engine] = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine for the configured database."""
        connection_string = self.config.get_connection_string()
        try:
            engine = create_engine(
                connection_string,
                connect_args={"timeout": self.config.connection_timeout},
            )
            logger.info(f"Created database engine for {self.config.db_path or ':memory:'}")
            return engine
        except Exception as e:
            raise DatabaseConnectionError(f"Failed to create engine: {e}")

    @contextmanager
    def get_connection(self) -> Generator[Connection, None, None]:
        """
        Get a database connection as a context manager.

        Example:
            with manager.get_connection() as conn:
                result = conn.exec_driver_sql(query)
        """
        connection = None
        try:
            connection = self.engine.connect()
            yield connection
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise DatabaseConnectionError(f"Connection error: {e}") from e
        finally:
            if connection:
                connection.close()

    def test_connection(self) -> bool:
        """
        Test the database connection.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            with self.get_connection() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection test successful")
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    def validate_sql(self, sql: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a statement for read-only execution.

        Returns: (is_safe, error_message)
        """
        if not sql or not sql.strip():
            return False, "Empty statement."

        if not self.config.read_only:
            return True, None

        # Keywords and semicolons inside quotes are data, not SQL
        code = self.QUOTED_PATTERN.sub("''", sql)

        for pattern in self.UNSAFE_PATTERNS:
            if pattern.search(code):
                return False, "Write operations are not allowed. Only read queries are permitted."

        statements = [s.strip() for s in code.split(';') if s.strip()]
        if len(statements) > 1:
            return False, "Only a single SQL statement is allowed."

        return True, None

    def execute(self, sql: str) -> QueryResult:
        """
        Execute a statement and capture rows or the error.

        Args:
            sql: SQL statement as typed or generated

        Returns:
            QueryResult with results or error
        """
        is_safe, error = self.validate_sql(sql)
        if not is_safe:
            logger.warning(f"Rejected statement: {error}")
            return QueryResult(success=False, sql=sql, error=error)

        start = time.time()
        try:
            with self.get_connection() as conn:
                result = conn.exec_driver_sql(sql)
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = [list(row) for row in result.fetchmany(self.config.max_rows)]
                else:
                    columns, rows = [], []
                if not self.config.read_only:
                    conn.commit()
        except (DatabaseConnectionError, SQLAlchemyError) as e:
            elapsed = (time.time() - start) * 1000
            cause = e.__cause__ or e
            message = str(getattr(cause, "orig", None) or cause)
            logger.debug(f"Statement failed: {message}")
            return QueryResult(
                success=False,
                sql=sql,
                execution_time_ms=round(elapsed, 2),
                error=message,
            )

        elapsed = (time.time() - start) * 1000
        return QueryResult(
            success=True,
            sql=sql,
            columns=columns,
            rows=rows,
            row_count=len(rows),
            execution_time_ms=round(elapsed, 2),
        )

    def get_table_names(self) -> List[str]:
        """Get user tables in catalog order."""
        with self.get_connection() as conn:
            result = conn.exec_driver_sql(
                "SELECT name FROM sqlite_master "
                "WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row[0] for row in result.fetchall()]

    def close(self):
        """Dispose of the engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
