"""
Schema Model

Lightweight structural snapshot of a database: tables, their columns
and foreign keys. Snapshots are immutable and keep tables and columns
in the order the database declared them.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Iterator, Mapping, Tuple


@dataclass(frozen=True)
class Column:
    """A single column descriptor."""
    name: str
    data_type: str = ""  # Declared type as written, may be empty
    is_primary_key: bool = False


@dataclass(frozen=True)
class ForeignKey:
    """Referential metadata for one constrained column."""
    source_column: str
    target_table: str
    target_column: str


@dataclass(frozen=True)
class Table:
    """A table with its columns in declaration order."""
    name: str
    columns: Tuple[Column, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def primary_key(self) -> List[str]:
        return [c.name for c in self.columns if c.is_primary_key]

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by exact name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None


class SchemaModel:
    """
    Immutable snapshot of a database schema.

    Table enumeration order is insertion order, which every resolver
    relies on for "first match wins".
    """

    def __init__(self, tables: Optional[Mapping[str, Table]] = None):
        self._tables: Dict[str, Table] = dict(tables or {})

    @classmethod
    def from_tables(cls, tables: List[Table]) -> "SchemaModel":
        return cls({t.name: t for t in tables})

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SchemaModel":
        """
        Build a snapshot from the collaborator mapping format.

        Args:
            data: {table: {"columns": [{"name", "type", "primary_key"}],
                           "foreign_keys": [{"source_column", "target_table",
                                             "target_column"}]}}

        Missing or null entries are read as empty so that a malformed
        table simply never matches anything.
        """
        tables: Dict[str, Table] = {}
        for table_name, table_data in (data or {}).items():
            table_data = table_data or {}

            columns = []
            for col in table_data.get("columns") or []:
                if not col or not col.get("name"):
                    continue
                columns.append(Column(
                    name=str(col["name"]),
                    data_type=str(col.get("type") or ""),
                    is_primary_key=bool(col.get("primary_key", False)),
                ))

            foreign_keys = []
            for fk in table_data.get("foreign_keys") or []:
                if not fk:
                    continue
                foreign_keys.append(ForeignKey(
                    source_column=str(fk.get("source_column", "")),
                    target_table=str(fk.get("target_table", "")),
                    target_column=str(fk.get("target_column", "")),
                ))

            name = str(table_name)
            tables[name] = Table(
                name=name,
                columns=tuple(columns),
                foreign_keys=tuple(foreign_keys),
            )
        return cls(tables)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the snapshot back to the collaborator mapping format."""
        return {
            table.name: {
                "columns": [
                    {"name": c.name, "type": c.data_type, "primary_key": c.is_primary_key}
                    for c in table.columns
                ],
                "foreign_keys": [
                    {
                        "source_column": fk.source_column,
                        "target_table": fk.target_table,
                        "target_column": fk.target_column,
                    }
                    for fk in table.foreign_keys
                ],
            }
            for table in self._tables.values()
        }

    @property
    def table_names(self) -> List[str]:
        return list(self._tables.keys())

    @property
    def is_empty(self) -> bool:
        return not self._tables

    def get_table(self, name: str) -> Optional[Table]:
        """Get a table by exact name."""
        return self._tables.get(name)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the snapshot."""
        tables = list(self._tables.values())
        return {
            "total_tables": len(tables),
            "total_columns": sum(len(t.columns) for t in tables),
            "total_foreign_keys": sum(len(t.foreign_keys) for t in tables),
            "tables_with_primary_key": sum(1 for t in tables if t.primary_key),
        }

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaModel):
            return NotImplemented
        return list(self._tables.items()) == list(other._tables.items())

    def __repr__(self) -> str:
        return f"SchemaModel(tables={self.table_names!r})"
