"""DuckDB warehouse for report results.

a merged report is just a table, and once it's local you often want to slice
it further - top pages per country, week-over-week, that kind of thing. rather
than writing that logic against lists of tuples we load the report into duckdb
and let sql do it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

import duckdb

from reportforge.models.report import Column, ReportData

# python column type -> duckdb column type
DUCKDB_TYPES: dict[type, str] = {
    int: "BIGINT",
    float: "DOUBLE",
    Decimal: "DECIMAL(18, 4)",
    date: "DATE",
    str: "VARCHAR",
}


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _python_type(value: Any) -> type:
    if isinstance(value, bool):
        return str
    if isinstance(value, datetime):
        return date
    for py_type in (int, float, Decimal, date):
        if isinstance(value, py_type):
            return py_type
    return str


class ReportWarehouse:
    """Load ReportData into duckdb and query it with sql."""

    def __init__(self, database_path: str | None = None) -> None:
        """Initialize the warehouse.

        Args:
            database_path: Path to DuckDB file, or None for in-memory.
        """
        self.database_path = database_path
        self._conn: duckdb.DuckDBPyConnection | None = None  # lazy init

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(self.database_path or ":memory:")
        return self._conn

    def load(self, table_name: str, data: ReportData) -> None:
        """Create (or replace) table_name from a report.

        column types follow the report's inferred types, so an integer metric
        stays an integer in sql.
        """
        if not data.columns:
            raise ValueError("Cannot create a table from a report with no columns")

        col_defs = ", ".join(
            f"{_quote(c.name)} {DUCKDB_TYPES.get(c.type, 'VARCHAR')}" for c in data.columns
        )
        self.conn.execute(f"CREATE OR REPLACE TABLE {_quote(table_name)} ({col_defs})")

        if data.rows:
            placeholders = ", ".join(["?"] * len(data.columns))
            self.conn.executemany(
                f"INSERT INTO {_quote(table_name)} VALUES ({placeholders})",
                [list(row) for row in data.rows],
            )

    def execute(self, sql: str) -> ReportData:
        """Run sql and return the result as a ReportData.

        duckdb's description doesn't map cleanly onto python types, so column
        types come from the first non-null value in each column.
        """
        result = self.conn.execute(sql)
        names = [desc[0] for desc in result.description]
        rows = result.fetchall()

        columns = []
        for index, name in enumerate(names):
            sample = next((row[index] for row in rows if row[index] is not None), None)
            columns.append(Column(name=name, type=_python_type(sample)))

        return ReportData(columns=columns, rows=rows)

    def table_exists(self, table_name: str) -> bool:
        result = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        )
        return result.fetchone()[0] > 0

    def get_table_schema(self, table_name: str) -> list[tuple[str, str]]:
        """Get column names and duckdb types for a table."""
        result = self.conn.execute(f"DESCRIBE {_quote(table_name)}")
        return [(row[0], row[1]) for row in result.fetchall()]

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ReportWarehouse":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
