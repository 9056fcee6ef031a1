"""DuckDB warehouse for report results."""
