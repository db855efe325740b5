"""Query execution package."""

from finance_monitor.queries.executor import QueryExecutionError, QueryExecutor, format_money

__all__ = ["QueryExecutionError", "QueryExecutor", "format_money"]
