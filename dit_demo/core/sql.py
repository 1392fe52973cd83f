"""
SQL text helpers shared by the statement builders.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence


class SqlExpression(str):
    """Raw SQL emitted without quoting (e.g. CURRENT_DATE())."""


CURRENT_DATE = SqlExpression("CURRENT_DATE()")
CURRENT_TIMESTAMP = SqlExpression("CURRENT_TIMESTAMP()")


def quote_literal(value: Any) -> str:
    """Render a Python value as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, SqlExpression):
        return str(value)
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return f"'{value.strftime('%Y-%m-%d %H:%M:%S')}'"
    if isinstance(value, date):
        return f"'{value.isoformat()}'"
    text = str(value).replace("'", "''")
    return f"'{text}'"


def qualify(*parts: Optional[str]) -> str:
    """Join non-empty name parts: database.schema.object."""
    return ".".join(p for p in parts if p)


def values_clause(rows: Iterable[Sequence[Any]], indent: str = "    ") -> str:
    """Render rows as the body of a VALUES list, one tuple per line."""
    lines = [
        f"{indent}({', '.join(quote_literal(v) for v in row)})" for row in rows
    ]
    if not lines:
        raise ValueError("VALUES clause needs at least one row")
    return ",\n".join(lines)


def first_line(statement: str, width: int = 80) -> str:
    """First non-empty line of a statement, trimmed for log output."""
    for line in statement.strip().splitlines():
        if line.strip():
            return line.strip()[:width]
    return ""
