"""
Statement and result types shared by the demo steps.

A step is a flat list of statements; building it never touches Snowflake, so
the same list can be rendered to a .sql script or executed by the runner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True, slots=True)
class Statement:
    sql: str
    comment: Optional[str] = None
    section: Optional[str] = None

    def render(self) -> str:
        text = self.sql.strip().rstrip(";")
        if self.comment:
            return f"-- {self.comment}\n{text};"
        return f"{text};"


@dataclass(slots=True)
class StatementResult:
    statement: Statement
    rows: List[tuple] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    query_id: Optional[str] = None
    rowcount: Optional[int] = None
    elapsed_ms: float = 0.0
    # Set when the statement failed and the step carried on
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dicts(self) -> List[dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]


@dataclass(slots=True)
class StepResult:
    step: str
    results: List[StatementResult] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def failures(self) -> List[StatementResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures

    @property
    def executed(self) -> int:
        """Statements that succeeded."""
        return sum(1 for r in self.results if r.ok)
