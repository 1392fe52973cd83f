"""
Demo Step Runner

Ordered registry of the demo steps. Each step builds a statement list from
the DemoContext; the runner either renders it as a numbered .sql script or
executes it sequentially through the connection pool.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from dit_demo.core.context import DemoContext
from dit_demo.core.immutability import immutability_statements
from dit_demo.core.operations import operations_statements
from dit_demo.core.sql import first_line
from dit_demo.core.statements import Statement, StatementResult, StepResult
from dit_demo.core.steps import (
    cleanup_statements,
    dynamic_table_statements,
    setup_statements,
    source_table_statements,
)
from dit_demo.core.storage_cleanup import storage_cleanup_statements
from dit_demo.error_handling import DemoError, demo_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DemoStep:
    number: int
    name: str
    title: str
    build: Callable[[DemoContext], List[Statement]]
    destructive: bool = False

    @property
    def script_name(self) -> str:
        return f"{self.number:02d}_{self.name.replace('-', '_')}.sql"


STEPS: List[DemoStep] = [
    DemoStep(1, "setup", "Setup", setup_statements),
    DemoStep(2, "source-tables", "Source Tables", source_table_statements),
    DemoStep(3, "dynamic-tables", "Dynamic Iceberg Tables", dynamic_table_statements),
    DemoStep(4, "operations", "Operations & Monitoring", operations_statements),
    DemoStep(5, "immutability", "Immutability", immutability_statements),
    DemoStep(6, "cleanup", "Cleanup", cleanup_statements, destructive=True),
    DemoStep(
        7,
        "storage-cleanup",
        "Object Storage Cleanup",
        storage_cleanup_statements,
        destructive=True,
    ),
]

STEPS_BY_NAME: Dict[str, DemoStep] = {s.name: s for s in STEPS}

# Steps run by default; teardown only when asked for
DEFAULT_STEPS = [s.name for s in STEPS if not s.destructive]


def get_step(name: str) -> DemoStep:
    try:
        return STEPS_BY_NAME[name]
    except KeyError:
        raise KeyError(
            f"Unknown step '{name}'. Available: {', '.join(STEPS_BY_NAME)}"
        ) from None


def resolve_steps(names: Optional[Sequence[str]] = None) -> List[DemoStep]:
    """
    Resolve step names into registry order.

    None means the default (non-destructive) steps; "all" means every step.
    """
    if not names:
        names = DEFAULT_STEPS
    if "all" in names:
        return list(STEPS)
    wanted = {get_step(n).name for n in names}
    return [s for s in STEPS if s.name in wanted]


def render_step(step: DemoStep, ctx: DemoContext) -> str:
    """Render a step as a commented SQL script."""
    banner = "=" * 77
    lines = [
        f"/*{banner}",
        f"  Dynamic Iceberg Tables Demo - {step.title}",
        f"{banner}*/",
        "",
    ]
    section = None
    for statement in step.build(ctx):
        if statement.section and statement.section != section:
            section = statement.section
            lines += [f"/*{'-' * 77}", f"  {section.upper()}", f"{'-' * 77}*/", ""]
        lines += [statement.render(), ""]
    return "\n".join(lines)


def render_steps(
    ctx: DemoContext,
    output_dir: Path,
    names: Optional[Sequence[str]] = None,
) -> List[Path]:
    """
    Write numbered .sql scripts for the selected steps.

    Steps whose configuration is incomplete (ValueError while building) are
    skipped with a warning.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for step in resolve_steps(names or ["all"]):
        try:
            script = render_step(step, ctx)
        except ValueError as e:
            logger.warning(f"Skipping {step.name}: {e}")
            continue
        path = output_dir / step.script_name
        path.write_text(script)
        written.append(path)
        logger.info(f"✅ Wrote {path}")
    return written


async def run_step(
    step: DemoStep,
    ctx: DemoContext,
    pool,
    *,
    continue_on_error: bool = False,
) -> StepResult:
    """
    Execute a step's statements in order.

    The first failure stops the step (and is recorded on the result) unless
    continue_on_error is set; failed statements are then recorded with their
    error and the step carries on.
    """
    result = StepResult(step=step.name)

    try:
        statements = step.build(ctx)
    except ValueError as e:
        result.error = demo_error(step.name, e)
        return result

    total = len(statements)
    logger.info(f"▶️  Step {step.number} '{step.name}': {total} statements")

    for idx, statement in enumerate(statements, 1):
        logger.info(f"[{idx}/{total}] {first_line(statement.sql)}")
        started = time.monotonic()
        try:
            rows, info = await pool.execute_query_with_info(statement.sql)
        except Exception as e:
            err = demo_error(step.name, e, statement.sql)
            if not continue_on_error:
                result.error = err
                return result
            logger.warning(f"  ✗ {err.info.message} (continuing)")
            result.results.append(StatementResult(statement=statement, error=err))
            continue

        result.results.append(
            StatementResult(
                statement=statement,
                rows=list(rows or []),
                columns=list(info.get("columns") or []),
                query_id=info.get("query_id"),
                rowcount=info.get("rowcount"),
                elapsed_ms=(time.monotonic() - started) * 1000.0,
            )
        )
        logger.debug(f"  ✓ {len(rows or [])} rows, query_id={info.get('query_id')}")

    if result.failures:
        logger.warning(
            f"⚠️  Step '{step.name}' finished with {len(result.failures)} failed statements"
        )
    else:
        logger.info(f"✅ Step '{step.name}' complete ({result.executed}/{total})")
    return result


async def run_steps(
    ctx: DemoContext,
    pool,
    names: Optional[Sequence[str]] = None,
    *,
    continue_on_error: bool = False,
) -> List[StepResult]:
    """
    Run the selected steps in registry order.

    Statement failures under continue_on_error are kept on the step results
    and do not stop the run.

    Raises:
        DemoError: a step failed; its `results` holds every step result
            collected so far, the failed step last
    """
    results: List[StepResult] = []
    for step in resolve_steps(names):
        step_result = await run_step(
            step, ctx, pool, continue_on_error=continue_on_error
        )
        results.append(step_result)
        if step_result.error is not None:
            err = step_result.error
            if not isinstance(err, DemoError):
                err = demo_error(step.name, err)
            err.results = results
            raise err
    return results
