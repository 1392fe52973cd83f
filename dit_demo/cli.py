#!/usr/bin/env python3
"""
Command line entry point for the Dynamic Iceberg Tables demo.

Usage:
    dit-demo list
    dit-demo render --output-dir sql/
    dit-demo run setup source-tables dynamic-tables
    dit-demo run cleanup storage-cleanup
    dit-demo refresh order_details_dit
    dit-demo history order_details_dit --limit 5
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from dit_demo.config import settings
from dit_demo.connectors import snowflake_pool
from dit_demo.core.context import DemoContext
from dit_demo.core.demo_runner import STEPS, render_steps, run_steps
from dit_demo.core.sql import first_line
from dit_demo.core.statements import StepResult
from dit_demo.core.steps import leftover_storage_paths
from dit_demo.error_handling import DemoError, demo_error

logger = logging.getLogger("dit_demo")

TABLE_ACTIONS = ("refresh", "suspend", "resume", "status", "history")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )
    # Suppress verbose Snowflake connector internals (handshake details)
    logging.getLogger("snowflake.connector").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dit-demo",
        description="Provision, exercise and tear down the Dynamic Iceberg Tables demo.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List the demo steps.")

    render = sub.add_parser("render", help="Write the steps as .sql scripts.")
    render.add_argument(
        "steps", nargs="*", help="Steps to render (default: all)."
    )
    render.add_argument(
        "--output-dir", type=Path, default=Path("sql"), help="Output directory."
    )

    run = sub.add_parser("run", help="Execute steps against Snowflake.")
    run.add_argument(
        "steps",
        nargs="*",
        help="Steps to run, or 'all' (default: every non-destructive step).",
    )
    run.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Record failed statements and keep going (exit status 1 if any failed).",
    )
    run.add_argument(
        "--show-rows",
        action="store_true",
        help="Print the rows returned by each query.",
    )

    for action in TABLE_ACTIONS:
        cmd = sub.add_parser(action, help=f"{action.title()} a dynamic Iceberg table.")
        cmd.add_argument("table", help="Dynamic table name.")
        if action == "history":
            cmd.add_argument("--limit", type=int, default=10)

    return parser


def _print_rows(columns: list[str], rows: list[Any]) -> None:
    if columns:
        print("  " + " | ".join(columns))
    for row in rows:
        if isinstance(row, dict):
            row = list(row.values())
        print("  " + " | ".join("" if v is None else str(v) for v in row))


def _report(results: list[StepResult], ctx: DemoContext, show_rows: bool) -> None:
    """Print a line per step, failed statements and, after cleanup, leftover paths."""
    for step_result in results:
        if step_result.error is not None:
            print(f"❌ {step_result.step}: stopped after {step_result.executed} statements")
        elif step_result.failures:
            print(
                f"⚠️  {step_result.step}: {step_result.executed} statements, "
                f"{len(step_result.failures)} failed"
            )
        else:
            print(f"✅ {step_result.step}: {step_result.executed} statements")

        for res in step_result.failures:
            print(f"   ✗ {first_line(res.statement.sql)}: {res.error}")
        if show_rows:
            for res in step_result.results:
                if res.rows:
                    print(f"\n-- {first_line(res.statement.sql)}")
                    _print_rows(res.columns, res.rows)

    # Dropping tables and the volume never deletes the data files
    if any(r.step == "cleanup" for r in results):
        print("\nData files remain in object storage under:")
        for path in leftover_storage_paths(ctx):
            print(f"  - {path}")
        print("Run the storage-cleanup step to remove them.")


async def _run(args: argparse.Namespace) -> int:
    pool = snowflake_pool.get_default_pool()
    ctx = DemoContext.from_settings(pool)
    try:
        results = await run_steps(
            ctx, pool, args.steps, continue_on_error=args.continue_on_error
        )
    except DemoError as e:
        _report(e.results, ctx, args.show_rows)
        raise
    finally:
        await snowflake_pool.close_default_pool()

    _report(results, ctx, args.show_rows)
    return 1 if any(r.failures for r in results) else 0


async def _table_action(args: argparse.Namespace) -> int:
    pool = snowflake_pool.get_default_pool()
    ctx = DemoContext.from_settings(pool)
    try:
        mgr = ctx.dynamic(args.table)
        # INFORMATION_SCHEMA table functions need a current warehouse
        for statement in ctx.infrastructure.context_statements():
            await pool.execute_query(statement.sql)

        if args.command == "status":
            if not await mgr.table_exists():
                print(f"❌ {mgr.get_full_table_name()} does not exist", file=sys.stderr)
                return 1
            stats = await mgr.get_table_stats()
            state = await mgr.scheduling_state()
            print(
                f"{mgr.table_name}: {state or 'UNKNOWN'}, "
                f"rows={stats.get('row_count', 'n/a')}"
            )
            return 0
        if args.command == "history":
            rows = await mgr.refresh_history(limit=args.limit)
            _print_rows(list(rows[0].keys()) if rows else [], rows)
            return 0
        ok = await getattr(mgr, args.command)()
        return 0 if ok else 1
    finally:
        await snowflake_pool.close_default_pool()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "list":
        for step in STEPS:
            marker = " (destructive)" if step.destructive else ""
            print(f"{step.number}. {step.name:<16} {step.title}{marker}")
        return 0

    if args.command == "render":
        ctx = DemoContext.from_settings()
        written = render_steps(ctx, args.output_dir, args.steps)
        print(f"✅ Wrote {len(written)} scripts to {args.output_dir}")
        return 0

    try:
        if args.command == "run":
            return asyncio.run(_run(args))
        return asyncio.run(_table_action(args))
    except DemoError as e:
        print(f"❌ {e}", file=sys.stderr)
        if e.hint:
            print(f"   Hint: {e.hint}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        return 2
    except Exception as e:
        err = demo_error(args.command, e)
        print(f"❌ {err}", file=sys.stderr)
        if err.hint:
            print(f"   Hint: {err.hint}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
