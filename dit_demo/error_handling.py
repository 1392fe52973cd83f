"""
Centralized error classification for demo steps.

Turns Snowflake connector failures into actionable messages so that, for
example, a VPN / network policy problem is not reported as a broken demo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    code: str
    message: str
    hint: str | None = None
    debug: str | None = None


class DemoError(Exception):
    """A demo step failed; carries the classified error and the statement."""

    def __init__(self, step: str, info: ErrorInfo, statement: str | None = None):
        super().__init__(f"{step}: {info.message}")
        self.step = step
        self.info = info
        self.statement = statement
        # Step results collected before the failure (set by the runner)
        self.results: list = []

    @property
    def code(self) -> str:
        return self.info.code

    @property
    def hint(self) -> str | None:
        return self.info.hint


def classify_snowflake_error(exc: BaseException) -> ErrorInfo | None:
    """
    Classify Snowflake connector failures into user-actionable errors.

    Uses string matching because connector exception types vary
    (OperationalError/ProgrammingError/DatabaseError) for the same cause.
    """

    msg = str(exc)
    lower = msg.lower()

    # Snowflake network policy / VPN / IP allowlist failure.
    if ("ip/token" in lower and "not allowed" in lower) or (
        "is not allowed to access snowflake" in lower
    ):
        return ErrorInfo(
            code="SNOWFLAKE_IP_NOT_ALLOWED",
            message="Snowflake access blocked by network policy (VPN / IP allowlist).",
            hint="Connect to your VPN (or allowlist your current IP in Snowflake), then retry.",
            debug=msg,
        )

    # Generic connection failure (covers many 08001 cases).
    if "failed to connect to db" in lower or "(08001)" in lower:
        return ErrorInfo(
            code="SNOWFLAKE_CONNECTION_FAILED",
            message="Failed to connect to Snowflake.",
            hint="Check network access and the SNOWFLAKE_ACCOUNT identifier, then retry.",
            debug=msg,
        )

    if "incorrect username or password" in lower or "(28000)" in lower:
        return ErrorInfo(
            code="SNOWFLAKE_AUTH_FAILED",
            message="Snowflake rejected the credentials.",
            hint="Check SNOWFLAKE_USER / SNOWFLAKE_PASSWORD.",
            debug=msg,
        )

    if "immutable" in lower and ("shrink" in lower or "reduc" in lower):
        return ErrorInfo(
            code="IMMUTABILITY_REGION_SHRANK",
            message="The immutability predicate would shrink the immutable region.",
            hint=(
                "Predicates may only grow the immutable region: use a status value "
                "(order_status = 'COMPLETED') or a fixed cutoff date."
            ),
            debug=msg,
        )

    if "backfill" in lower or (
        "not supported" in lower
        and ("dynamic" in lower or "iceberg" in lower)
    ):
        return ErrorInfo(
            code="UNSUPPORTED_OPERATION",
            message="Operation is not supported for dynamic Iceberg tables.",
            hint="BACKFILL FROM and ALTER ... IMMUTABLE are not available for dynamic Iceberg tables.",
            debug=msg,
        )

    if "external volume" in lower and (
        "does not exist" in lower or "not authorized" in lower
    ):
        return ErrorInfo(
            code="EXTERNAL_VOLUME_UNAVAILABLE",
            message="The external volume is missing or not accessible.",
            hint="Run the setup step and check the storage role/trust policy for the volume.",
            debug=msg,
        )

    if "insufficient privileges" in lower:
        return ErrorInfo(
            code="INSUFFICIENT_PRIVILEGES",
            message="The current role lacks a required privilege.",
            hint="Use a role with CREATE DATABASE / CREATE WAREHOUSE (or ACCOUNTADMIN).",
            debug=msg,
        )

    if ("expression type does not match" in lower) or (
        "numeric value" in lower and "is not recognized" in lower
    ) or ("cannot be cast" in lower):
        return ErrorInfo(
            code="TYPE_MISMATCH",
            message="A value does not match its column type.",
            hint="Cast default or literal values to the declared column type.",
            debug=msg,
        )

    return None


def demo_error(step: str, exc: BaseException, statement: str | None = None) -> DemoError:
    """
    Convert an exception raised while running a step into a DemoError.
    """
    logger.error("Step '%s' failed: %s", step, exc)

    info = classify_snowflake_error(exc)
    if info is None:
        info = ErrorInfo(
            code="STATEMENT_FAILED",
            message=f"{type(exc).__name__}: {exc}",
            debug=str(exc),
        )
    return DemoError(step, info, statement)
