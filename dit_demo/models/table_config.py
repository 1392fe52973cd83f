"""
Table Configuration Models

Defines Pydantic models for the demo's Iceberg objects:
- Source Iceberg tables (columns, storage location)
- Dynamic Iceberg tables (defining query, target lag, immutability hint)
"""

import re
from datetime import timedelta
from enum import Enum
from typing import Optional, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

MIN_TARGET_LAG = timedelta(seconds=60)
DOWNSTREAM = "DOWNSTREAM"

_LAG_RE = re.compile(r"^\s*(\d+)\s+(second|minute|hour|day)s?\s*$", re.IGNORECASE)
_LAG_UNITS = {
    "second": "seconds",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
}

# Functions whose value moves with wall-clock time. A predicate built on them
# matches a region that can shrink (e.g. `order_date > CURRENT_DATE() - 7`).
_CLOCK_FUNCTIONS_RE = re.compile(
    r"\b(CURRENT_DATE|CURRENT_TIMESTAMP|CURRENT_TIME|LOCALTIMESTAMP|LOCALTIME|"
    r"SYSDATE|SYSTIMESTAMP|GETDATE|NOW)\b",
    re.IGNORECASE,
)
_STRING_LITERAL_RE = re.compile(r"'(?:[^']|'')*'")


class TableType(str, Enum):
    """Supported table types."""

    ICEBERG = "iceberg"
    DYNAMIC_ICEBERG = "dynamic_iceberg"


def parse_target_lag(value: str) -> Optional[timedelta]:
    """
    Parse a TARGET_LAG value.

    Accepts "<n> seconds|minutes|hours|days" (singular or plural) or
    DOWNSTREAM, which returns None.

    Raises:
        ValueError: malformed value or a lag below one minute
    """
    if value.strip().upper() == DOWNSTREAM:
        return None

    match = _LAG_RE.match(value)
    if not match:
        raise ValueError(
            f"Invalid target lag {value!r}; expected '<n> minutes' or DOWNSTREAM"
        )

    amount = int(match.group(1))
    lag = timedelta(**{_LAG_UNITS[match.group(2).lower()]: amount})
    if lag < MIN_TARGET_LAG:
        raise ValueError(f"Target lag {value!r} is below the 1 minute minimum")
    return lag


def validate_immutability_predicate(predicate: str) -> str:
    """
    Check an IMMUTABLE WHERE predicate.

    The set of rows a predicate matches must only grow over time. Status
    predicates (order_status = 'COMPLETED') and fixed cutoffs
    (order_date < '2024-01-01') qualify; anything relative to the current
    clock does not.

    Returns:
        The stripped predicate

    Raises:
        ValueError: empty predicate or one that references a clock function
    """
    text = (predicate or "").strip()
    if not text:
        raise ValueError("Immutability predicate must not be empty")

    # Ignore quoted literals so 'CURRENT_DATE' as a value is allowed.
    unquoted = _STRING_LITERAL_RE.sub("''", text)
    match = _CLOCK_FUNCTIONS_RE.search(unquoted)
    if match:
        raise ValueError(
            f"Immutability predicate uses {match.group(1).upper()}; the immutable "
            "region would shrink as time passes. Use a status value or a fixed cutoff."
        )
    return text


class TableConfig(BaseModel):
    """
    Configuration for an Iceberg table managed by the demo.

    Dynamic Iceberg tables additionally carry their defining query, a
    target lag, the refresh warehouse and an optional immutability predicate.
    """

    name: str = Field(..., description="Table name")
    table_type: TableType = Field(..., description="Type of table")
    description: Optional[str] = Field(None, description="What the table holds")

    # Schema definition (ordered)
    columns: Dict[str, str] = Field(
        ..., description="Column definitions (name -> type)"
    )

    # Database/schema location
    database: Optional[str] = Field(None, description="Database name")
    schema_name: Optional[str] = Field(None, description="Schema name")

    # Iceberg storage
    external_volume: str = Field(..., description="External volume name")
    catalog: str = Field("SNOWFLAKE", description="Iceberg catalog")
    base_location: Optional[str] = Field(
        None, description="Path under the external volume (defaults to '<name>/')"
    )

    # Dynamic table settings
    target_lag: Optional[str] = Field(None, description="Freshness target")
    warehouse: Optional[str] = Field(None, description="Refresh warehouse")
    query: Optional[str] = Field(None, description="Defining SELECT")
    immutable_where: Optional[str] = Field(
        None, description="Predicate for rows that never change"
    )

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v):
        if not v:
            raise ValueError("At least one column is required")
        return v

    @field_validator("target_lag")
    @classmethod
    def validate_target_lag(cls, v):
        if v is not None:
            parse_target_lag(v)
        return v

    @field_validator("immutable_where")
    @classmethod
    def validate_immutable_where(cls, v):
        if v is not None:
            return validate_immutability_predicate(v)
        return v

    @model_validator(mode="after")
    def validate_table_requirements(self):
        """Validate table type-specific requirements."""
        if self.base_location is None:
            self.base_location = f"{self.name}/"

        if self.table_type == TableType.DYNAMIC_ICEBERG:
            missing = [
                field
                for field in ("target_lag", "warehouse", "query")
                if not getattr(self, field)
            ]
            if missing:
                raise ValueError(
                    f"Dynamic Iceberg tables require: {', '.join(missing)}"
                )
        else:
            extra = [
                field
                for field in ("target_lag", "query", "immutable_where")
                if getattr(self, field)
            ]
            if extra:
                raise ValueError(
                    f"Only dynamic Iceberg tables accept: {', '.join(extra)}"
                )

        return self

    @property
    def is_dynamic(self) -> bool:
        return self.table_type == TableType.DYNAMIC_ICEBERG

    class Config:
        use_enum_values = True
