"""
Tests for classifying Snowflake failures into actionable demo errors.
"""

import pytest

from dit_demo.error_handling import DemoError, classify_snowflake_error, demo_error


@pytest.mark.parametrize(
    "message, code",
    [
        (
            "250001 (08001): Failed to connect to DB: IP/Token 1.2.3.4 is not allowed",
            "SNOWFLAKE_IP_NOT_ALLOWED",
        ),
        ("250001 (08001): Failed to connect to DB: acct.snowflakecomputing.com", "SNOWFLAKE_CONNECTION_FAILED"),
        ("250001 (28000): Incorrect username or password was specified.", "SNOWFLAKE_AUTH_FAILED"),
        ("Immutable region cannot shrink after refresh", "IMMUTABILITY_REGION_SHRANK"),
        ("BACKFILL FROM is not supported for dynamic Iceberg tables", "UNSUPPORTED_OPERATION"),
        ("External volume 'DT_ICE_EXT_VOLUME' does not exist or not authorized.", "EXTERNAL_VOLUME_UNAVAILABLE"),
        ("003001 (42501): SQL access control error: Insufficient privileges", "INSUFFICIENT_PRIVILEGES"),
        ("Expression type does not match column data type, expecting NUMBER", "TYPE_MISMATCH"),
        ("Numeric value 'abc' is not recognized", "TYPE_MISMATCH"),
    ],
)
def test_classification(message, code):
    info = classify_snowflake_error(RuntimeError(message))
    assert info is not None
    assert info.code == code
    assert info.hint
    assert info.debug == message


def test_unclassified_returns_none():
    assert classify_snowflake_error(RuntimeError("SQL compilation error: syntax")) is None


def test_demo_error_fallback():
    err = demo_error("operations", RuntimeError("syntax error line 1"), "SELECT 1")
    assert isinstance(err, DemoError)
    assert err.code == "STATEMENT_FAILED"
    assert err.hint is None
    assert err.statement == "SELECT 1"
    assert str(err) == "operations: RuntimeError: syntax error line 1"


def test_demo_error_keeps_classification():
    err = demo_error("setup", RuntimeError("Insufficient privileges to operate on account"))
    assert err.step == "setup"
    assert err.code == "INSUFFICIENT_PRIVILEGES"
    assert "ACCOUNTADMIN" in err.hint
