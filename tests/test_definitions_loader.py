"""
Tests for the YAML table definitions and their loader.
"""

from pathlib import Path

import pytest

from dit_demo.core.definitions_loader import (
    DEFAULT_DEFINITIONS_FILE,
    DefinitionsLoader,
)
from dit_demo.models import TableType


def test_default_definitions_file_is_packaged():
    assert DEFAULT_DEFINITIONS_FILE.exists()
    assert DEFAULT_DEFINITIONS_FILE.suffix == ".yaml"


def test_source_tables(loader):
    sources = loader.source_tables()
    assert [t.name for t in sources] == ["products_staging", "orders_staging"]
    assert all(t.table_type == TableType.ICEBERG.value for t in sources)
    assert all(t.warehouse is None for t in sources)
    assert list(sources[1].columns)[:3] == ["order_id", "customer_id", "product_id"]
    assert sources[0].external_volume == "dt_ice_ext_volume"
    assert sources[0].base_location == "products_staging/"


def test_dynamic_tables_in_creation_order(loader):
    names = [t.name for t in loader.dynamic_tables()]
    assert names == [
        "order_details_dit",
        "product_sales_summary_dit",
        "regional_sales_dit",
        "order_analytics_immutable_dit",
        "sales_fixed_cutoff_dit",
    ]


def test_target_lags(loader):
    lags = {t.name: t.target_lag for t in loader.dynamic_tables()}
    assert lags == {
        "order_details_dit": "10 minutes",
        "product_sales_summary_dit": "20 minutes",
        "regional_sales_dit": "30 minutes",
        "order_analytics_immutable_dit": "5 minutes",
        "sales_fixed_cutoff_dit": "10 minutes",
    }


def test_groups(loader):
    core = loader.dynamic_tables(group="core")
    immutable = loader.dynamic_tables(group="immutability")
    assert len(core) == 3
    assert all(t.immutable_where is None for t in core)
    assert [t.immutable_where for t in immutable] == [
        "order_status = 'COMPLETED'",
        "order_month < '2024-01-01'",
    ]


def test_placeholders_resolved(loader):
    query = loader.get_table("order_details_dit").query
    assert "{orders}" not in query and "{products}" not in query
    assert "FROM DT_ICE_DEMO.DEMO.orders_staging o" in query
    assert "JOIN DT_ICE_DEMO.DEMO.products_staging p" in query


def test_dynamic_tables_bound_to_warehouse(loader):
    for table in loader.dynamic_tables():
        assert table.warehouse == "DT_ICE_WH"
        assert table.database == "DT_ICE_DEMO"
        assert table.schema_name == "DEMO"


def test_get_table_is_case_insensitive(loader):
    assert loader.get_table("ORDERS_STAGING").name == "orders_staging"


def test_get_table_unknown(loader):
    with pytest.raises(KeyError, match="Unknown table"):
        loader.get_table("missing_dit")


def test_missing_file(tmp_path: Path):
    loader = DefinitionsLoader(
        tmp_path / "nope.yaml",
        database="DB",
        schema_name="S",
        warehouse="WH",
        external_volume="VOL",
    )
    with pytest.raises(FileNotFoundError):
        loader.load()


def test_document_without_lists(tmp_path: Path):
    path = tmp_path / "defs.yaml"
    path.write_text("source_tables: []\n")
    loader = DefinitionsLoader(
        path, database="DB", schema_name="S", warehouse="WH", external_volume="VOL"
    )
    with pytest.raises(ValueError, match="dynamic_tables"):
        loader.load()


def test_custom_file_and_load_cache(tmp_path: Path):
    path = tmp_path / "defs.yaml"
    path.write_text(
        "source_tables:\n"
        "  - name: orders_staging\n"
        "    columns: {order_id: NUMBER}\n"
        "dynamic_tables:\n"
        "  - name: orders_dit\n"
        "    target_lag: DOWNSTREAM\n"
        "    columns: {order_id: NUMBER}\n"
        "    query: SELECT order_id FROM {orders}\n"
    )
    loader = DefinitionsLoader(
        path, database="DB", schema_name="S", warehouse="WH", external_volume="VOL"
    )
    [table] = loader.dynamic_tables()
    assert table.query == "SELECT order_id FROM DB.S.orders_staging"
    assert table.target_lag == "DOWNSTREAM"
    assert loader.load() is loader.load()
