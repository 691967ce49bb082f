"""
Tests for source adapters and the adapter factory.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest


class TestAdapterFactory:
    """Tests for adapter registration and construction."""

    def test_builtin_adapters_registered(self):
        """SAP and the four Infor products are registered."""
        from connectors import list_available_adapters

        adapters = set(list_available_adapters())

        assert {"SAP", "INFOR_LN", "INFOR_M3", "INFOR_CSI", "INFOR_LAWSON"} <= adapters

    def test_build_adapter_case_insensitive(self):
        """Adapter names are matched case-insensitively."""
        from connectors import SapAdapter, build_adapter

        assert isinstance(build_adapter("sap"), SapAdapter)

    def test_unknown_adapter_raises(self):
        """Unknown adapter names raise AdapterError listing what exists."""
        from connectors import build_adapter
        from core.errors import AdapterError

        with pytest.raises(AdapterError) as exc_info:
            build_adapter("ORACLE_EBS")

        assert "SAP" in str(exc_info.value)

    def test_invalid_mode_raises(self):
        """Only mock and live modes are accepted."""
        from connectors import AdapterConfig, build_adapter
        from core.errors import AdapterError

        with pytest.raises(AdapterError):
            build_adapter("SAP", AdapterConfig(mode="hybrid"))

    def test_create_adapter_connects(self):
        """create_adapter(connect=True) returns a connected adapter."""
        from connectors import create_adapter

        adapter = asyncio.run(create_adapter("INFOR_M3", connect=True))

        assert adapter.connected is True
        assert adapter.get_status() == {"sourceSystem": "INFOR_M3", "mode": "mock", "connected": True}

    def test_register_custom_adapter(self):
        """The decorator registers new adapter types."""
        from connectors import SourceAdapter, build_adapter, register_adapter

        @register_adapter("test_erp")
        class TestErpAdapter(SourceAdapter):
            @property
            def source_system(self):
                return "TEST_ERP"

            async def get_system_info(self):
                return {"product": "Test"}

        assert isinstance(build_adapter("TEST_ERP"), TestErpAdapter)


class TestMockAdapters:
    """Tests for mock-mode adapters."""

    def test_read_table_caps_rows_and_indexes(self):
        """Mock reads return at most five rows, each with ROW_INDEX."""
        from connectors import build_adapter

        adapter = build_adapter("SAP")
        result = asyncio.run(adapter.read_table("ZCUSTOM", max_rows=50))

        assert result["totalRows"] == 5
        assert [r["ROW_INDEX"] for r in result["rows"]] == [1, 2, 3, 4, 5]
        assert result["rows"][0]["FIELD1"] == "ZCUSTOM_FIELD1_VALUE"

    def test_read_table_respects_max_rows(self):
        """Smaller max_rows values limit the canned rows."""
        from connectors import build_adapter

        result = asyncio.run(build_adapter("SAP").read_table("MARA", max_rows=2))

        assert len(result["rows"]) == 2
        assert result["rows"][0]["MATNR"] == "MAT-001"

    def test_read_table_field_selection(self):
        """Requested fields limit the columns returned."""
        from connectors import build_adapter

        result = asyncio.run(build_adapter("SAP").read_table("MARA", fields=["MATNR"]))

        assert result["fields"] == ["MATNR", "ROW_INDEX"]
        assert set(result["rows"][0]) == {"MATNR", "ROW_INDEX"}

    def test_read_canonical_sap_items(self):
        """MARA rows map to valid canonical items."""
        from connectors import build_adapter

        items = asyncio.run(build_adapter("SAP").read_canonical("Item", "MARA"))

        assert len(items) == 3
        assert items[0].data["itemId"] == "MAT-001"
        assert items[0].data["grossWeight"] == 12.5
        assert all(item.validate().valid for item in items)

    def test_read_canonical_ln_items(self):
        """LN rows map item type codes."""
        from connectors import build_adapter

        items = asyncio.run(build_adapter("INFOR_LN").read_canonical("Item", "tcibd001"))

        assert [i.data["itemType"] for i in items] == ["ROH", "ROH", "FERT"]

    def test_infor_source_systems(self):
        """Each Infor adapter reports its own source system."""
        from connectors import build_adapter

        for name in ("INFOR_LN", "INFOR_M3", "INFOR_CSI", "INFOR_LAWSON"):
            assert build_adapter(name).source_system == name

    def test_infor_system_info(self):
        """Mock system info names the product and default company."""
        from connectors import build_adapter

        info = asyncio.run(build_adapter("INFOR_CSI").get_system_info())

        assert info["product"] == "Infor CSI/SyteLine"
        assert info["company"] == "MAIN"
        assert info["mock"] is True

    def test_query_entities(self):
        """Mock entity queries return three canned entities."""
        from connectors import build_adapter

        result = asyncio.run(build_adapter("SAP").query_entities("Customer"))

        assert result["totalCount"] == 3
        assert result["entities"][0]["Name"] == "Customer Entity 1"

    def test_mock_health_check(self):
        """Mock adapters are always healthy."""
        from connectors import build_adapter

        health = asyncio.run(build_adapter("SAP").health_check())

        assert health["healthy"] is True
        assert health["latency_ms"] == 5


class TestLiveAdapters:
    """Tests for live-mode adapters with a mocked wire client."""

    def test_live_without_client_raises(self):
        """Live reads need a client."""
        from connectors import AdapterConfig, build_adapter
        from core.errors import AdapterError

        adapter = build_adapter("SAP", AdapterConfig(mode="live"))

        with pytest.raises(AdapterError):
            asyncio.run(adapter.read_table("MARA"))
        with pytest.raises(AdapterError):
            asyncio.run(adapter.connect())

    def test_live_read_delegates_to_client(self):
        """Live reads are passed straight to the client."""
        from connectors import AdapterConfig, build_adapter

        client = MagicMock()
        client.read_table = AsyncMock(return_value={"rows": [], "totalRows": 0, "fields": []})
        adapter = build_adapter("SAP", AdapterConfig(mode="live", client=client))

        asyncio.run(adapter.read_table("MARA", fields=["MATNR"], max_rows=10))

        client.read_table.assert_awaited_once_with("MARA", fields=["MATNR"], where=None, max_rows=10)

    def test_ln_live_read_uses_company_table(self):
        """LN appends the company number to physical table names."""
        from connectors import AdapterConfig, build_adapter

        client = MagicMock()
        client.read_table = AsyncMock(return_value={"rows": []})
        adapter = build_adapter("INFOR_LN", AdapterConfig(mode="live", client=client, company="5"))

        asyncio.run(adapter.read_table("tcibd001"))

        assert client.read_table.await_args.args[0] == "tcibd001005"

    def test_live_health_check_failure(self):
        """A failing client makes the adapter unhealthy."""
        from connectors import AdapterConfig, build_adapter

        client = MagicMock()
        client.get_system_info = AsyncMock(side_effect=ConnectionError("RFC timeout"))
        adapter = build_adapter("SAP", AdapterConfig(mode="live", client=client))

        health = asyncio.run(adapter.health_check())

        assert health["healthy"] is False
        assert health["details"]["error"] == "RFC timeout"

    def test_live_sap_system_info(self):
        """Live SAP info is normalized from the client's answer."""
        from connectors import AdapterConfig, build_adapter

        client = MagicMock()
        client.get_system_info = AsyncMock(return_value={"systemId": "PRD", "host": "sapprd", "unicode": 1})
        adapter = build_adapter("SAP", AdapterConfig(mode="live", client=client))

        info = asyncio.run(adapter.get_system_info())

        assert info["systemId"] == "PRD"
        assert info["hostname"] == "sapprd"
        assert info["unicode"] is True
