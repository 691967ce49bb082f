"""SAP Source Adapter.

Concrete adapter for SAP ECC / S/4HANA. In live mode it delegates to an
injected RFC/OData wire client; in mock mode it serves realistic SAP-shaped
rows for the core master-data tables.
"""

from typing import Any, Dict

from connectors.adapter_base import SourceAdapter, register_adapter


MOCK_SYSTEM_INFO = {
    "systemId": "S4H",
    "systemType": "SAP S/4HANA",
    "release": "2023",
    "hostname": "sap-prod-01.example.com",
    "client": "100",
    "database": "HANA 2.0 SPS06",
    "kernel": "793",
    "operatingSystem": "Linux",
    "unicode": True,
    "modules": ["FI", "CO", "MM", "SD", "PP", "QM", "PM", "WM", "HR"],
}


@register_adapter("SAP")
class SapAdapter(SourceAdapter):
    """SAP adapter.

    Mock tables use SAP field names, so rows feed straight into the SAP
    mapping tables (MARA -> Item, KNA1 -> Customer, LFA1 -> Vendor,
    SKA1 -> ChartOfAccounts).
    """

    mock_tables = {
        "MARA": [
            {"MATNR": "MAT-001", "MAKTX": "Finished Pump Assembly", "MTART": "FERT", "MATKL": "PUMPS",
             "MEINS": "EA", "BRGEW": "12.500", "NTGEW": "11.800", "GEWEI": "KG"},
            {"MATNR": "MAT-002", "MAKTX": "Steel Sheet 2mm", "MTART": "ROH", "MATKL": "STEEL",
             "MEINS": "KG", "BRGEW": "1.000", "NTGEW": "1.000", "GEWEI": "KG"},
            {"MATNR": "MAT-003", "MAKTX": "Pump Housing", "MTART": "HALB", "MATKL": "PUMPS",
             "MEINS": "EA", "BRGEW": "4.200", "NTGEW": "4.000", "GEWEI": "KG"},
        ],
        "KNA1": [
            {"KUNNR": "0000100001", "NAME1": "Acme Manufacturing", "ORT01": "Chicago", "PSTLZ": "60601",
             "LAND1": "US", "REGIO": "IL", "KTOKD": "KUNA"},
            {"KUNNR": "0000100002", "NAME1": "Global Industries GmbH", "ORT01": "Munich", "PSTLZ": "80331",
             "LAND1": "DE", "REGIO": "BY", "KTOKD": "KUNA"},
        ],
        "LFA1": [
            {"LIFNR": "0000200001", "NAME1": "Steel Works Inc", "ORT01": "Pittsburgh", "PSTLZ": "15201",
             "LAND1": "US", "REGIO": "PA", "KTOKK": "LIEF"},
            {"LIFNR": "0000200002", "NAME1": "Precision Parts Ltd", "ORT01": "Birmingham", "PSTLZ": "B1 1AA",
             "LAND1": "GB", "KTOKK": "LIEF"},
        ],
        "SKA1": [
            {"SAKNR": "0000100000", "TXT50": "Cash and cash equivalents", "GVTYP": "X", "KTOKS": "BS"},
            {"SAKNR": "0000400000", "TXT50": "Revenue from sales", "GVTYP": "", "KTOKS": "PL"},
        ],
    }

    @property
    def source_system(self) -> str:
        return "SAP"

    async def get_system_info(self) -> Dict[str, Any]:
        if self.is_mock:
            return dict(MOCK_SYSTEM_INFO)

        client = self._require_client()
        info = await client.get_system_info()
        return {
            "systemId": info.get("systemId", ""),
            "systemType": "SAP",
            "release": info.get("release", ""),
            "hostname": info.get("host", info.get("hostname", "")),
            "client": info.get("client", ""),
            "database": info.get("database", ""),
            "kernel": info.get("kernel", ""),
            "operatingSystem": info.get("operatingSystem", ""),
            "unicode": bool(info.get("unicode", False)),
        }
