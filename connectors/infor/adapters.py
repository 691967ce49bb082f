"""Infor Source Adapters - LN, M3, CloudSuite Industrial and Lawson.

The four products share one adapter shape and differ in source-system id,
company/site handling, canned rows and system info. Mock rows use each
product's native field names so they map through the Infor mapping tables.
"""

from typing import Any, Dict, List

from connectors.adapter_base import SourceAdapter, register_adapter


class InforAdapter(SourceAdapter):
    """Shared behavior for Infor products."""

    system_id: str = ""
    product: str = "Infor"
    default_company: str = "100"
    mock_info: Dict[str, Any] = {}

    @property
    def source_system(self) -> str:
        return self.system_id

    @property
    def company(self) -> str:
        return self.config.company or self.default_company

    async def get_system_info(self) -> Dict[str, Any]:
        if self.is_mock:
            return {
                "product": self.product,
                "company": self.company,
                **self.mock_info,
                "mock": True,
            }

        client = self._require_client()
        info = await client.get_system_info()
        return {"product": self.product, "company": self.company, **info}


@register_adapter("INFOR_LN")
class InforLnAdapter(InforAdapter):
    """Infor LN (Baan). Tables carry a 3-digit company suffix: tcibd001 + 100."""

    system_id = "INFOR_LN"
    product = "Infor LN"
    mock_info = {
        "version": "10.7",
        "currency": "USD",
        "database": "Oracle",
        "modules": ["Common", "Distribution", "Manufacturing", "Finance", "Project"],
    }
    mock_tables = {
        "TCIBD001": [
            {"T$ITEM": "ITEM-001", "T$DSCA": "Steel Plate 4mm", "T$CTYP": 3, "T$CITG": "01",
             "T$CUNI": "KG", "T$GRWE": "25.0", "T$WUNI": "KG"},
            {"T$ITEM": "ITEM-002", "T$DSCA": "Copper Wire 2mm", "T$CTYP": 3, "T$CITG": "02",
             "T$CUNI": "M", "T$GRWE": "0.2", "T$WUNI": "KG"},
            {"T$ITEM": "ITEM-003", "T$DSCA": "Valve Assembly", "T$CTYP": 1, "T$CITG": "03",
             "T$CUNI": "PC", "T$GRWE": "3.4", "T$WUNI": "KG"},
        ],
        "TCCOM100": [
            {"T$BPID": "CUST-001", "T$NAMA": "Acme Manufacturing", "T$LNCI": "Chicago", "T$LNCC": "US"},
            {"T$BPID": "CUST-002", "T$NAMA": "Global Industries", "T$LNCI": "Munich", "T$LNCC": "DE"},
        ],
        "TFGLD008": [
            {"T$LEAC": "1000", "T$DESC": "Cash", "T$ACTP": 1},
            {"T$LEAC": "8000", "T$DESC": "Sales revenue", "T$ACTP": 2},
        ],
    }

    def company_table(self, table_name: str) -> str:
        """Company-suffixed physical table name."""
        return f"{table_name}{self.company.zfill(3)}"

    async def read_table(self, table_name: str, fields: List[str] = None, where: str = None,
                         max_rows: int = 100) -> Dict[str, Any]:
        if self.is_mock:
            return await super().read_table(table_name, fields, where, max_rows)
        return await super().read_table(self.company_table(table_name), fields, where, max_rows)


@register_adapter("INFOR_M3")
class InforM3Adapter(InforAdapter):
    """Infor M3 (Movex). Field names carry a two-letter table prefix (MMITNO)."""

    system_id = "INFOR_M3"
    product = "Infor M3"
    mock_info = {
        "companyName": "M3 Main Company",
        "division": "AAA",
        "currency": "USD",
        "version": "13.4",
        "database": "DB2",
        "modules": ["MMS", "OIS", "PPS", "GLS", "CRS", "MWS", "APS", "MNS"],
    }
    mock_tables = {
        "MITMAS": [
            {"MMITNO": "A001", "MMITDS": "Widget Alpha", "MMITTY": "10", "MMUNMS": "EA", "MMITGR": "WIDG"},
            {"MMITNO": "A002", "MMITDS": "Widget Beta", "MMITTY": "10", "MMUNMS": "EA", "MMITGR": "WIDG"},
            {"MMITNO": "B001", "MMITDS": "Gear Assembly", "MMITTY": "20", "MMUNMS": "PC", "MMITGR": "GEAR"},
            {"MMITNO": "B002", "MMITDS": "Motor Housing", "MMITTY": "20", "MMUNMS": "PC", "MMITGR": "MOTR"},
        ],
        "OCUSMA": [
            {"OKCUNO": "C10001", "OKCUNM": "Nordic Retail AB", "OKTOWN": "Stockholm", "OKCSCD": "SE"},
            {"OKCUNO": "C10002", "OKCUNM": "Pacific Traders", "OKTOWN": "Sydney", "OKCSCD": "AU"},
        ],
        "CIDMAS": [
            {"IISUNO": "S20001", "IISUNM": "Bearing Supply Co", "IITOWN": "Detroit", "IICSCD": "US"},
        ],
    }


@register_adapter("INFOR_CSI")
class InforCsiAdapter(InforAdapter):
    """Infor CloudSuite Industrial (SyteLine), read through IDO collections."""

    system_id = "INFOR_CSI"
    product = "Infor CSI/SyteLine"
    default_company = "MAIN"
    mock_info = {
        "version": "10.12",
        "database": "SQL Server",
        "modules": ["Inventory", "Order Entry", "Purchasing", "Production", "Financials", "Quality", "APS"],
    }
    mock_tables = {
        "SLITEMS": [
            {"Item": "FG-100", "Description": "Industrial Fan", "UM": "EA", "ProductCode": "FG", "UnitWeight": "8.5"},
            {"Item": "RM-200", "Description": "Fan Blade Blank", "UM": "EA", "ProductCode": "RM", "UnitWeight": "0.9"},
        ],
        "SLCUSTOMERS": [
            {"CustNum": "C000101", "Name": "Midwest Distributors", "City": "Omaha", "Country": "US"},
        ],
        "SLVENDORS": [
            {"VendNum": "V000201", "Name": "Blade Forge Ltd", "City": "Leeds", "Country": "GB"},
        ],
    }


@register_adapter("INFOR_LAWSON")
class InforLawsonAdapter(InforAdapter):
    """Infor Lawson / Landmark. Field names are hyphenated (ITEM-NUMBER)."""

    system_id = "INFOR_LAWSON"
    product = "Infor Lawson/Landmark"
    default_company = "PROD"
    mock_info = {
        "version": "v11",
        "database": "Oracle",
        "modules": ["GL", "AP", "AR", "IC", "PO", "HR"],
    }
    mock_tables = {
        "ICITEM": [
            {"ITEM-NUMBER": "100200", "DESCRIPTION": "Surgical Gloves", "UM": "BX", "ITEM-TYPE": "I"},
            {"ITEM-NUMBER": "100201", "DESCRIPTION": "Face Masks", "UM": "BX", "ITEM-TYPE": "I"},
        ],
        "APVENMAST": [
            {"VENDOR": "4001", "NAME": "Medical Supply Corp", "CITY": "Atlanta", "COUNTRY": "US"},
        ],
        "GLCHART": [
            {"ACCOUNT": "1000", "DESCRIPTION": "Operating Cash", "ACCOUNT-TYPE": "B"},
            {"ACCOUNT": "4000", "DESCRIPTION": "Patient Revenue", "ACCOUNT-TYPE": "R"},
        ],
    }
