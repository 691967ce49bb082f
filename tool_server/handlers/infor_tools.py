"""Infor tool handlers (ION BODs, connection points, DB profiling, field mapping)."""

from typing import Any, Dict, List, Optional

from core.mapping.engine import MappingResolver, get_resolver
from core.observability.logging import get_logger

logger = get_logger(__name__)

# Product names accepted by infor_map_field -> mapping-table source systems
SOURCE_SYSTEM_ALIASES = {
    "LN": "INFOR_LN",
    "BAAN": "INFOR_LN",
    "M3": "INFOR_M3",
    "MOVEX": "INFOR_M3",
    "SYTELINE": "INFOR_CSI",
    "CSI": "INFOR_CSI",
    "CLOUDSUITE": "INFOR_CSI",
    "LAWSON": "INFOR_LAWSON",
    "LANDMARK": "INFOR_LAWSON",
}

# Known Infor -> SAP S/4HANA field equivalences keyed by TABLE.FIELD
FIELD_MAPPINGS = {
    "MITMAS.MMITNO": {"target": "MARA", "field": "MATNR", "transform": "padLeft40", "confidence": 0.98},
    "MITMAS.MMITDS": {"target": "MAKT", "field": "MAKTX", "transform": "truncate40", "confidence": 0.95},
    "MITMAS.MMITTY": {"target": "MARA", "field": "MTART", "transform": "valueMap", "confidence": 0.85},
    "MITMAS.MMUNMS": {"target": "MARA", "field": "MEINS", "transform": "uomMap", "confidence": 0.92},
    "OCUSMA.OKCUNO": {"target": "KNA1", "field": "KUNNR", "transform": "padLeft10", "confidence": 0.97},
    "OCUSMA.OKCUNM": {"target": "KNA1", "field": "NAME1", "transform": "truncate35", "confidence": 0.96},
    "CIDMAS.IISUNO": {"target": "LFA1", "field": "LIFNR", "transform": "padLeft10", "confidence": 0.97},
}

HIGH_CONFIDENCE = 0.90

CONNECTION_POINTS = [
    {"id": "CP-001", "name": "CP_M3_OUTBOUND", "type": "bod", "status": "active", "system": "M3",
     "direction": "outbound", "lastActivity": "2024-11-15T10:05:00Z", "documentsToday": 342},
    {"id": "CP-002", "name": "CP_M3_INBOUND", "type": "bod", "status": "active", "system": "M3",
     "direction": "inbound", "lastActivity": "2024-11-15T09:58:00Z", "documentsToday": 215},
    {"id": "CP-003", "name": "CP_DATALAKE_SYNC", "type": "dataflow", "status": "active", "system": "DataLake",
     "direction": "outbound", "lastActivity": "2024-11-15T06:00:00Z", "documentsToday": 0},
    {"id": "CP-004", "name": "CP_S4_TARGET", "type": "api", "status": "inactive", "system": "S4HANA",
     "direction": "inbound", "lastActivity": None, "documentsToday": 0},
    {"id": "CP-005", "name": "WF_ORDER_APPROVAL", "type": "workflow", "status": "active", "system": "ION",
     "direction": "bidirectional", "lastActivity": "2024-11-15T09:30:00Z", "documentsToday": 78},
    {"id": "CP-006", "name": "CP_IDO_GATEWAY", "type": "api", "status": "error", "system": "SyteLine",
     "direction": "outbound", "lastActivity": "2024-11-14T22:15:00Z", "documentsToday": 0,
     "errorMessage": "Connection timeout after 30s"},
]


def _bod_document(noun: str, verb: str, seq: int, label: str, timestamp: str, status: str,
                  fields: Dict[str, str]) -> Dict[str, Any]:
    return {
        "bodId": f"BOD-{noun}-{seq:03d}",
        "noun": noun,
        "verb": verb,
        "timestamp": timestamp,
        "sender": {"logicalId": "lid://infor.m3.m3clou", "component": "M3"},
        "status": status,
        "dataArea": {
            "id": f"ITEM-{100000 + seq}",
            "description": f"{label} {noun} document",
            "fields": fields,
        },
    }


class InforToolHandlers:
    """Handlers for the ``infor_*`` tools."""

    def __init__(self, mode: str = "mock", resolver: Optional[MappingResolver] = None):
        self.mode = mode
        self._resolver = resolver

    @property
    def resolver(self) -> MappingResolver:
        return self._resolver or get_resolver()

    async def handle(self, tool_name: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        handler = getattr(self, f"_handle_{tool_name}", None)
        if handler is None:
            raise ValueError(f"Unknown Infor tool: {tool_name}")
        logger.debug(f"Handling {tool_name}")
        result = await handler(params or {})
        logger.debug(f"Completed {tool_name}", extra_fields={"result_keys": list(result.keys())})
        return result

    # =========================================================================
    # ION
    # =========================================================================

    async def _handle_infor_query_bod(self, params: Dict[str, Any]) -> Dict[str, Any]:
        noun = params.get("noun")
        verb = params.get("verb") or "Sync"
        limit = params.get("limit") or 50
        documents = [
            _bod_document(noun, verb, 1, "Sample", "2024-11-15T08:30:00Z", "processed",
                          {"status": "Active", "company": "100", "division": "001"}),
            _bod_document(noun, verb, 2, "Another", "2024-11-15T09:15:00Z", "processed",
                          {"status": "Active", "company": "100", "division": "002"}),
            _bod_document(noun, verb, 3, "Third", "2024-11-15T10:00:00Z", "pending",
                          {"status": "Inactive", "company": "200", "division": "001"}),
        ][:limit]
        return {
            "noun": noun,
            "verb": verb,
            "totalDocuments": 147,
            "returnedDocuments": len(documents),
            "documents": documents,
            "appliedFilters": params.get("filters") or {},
        }

    async def _handle_infor_list_connections(self, params: Dict[str, Any]) -> Dict[str, Any]:
        connections = [dict(c) for c in CONNECTION_POINTS]
        if params.get("type"):
            connections = [c for c in connections if c["type"] == params["type"]]
        if params.get("status"):
            connections = [c for c in connections if c["status"] == params["status"]]
        return {"totalConnections": len(connections), "connections": connections}

    # =========================================================================
    # Database
    # =========================================================================

    async def _handle_infor_profile_db(self, params: Dict[str, Any]) -> Dict[str, Any]:
        profile: Dict[str, Any] = {
            "tableName": params.get("tableName"),
            "schema": params.get("schema") or "MVXJDTA",
            "rowCount": 45672,
            "sizeBytes": 18268800,
            "lastAnalyzed": "2024-11-15T06:00:00Z",
            "columns": [
                {"name": "MMITNO", "type": "VARCHAR", "length": 15, "nullable": False, "description": "Item number"},
                {"name": "MMITDS", "type": "VARCHAR", "length": 30, "nullable": True,
                 "description": "Item description"},
                {"name": "MMITTY", "type": "VARCHAR", "length": 3, "nullable": False, "description": "Item type"},
                {"name": "MMSTAT", "type": "VARCHAR", "length": 2, "nullable": False, "description": "Status"},
                {"name": "MMUNMS", "type": "VARCHAR", "length": 3, "nullable": True,
                 "description": "Unit of measure"},
                {"name": "MMGRWE", "type": "DECIMAL", "length": 11, "nullable": True, "description": "Gross weight"},
            ],
        }
        if params.get("includeStats") is not False:
            profile["statistics"] = {
                "MMITNO": {"distinct": 45672, "nulls": 0, "minLength": 3, "maxLength": 15},
                "MMITDS": {"distinct": 44890, "nulls": 12, "minLength": 5, "maxLength": 30},
                "MMITTY": {"distinct": 8, "nulls": 0,
                           "topValues": [{"value": "STK", "count": 22000}, {"value": "RAW", "count": 12000}]},
                "MMSTAT": {"distinct": 5, "nulls": 0,
                           "topValues": [{"value": "20", "count": 40000}, {"value": "50", "count": 3500}]},
                "MMUNMS": {"distinct": 15, "nulls": 234,
                           "topValues": [{"value": "PCS", "count": 18000}, {"value": "KG", "count": 9800}]},
                "MMGRWE": {"distinct": 3200, "nulls": 1500, "min": 0.001, "max": 9999.99, "avg": 12.45},
            }
        return profile

    # =========================================================================
    # Field Mapping
    # =========================================================================

    def _canonical_targets(self, source_system: str, source_field: str) -> List[Dict[str, str]]:
        system = SOURCE_SYSTEM_ALIASES.get((source_system or "").upper(), (source_system or "").upper())
        if system not in self.resolver.source_systems():
            return []
        return [
            {"entityType": entity_type, "field": entry.target}
            for entity_type, entry in self.resolver.find_by_source_field(system, source_field)
        ]

    async def _handle_infor_map_field(self, params: Dict[str, Any]) -> Dict[str, Any]:
        source_system = params.get("sourceSystem")
        source_table = params.get("sourceTable")
        source_field = params.get("sourceField")
        target_table = params.get("targetTable")

        mapping = FIELD_MAPPINGS.get(f"{source_table}.{source_field}") or {
            "target": target_table or "UNKNOWN",
            "field": source_field,
            "transform": "direct",
            "confidence": 0.50,
        }
        if mapping["confidence"] >= HIGH_CONFIDENCE:
            notes = "High-confidence mapping based on standard field equivalence"
        else:
            notes = "Low-confidence mapping, manual review recommended"

        return {
            "sourceSystem": source_system,
            "sourceTable": source_table,
            "sourceField": source_field,
            "mapping": {
                "targetTable": target_table or mapping["target"],
                "targetField": mapping["field"],
                "transform": mapping["transform"],
                "confidence": mapping["confidence"],
                "dataTypeSource": "VARCHAR(15)",
                "dataTypeTarget": "CHAR(40)",
                "notes": notes,
            },
            "canonical": self._canonical_targets(source_system, source_field or ""),
            "alternatives": [
                {"targetTable": mapping["target"], "targetField": mapping["field"],
                 "confidence": mapping["confidence"]},
            ],
        }
