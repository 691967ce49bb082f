"""Tool and resource declarations.

Each tool carries a JSON-Schema input contract. Only ``required`` is
enforced at dispatch; the remaining properties document the arguments the
handlers read.
"""

from typing import Any, Dict, List, Optional


def _tool(name: str, description: str, properties: Dict[str, Any],
          required: Optional[List[str]] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return {"name": name, "description": description, "inputSchema": schema}


def _str(description: str, **extra) -> Dict[str, Any]:
    return {"type": "string", "description": description, **extra}


def _num(description: str, **extra) -> Dict[str, Any]:
    return {"type": "number", "description": description, **extra}


def _bool(description: str, **extra) -> Dict[str, Any]:
    return {"type": "boolean", "description": description, **extra}


def _obj(description: str) -> Dict[str, Any]:
    return {"type": "object", "description": description}


# =============================================================================
# SAP Core Tools
# =============================================================================

SAP_TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    _tool(
        "searchObject",
        "Search ABAP repository objects by query string and optional type filter.",
        {
            "query": _str('Search query (e.g., "Z_MATERIAL*")'),
            "objectType": _str("ABAP object type filter (PROG, CLAS, FUGR, TABL, etc.)"),
            "maxResults": _num("Maximum results to return", default=50),
        },
        ["query"],
    ),
    _tool(
        "getSource",
        "Read ABAP source code for a given object URI.",
        {"objectUri": _str('ADT object URI (e.g., "/sap/bc/adt/programs/programs/Z_TEST")')},
        ["objectUri"],
    ),
    _tool(
        "writeSource",
        "Write ABAP source code to a given object URI. Performs lock, write, unlock sequence "
        "after the change passes the safety gates.",
        {
            "objectUri": _str("ADT object URI"),
            "source": _str("ABAP source code to write"),
            "transport": _str("Transport request number (e.g., DEVK900123)"),
        },
        ["objectUri", "source"],
    ),
    _tool(
        "getTableStructure",
        "Get table field metadata including names, types, lengths, and descriptions.",
        {"tableName": _str('SAP table name (e.g., "MARA", "KNA1")')},
        ["tableName"],
    ),
    _tool(
        "getTableData",
        "Read table contents with optional field selection and WHERE filter.",
        {
            "tableName": _str("SAP table name"),
            "fields": {"type": "array", "items": {"type": "string"}, "description": "Fields to select"},
            "where": _str("WHERE clause for filtering"),
            "maxRows": _num("Maximum rows to return", default=100),
        },
        ["tableName"],
    ),
    _tool(
        "getRelationships",
        "Discover foreign key relationships for a table.",
        {
            "tableName": _str("SAP table name"),
            "depth": _num("Relationship traversal depth", default=1),
        },
        ["tableName"],
    ),
    _tool(
        "getFunctionInterface",
        "Get the parameter interface of a function module.",
        {"functionModule": _str('Function module name (e.g., "BAPI_MATERIAL_GETDETAIL")')},
        ["functionModule"],
    ),
    _tool(
        "callBAPI",
        "Execute any BAPI/function module with optional commit.",
        {
            "functionModule": _str("Function module name"),
            "imports": _obj("IMPORT parameters"),
            "tables": _obj("TABLE parameters"),
            "withCommit": _bool("Whether to BAPI_TRANSACTION_COMMIT after call", default=False),
        },
        ["functionModule"],
    ),
    _tool(
        "runATCCheck",
        "Run ATC (ABAP Test Cockpit) quality check on an object set.",
        {
            "objectSet": _str("Object set to check (program name, package, etc.)"),
            "checkVariant": _str("ATC check variant", default="S4HANA_READINESS"),
        },
        ["objectSet"],
    ),
    _tool(
        "manageTransport",
        "Create, release, or query transport requests.",
        {
            "action": _str("Transport action", enum=["create", "release", "check", "list"]),
            "transportNumber": _str("Transport number (for release/check)"),
            "description": _str("Description (for create)"),
            "type": _str("Transport type (for create)", enum=["workbench", "customizing"], default="workbench"),
        },
        ["action"],
    ),
    _tool(
        "getCDSView",
        "Get CDS view source code and annotations.",
        {"cdsName": _str('CDS view name (e.g., "I_PRODUCT")')},
        ["cdsName"],
    ),
    _tool(
        "getSystemInfo",
        "Get SAP system version, component list, and configuration details.",
        {},
    ),
]


# =============================================================================
# Configuration Tools (safety-gated writes)
# =============================================================================

CONFIG_TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    _tool(
        "config_read_source",
        "Read configuration entries (company codes, plants, sales orgs...) from the source system.",
        {
            "configType": _str("Configuration type: company-codes, plants, sales-orgs, "
                               "purchasing-orgs, chart-of-accounts"),
            "systemId": _str("Source system ID", default="S4D"),
        },
        ["configType"],
    ),
    _tool(
        "config_write_target",
        "Write configuration to the target system. Safety-gated; validates only unless dryRun is false.",
        {
            "configType": _str("Configuration type"),
            "data": _obj("Configuration data to write"),
            "dryRun": _bool("Validate only, without writing", default=True),
            "transport": _str("Transport request number"),
        },
        ["configType", "data"],
    ),
    _tool(
        "config_safety_check",
        "Run the safety gates against a pending write operation.",
        {
            "operation": _str("Description of the operation"),
            "artifact": _obj("Artifact details for gate validation"),
        },
        ["operation"],
    ),
    _tool(
        "config_request_approval",
        "Request human approval for a write operation.",
        {
            "operation": _str("Description of the operation"),
            "details": _obj("Additional details"),
            "urgency": _str("Urgency level", enum=["low", "normal", "high"], default="normal"),
        },
        ["operation"],
    ),
    _tool(
        "config_get_audit_trail",
        "Get the audit trail of safety-gate decisions.",
        {
            "since": _str("ISO date filter"),
            "artifactType": _str("Artifact type filter"),
            "approved": _bool("Approval status filter"),
        },
    ),
]


# =============================================================================
# Infor Tools
# =============================================================================

INFOR_TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    _tool(
        "infor_query_bod",
        "Query Infor ION BOD documents by noun and verb. Returns matching BOD instances with metadata.",
        {
            "noun": _str('BOD noun (e.g., "SyncItem", "ProcessPurchaseOrder", "SyncSalesOrder")'),
            "verb": _str('BOD verb (e.g., "Sync", "Process", "Get", "Confirm")'),
            "filters": _obj('Filter criteria (e.g., { "status": "active", "since": "2024-01-01" })'),
            "limit": _num("Maximum documents to return", default=50),
        },
        ["noun"],
    ),
    _tool(
        "infor_list_connections",
        "List all configured Infor ION API connection points and their status.",
        {
            "type": _str("Filter by connection type: api, bod, dataflow, workflow"),
            "status": _str("Filter by status: active, inactive, error"),
        },
    ),
    _tool(
        "infor_profile_db",
        "Profile Infor database tables: row counts, column statistics, data quality metrics.",
        {
            "tableName": _str('Database table name (e.g., "MITMAS", "OCUSMA", "CIDMAS")'),
            "schema": _str("Database schema name"),
            "includeStats": _bool("Include column-level statistics (min, max, nulls, distinct)", default=True),
        },
        ["tableName"],
    ),
    _tool(
        "infor_map_field",
        "Map a field from Infor source to SAP S/4HANA target, with transformation rules and data type conversion.",
        {
            "sourceSystem": _str("Source system: M3, LN, SyteLine, Lawson"),
            "sourceTable": _str('Source table name (e.g., "MITMAS", "CIDMAS")'),
            "sourceField": _str("Source field name"),
            "targetTable": _str("Optional target SAP table override"),
        },
        ["sourceSystem", "sourceTable", "sourceField"],
    ),
]


TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    *SAP_TOOL_DEFINITIONS,
    *CONFIG_TOOL_DEFINITIONS,
    *INFOR_TOOL_DEFINITIONS,
]

TOOLS_BY_NAME: Dict[str, Dict[str, Any]] = {t["name"]: t for t in TOOL_DEFINITIONS}


def get_tool(name: str) -> Optional[Dict[str, Any]]:
    return TOOLS_BY_NAME.get(name)


# =============================================================================
# Resources
# =============================================================================

RESOURCE_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "uri": "sap://system/info",
        "name": "SAP System Information",
        "description": "Current SAP system version, components, and configuration",
        "mimeType": "application/json",
    },
    {
        "uri": "sap://objects/{type}/{name}",
        "name": "ABAP Object Source",
        "description": "Source code for an ABAP repository object",
        "mimeType": "text/plain",
    },
    {
        "uri": "sap://tables/{name}/structure",
        "name": "Table Structure",
        "description": "Field definitions and metadata for a SAP table",
        "mimeType": "application/json",
    },
    {
        "uri": "sap://tables/{name}/data",
        "name": "Table Data Sample",
        "description": "Sample data rows from a SAP table",
        "mimeType": "application/json",
    },
]
