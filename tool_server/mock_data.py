"""Canned responses for the SAP core tools in mock mode.

Each handler takes the tool arguments and returns the result payload; the
shapes match what the live handlers return.
"""

import time
from typing import Any, Callable, Dict

from core.models.canonical import utc_timestamp

MockHandler = Callable[[Dict[str, Any]], Dict[str, Any]]

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(value: int) -> str:
    digits = ""
    while value:
        value, rem = divmod(value, 36)
        digits = _BASE36[rem] + digits
    return digits or "0"


def search_object(args: Dict[str, Any]) -> Dict[str, Any]:
    candidates = [
        {"uri": "/sap/bc/adt/programs/programs/Z_MATERIAL_REPORT", "type": "PROG",
         "name": "Z_MATERIAL_REPORT", "description": "Material Listing Report"},
        {"uri": "/sap/bc/adt/oo/classes/ZCL_MATERIAL_HELPER", "type": "CLAS",
         "name": "ZCL_MATERIAL_HELPER", "description": "Material Helper Class"},
        {"uri": "/sap/bc/adt/functions/groups/Z_MATERIAL_FM", "type": "FUGR",
         "name": "Z_MATERIAL_FM", "description": "Material Function Group"},
    ]
    object_type = args.get("objectType")
    results = [r for r in candidates if not object_type or r["type"] == object_type]
    return {
        "results": results[:args.get("maxResults") or 50],
        "totalResults": len(candidates),
        "query": args.get("query"),
    }


MOCK_REPORT_SOURCE = (
    "REPORT z_material_report.\n\n"
    "* Material listing report\n"
    "DATA: lt_mara TYPE TABLE OF mara,\n"
    "      ls_mara TYPE mara.\n\n"
    "SELECT * FROM mara INTO TABLE lt_mara UP TO 100 ROWS.\n\n"
    "LOOP AT lt_mara INTO ls_mara.\n"
    "  WRITE: / ls_mara-matnr, ls_mara-mtart, ls_mara-matkl.\n"
    "ENDLOOP.\n"
)


def get_source(args: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "uri": args.get("objectUri"),
        "source": MOCK_REPORT_SOURCE,
        "language": "abap",
        "length": len(MOCK_REPORT_SOURCE),
    }


def write_source(args: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "uri": args.get("objectUri"),
        "status": "saved",
        "lockToken": "LCK_" + _base36(int(time.time() * 1000)),
        "timestamp": utc_timestamp(),
        "warnings": [],
    }


MARA_FIELDS = [
    {"name": "MANDT", "type": "CLNT", "length": 3, "decimals": 0, "description": "Client", "keyField": True},
    {"name": "MATNR", "type": "CHAR", "length": 40, "decimals": 0, "description": "Material Number", "keyField": True},
    {"name": "MTART", "type": "CHAR", "length": 4, "decimals": 0, "description": "Material Type", "keyField": False},
    {"name": "MATKL", "type": "CHAR", "length": 9, "decimals": 0, "description": "Material Group", "keyField": False},
    {"name": "MEINS", "type": "UNIT", "length": 3, "decimals": 0, "description": "Base Unit of Measure",
     "keyField": False},
    {"name": "BRGEW", "type": "QUAN", "length": 13, "decimals": 3, "description": "Gross Weight", "keyField": False},
    {"name": "NTGEW", "type": "QUAN", "length": 13, "decimals": 3, "description": "Net Weight", "keyField": False},
    {"name": "GEWEI", "type": "UNIT", "length": 3, "decimals": 0, "description": "Weight Unit", "keyField": False},
]


def get_table_structure(args: Dict[str, Any]) -> Dict[str, Any]:
    table_name = args.get("tableName")
    return {
        "tableName": table_name,
        "description": f"Structure of {table_name}",
        "category": "TRANSP",
        "fields": [dict(f) for f in MARA_FIELDS],
        "totalFields": len(MARA_FIELDS),
    }


def get_table_data(args: Dict[str, Any]) -> Dict[str, Any]:
    rows = [
        {"MANDT": "100", "MATNR": "MAT-001", "MTART": "FERT", "MATKL": "001"},
        {"MANDT": "100", "MATNR": "MAT-002", "MTART": "ROH", "MATKL": "002"},
        {"MANDT": "100", "MATNR": "MAT-003", "MTART": "HALB", "MATKL": "001"},
    ]
    return {
        "tableName": args.get("tableName"),
        "fields": args.get("fields") or ["MANDT", "MATNR", "MTART", "MATKL"],
        "rows": rows[:args.get("maxRows") or 100],
        "totalRows": len(rows),
        "where": args.get("where"),
    }


def get_relationships(args: Dict[str, Any]) -> Dict[str, Any]:
    table = args.get("tableName")
    relationships = [
        {"fromTable": table, "fromField": "MATNR", "toTable": "MAKT", "toField": "MATNR",
         "cardinality": "1:N", "description": "Material Descriptions"},
        {"fromTable": table, "fromField": "MATNR", "toTable": "MARC", "toField": "MATNR",
         "cardinality": "1:N", "description": "Plant Data for Material"},
        {"fromTable": table, "fromField": "MATNR", "toTable": "MARD", "toField": "MATNR",
         "cardinality": "1:N", "description": "Storage Location Data"},
        {"fromTable": table, "fromField": "MTART", "toTable": "T134", "toField": "MTART",
         "cardinality": "N:1", "description": "Material Type Config"},
    ]
    return {
        "tableName": table,
        "depth": args.get("depth") or 1,
        "relationships": relationships,
        "totalRelationships": len(relationships),
    }


def get_function_interface(args: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": args.get("functionModule"),
        "imports": [
            {"name": "MATERIAL", "type": "BAPIMATHEAD", "optional": False, "default": ""},
            {"name": "PLANT", "type": "BAPI_PLANT", "optional": True, "default": ""},
        ],
        "exports": [
            {"name": "RETURN", "type": "BAPIRETURN"},
            {"name": "MATERIAL_GENERAL_DATA", "type": "BAPI_MARA"},
        ],
        "changing": [],
        "tables": [
            {"name": "MATERIALDESCRIPTION", "type": "BAPI_MAKT"},
            {"name": "UNITSOFMEASURE", "type": "BAPI_MARM"},
        ],
    }


def call_bapi(args: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "functionModule": args.get("functionModule"),
        "result": {
            "RETURN": {"TYPE": "S", "ID": "MM", "NUMBER": "000", "MESSAGE": "Success"},
            "MATERIAL_GENERAL_DATA": {"MATERIAL": "MAT-001", "MATL_TYPE": "FERT",
                                      "MATL_GROUP": "001", "BASE_UOM": "EA"},
        },
        "committed": bool(args.get("withCommit", False)),
        "executionTime": 245,
    }


def run_atc_check(args: Dict[str, Any]) -> Dict[str, Any]:
    main = "/sap/bc/adt/programs/programs/Z_TEST/source/main"
    return {
        "objectSet": args.get("objectSet"),
        "checkVariant": args.get("checkVariant") or "S4HANA_READINESS",
        "status": "completed",
        "findings": [
            {"priority": 1, "category": "PERFORMANCE", "messageTitle": "SELECT * used without field list",
             "uri": f"{main}#start=7", "line": 7},
            {"priority": 2, "category": "SECURITY", "messageTitle": "Authority check missing for transaction",
             "uri": f"{main}#start=15", "line": 15},
            {"priority": 3, "category": "CONVENTION", "messageTitle": "Variable naming does not follow convention",
             "uri": f"{main}#start=3", "line": 3},
        ],
        "summary": {"total": 3, "priority1": 1, "priority2": 1, "priority3": 1},
    }


def manage_transport(args: Dict[str, Any]) -> Dict[str, Any]:
    action = args.get("action")
    if action == "create":
        return {
            "action": "create",
            "transportNumber": "DEVK900123",
            "description": args.get("description") or "New transport request",
            "type": args.get("type") or "workbench",
            "owner": "DEVELOPER",
            "status": "modifiable",
            "createdAt": utc_timestamp(),
        }
    if action == "release":
        return {
            "action": "release",
            "transportNumber": args.get("transportNumber"),
            "status": "released",
            "releasedAt": utc_timestamp(),
            "logs": ["Object list checked", "Transport released successfully"],
        }
    if action == "check":
        return {
            "action": "check",
            "transportNumber": args.get("transportNumber"),
            "status": "modifiable",
            "objects": [
                {"pgmid": "R3TR", "object": "PROG", "objName": "Z_TEST_PROGRAM"},
                {"pgmid": "R3TR", "object": "CLAS", "objName": "ZCL_TEST_CLASS"},
            ],
            "owner": "DEVELOPER",
        }
    # list
    return {
        "action": "list",
        "transports": [
            {"number": "DEVK900120", "description": "Initial development", "status": "released", "type": "workbench"},
            {"number": "DEVK900121", "description": "Bug fix CR-100", "status": "modifiable", "type": "workbench"},
            {"number": "DEVK900122", "description": "Config changes", "status": "modifiable", "type": "customizing"},
        ],
    }


def get_cds_view(args: Dict[str, Any]) -> Dict[str, Any]:
    name = args.get("cdsName") or ""
    sql_view = name[:16].upper()
    source = (
        f"@AbapCatalog.sqlViewName: '{sql_view}'\n"
        "@AbapCatalog.compiler.compareFilter: true\n"
        "@AccessControl.authorizationCheck: #CHECK\n"
        f"@EndUserText.label: '{name} View'\n\n"
        f"define view {name} as select from mara\n"
        "  association [0..*] to makt as _Text on $projection.Matnr = _Text.Matnr\n"
        "{\n"
        "  key matnr as Matnr,\n"
        "      mtart as MaterialType,\n"
        "      matkl as MaterialGroup,\n"
        "      meins as BaseUnit,\n"
        "      _Text\n"
        "}\n"
    )
    return {
        "cdsName": name,
        "source": source,
        "annotations": [
            {"name": "@AbapCatalog.sqlViewName", "value": sql_view},
            {"name": "@AccessControl.authorizationCheck", "value": "#CHECK"},
        ],
        "associations": [{"name": "_Text", "target": "makt", "cardinality": "0..*"}],
    }


def get_system_info(args: Dict[str, Any] = None) -> Dict[str, Any]:
    return {
        "systemId": "S4H",
        "client": "100",
        "systemNumber": "00",
        "host": "sap-s4h.example.com",
        "release": "2023",
        "patchLevel": "0005",
        "database": "HDB",
        "databaseVersion": "2.00.070",
        "kernel": "793",
        "operatingSystem": "Linux",
        "abapRelease": "758",
        "components": [
            {"component": "SAP_BASIS", "release": "758", "patchLevel": "0005", "description": "SAP Basis Component"},
            {"component": "SAP_ABA", "release": "758", "patchLevel": "0005",
             "description": "Cross-Application Component"},
            {"component": "S4CORE", "release": "107", "patchLevel": "0003", "description": "S/4HANA Core"},
            {"component": "SAP_UI", "release": "758", "patchLevel": "0005",
             "description": "User Interface Technology"},
        ],
        "installedLanguages": ["EN", "DE", "FR", "ES"],
        "timezone": "UTC",
        "unicode": True,
    }


MOCK_HANDLERS: Dict[str, MockHandler] = {
    "searchObject": search_object,
    "getSource": get_source,
    "writeSource": write_source,
    "getTableStructure": get_table_structure,
    "getTableData": get_table_data,
    "getRelationships": get_relationships,
    "getFunctionInterface": get_function_interface,
    "callBAPI": call_bapi,
    "runATCCheck": run_atc_check,
    "manageTransport": manage_transport,
    "getCDSView": get_cds_view,
    "getSystemInfo": get_system_info,
}
