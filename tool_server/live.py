"""Live SAP tool handlers.

Translate tool arguments into ``SapGateway`` calls and shape the results
like the mock payloads.
"""

import time
from typing import Any, Awaitable, Callable, Dict

from connectors.gateway import SapGateway
from core.models.canonical import utc_timestamp
from core.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHECK_VARIANT = "S4HANA_READINESS"


class LiveToolHandlers:
    """SAP core tools backed by a live gateway."""

    def __init__(self, gateway: SapGateway):
        self.gateway = gateway
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "searchObject": self.search_object,
            "getSource": self.get_source,
            "writeSource": self.write_source,
            "getTableStructure": self.get_table_structure,
            "getTableData": self.get_table_data,
            "getRelationships": self.get_relationships,
            "getFunctionInterface": self.get_function_interface,
            "callBAPI": self.call_bapi,
            "runATCCheck": self.run_atc_check,
            "manageTransport": self.manage_transport,
            "getCDSView": self.get_cds_view,
            "getSystemInfo": self.get_system_info,
        }

    def supports(self, tool_name: str) -> bool:
        return tool_name in self._handlers

    async def handle(self, tool_name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        handler = self._handlers.get(tool_name)
        if handler is None:
            raise ValueError(f"No live handler for tool: {tool_name}")
        return await handler(args)

    # =========================================================================
    # Repository Objects
    # =========================================================================

    async def search_object(self, args: Dict[str, Any]) -> Dict[str, Any]:
        results = await self.gateway.search_objects(
            args["query"],
            object_type=args.get("objectType"),
            max_results=args.get("maxResults") or 50,
        )
        return {"results": results, "totalResults": len(results), "query": args["query"]}

    async def get_source(self, args: Dict[str, Any]) -> Dict[str, Any]:
        source = await self.gateway.get_object_source(args["objectUri"])
        return {"uri": args["objectUri"], "source": source, "language": "abap", "length": len(source)}

    async def write_source(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Lock, write, unlock. Unlock always runs; its failure is logged only."""
        uri = args["objectUri"]
        lock_token = await self.gateway.lock_object(uri)
        try:
            await self.gateway.write_object_source(uri, args["source"], lock_token)
            return {
                "uri": uri,
                "status": "saved",
                "lockToken": lock_token,
                "timestamp": utc_timestamp(),
                "warnings": [],
            }
        finally:
            try:
                await self.gateway.unlock_object(uri, lock_token)
            except Exception as e:
                logger.warning(f"Unlock failed for {uri}: {e}")

    # =========================================================================
    # Dictionary and Data
    # =========================================================================

    async def get_table_structure(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return await self.gateway.get_table_structure(args["tableName"])

    async def get_table_data(self, args: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.gateway.read_table(
            args["tableName"],
            fields=args.get("fields"),
            where=args.get("where"),
            max_rows=args.get("maxRows") or 100,
        )
        return {"tableName": args["tableName"], **result, "where": args.get("where")}

    async def get_relationships(self, args: Dict[str, Any]) -> Dict[str, Any]:
        depth = args.get("depth") or 1
        relationships = await self.gateway.discover_foreign_keys(args["tableName"], depth=depth)
        return {
            "tableName": args["tableName"],
            "depth": depth,
            "relationships": relationships,
            "totalRelationships": len(relationships),
        }

    # =========================================================================
    # Function Modules
    # =========================================================================

    async def get_function_interface(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return await self.gateway.get_function_interface(args["functionModule"])

    async def call_bapi(self, args: Dict[str, Any]) -> Dict[str, Any]:
        start = time.perf_counter()
        with_commit = bool(args.get("withCommit", False))
        if with_commit:
            result = await self.gateway.call_function_with_commit(
                args["functionModule"], args.get("imports") or {}, args.get("tables") or {}
            )
        else:
            result = await self.gateway.call_function(
                args["functionModule"], args.get("imports") or {}, args.get("tables") or {}
            )
        return {
            "functionModule": args["functionModule"],
            "result": result,
            "committed": with_commit,
            "executionTime": round((time.perf_counter() - start) * 1000),
        }

    # =========================================================================
    # Quality and Transports
    # =========================================================================

    async def run_atc_check(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return await self.gateway.run_atc_check(
            args["objectSet"], check_variant=args.get("checkVariant") or DEFAULT_CHECK_VARIANT
        )

    async def manage_transport(self, args: Dict[str, Any]) -> Dict[str, Any]:
        action = args.get("action")
        if action == "create":
            return await self.gateway.create_transport(
                args.get("description") or "", transport_type=args.get("type") or "workbench"
            )
        if action == "release":
            return await self.gateway.release_transport(args.get("transportNumber"))
        if action == "check":
            return await self.gateway.check_transport(args.get("transportNumber"))
        if action == "list":
            return await self.gateway.list_transports()
        raise ValueError(f"Unknown transport action: {action}")

    async def get_cds_view(self, args: Dict[str, Any]) -> Dict[str, Any]:
        name = args["cdsName"]
        source = await self.gateway.get_object_source(f"/sap/bc/adt/ddic/ddl/sources/{name.lower()}")
        return {"cdsName": name, "source": source, "annotations": [], "associations": []}

    # =========================================================================
    # System
    # =========================================================================

    async def get_system_info(self, args: Dict[str, Any] = None) -> Dict[str, Any]:
        raw = await self.gateway.get_system_info()
        info = raw.get("RFCSI_EXPORT", raw)

        def text(key: str) -> str:
            return str(info.get(key) or "").strip()

        return {
            "systemId": text("RFCSYSID"),
            "client": text("RFCCLIENT"),
            "host": text("RFCHOST"),
            "release": text("RFCSAPRL"),
            "database": text("RFCDBSYS"),
            "operatingSystem": text("RFCOPSYS"),
            "kernel": text("RFCKERNRL"),
            "unicode": info.get("RFCUNICODE") == "X",
        }
