"""JSON-RPC tool server.

Dispatches ``initialize``, ``tools/list``, ``tools/call``, ``resources/list``,
``resources/read`` and ``ping``. Tool calls route by name:

- ``config_*`` -> ConfigToolHandlers (writes gated by the SafetyBridge)
- ``infor_*`` -> InforToolHandlers
- SAP core tools -> live gateway handlers in live mode, canned data otherwise

``writeSource`` is gated in every mode: the bridge validates an artifact
derived from the object URI before anything is written.
"""

import json
import re
import time
from typing import Any, Dict, Optional

from connectors.gateway import SapGateway
from core.config import Settings, get_settings
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import get_metrics
from core.safety.bridge import SafetyBridge, artifact_from_object_uri
from core.safety.gates import SafetyGates
from tool_server.definitions import RESOURCE_DEFINITIONS, TOOL_DEFINITIONS, get_tool
from tool_server.handlers import ConfigToolHandlers, InforToolHandlers
from tool_server.live import LiveToolHandlers
from tool_server.mock_data import MOCK_HANDLERS
from tool_server.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    error_response,
    success_response,
)

logger = get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "erp-bridge-tools"
SERVER_VERSION = "1.0.0"

WRITE_TOOLS = frozenset({"writeSource"})

_OBJECT_URI = re.compile(r"^sap://objects/([^/]+)/(.+)$")
_STRUCTURE_URI = re.compile(r"^sap://tables/([^/]+)/structure$")
_DATA_URI = re.compile(r"^sap://tables/([^/]+)/data$")

ADT_PATHS = {
    "PROG": "programs/programs",
    "CLAS": "oo/classes",
    "INTF": "oo/interfaces",
    "FUGR": "functions/groups",
    "FUNC": "functions/groups",
    "TABL": "dictionary/structures",
    "DTEL": "dictionary/dataelements",
    "DOMA": "dictionary/domains",
    "DDLS": "ddic/ddl/sources",
    "TTYP": "dictionary/tabletypes",
}


def type_to_adt_path(object_type: str) -> str:
    """ADT collection path for a repository object type."""
    return ADT_PATHS.get(object_type, f"repository/{object_type.lower()}")


def text_content(result: Any) -> Dict[str, Any]:
    """Wrap a tool result as a single text content block."""
    return {"content": [{"type": "text", "text": json.dumps(result, indent=2, default=str)}]}


class ToolServer:
    """JSON-RPC 2.0 dispatcher for the tool and resource surface."""

    def __init__(
        self,
        mode: str = "mock",
        gateway: Optional[SapGateway] = None,
        gates: Optional[SafetyGates] = None,
    ):
        self.mode = mode
        self.gateway = gateway
        self.gates = gates or SafetyGates(mode=mode)
        self.bridge = SafetyBridge(self.gates, mode=mode)
        self.config_handlers = ConfigToolHandlers(self.bridge, mode=mode)
        self.infor_handlers = InforToolHandlers(mode=mode)
        self.live_handlers = LiveToolHandlers(gateway) if gateway is not None else None
        self.initialized = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None,
                      gateway: Optional[SapGateway] = None) -> "ToolServer":
        settings = settings or get_settings()
        gates = SafetyGates(mode=settings.mode, strictness=settings.strictness)
        return cls(mode=settings.mode, gateway=gateway, gates=gates)

    @property
    def is_live(self) -> bool:
        return self.mode == "live" and self.live_handlers is not None

    # =========================================================================
    # Message Handling
    # =========================================================================

    async def process_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Parse one line of input and dispatch it. None means no response."""
        try:
            message = json.loads(line)
        except (json.JSONDecodeError, TypeError):
            return self._error(None, PARSE_ERROR, "Parse error: invalid JSON")

        if isinstance(message, dict) and message.get("jsonrpc") != JSONRPC_VERSION:
            return self._error(message.get("id"), INVALID_REQUEST, 'Invalid Request: jsonrpc must be "2.0"')

        return await self.handle_message(message)

    async def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Dispatch a parsed JSON-RPC message.

        Messages without an ``id`` are notifications: they are processed
        but never answered. Malformed requests are always answered.
        """
        if not isinstance(message, dict):
            return self._error(None, INVALID_REQUEST, "Invalid Request")

        request_id = message.get("id")
        method = message.get("method")
        params = message.get("params")
        is_notification = "id" not in message

        if not method or not isinstance(method, str):
            return self._error(request_id, INVALID_REQUEST, "Invalid Request: missing method")

        if method == "initialized":
            self.initialized = True
            return None if request_id is None else success_response(request_id, {})

        with with_correlation(request_id=request_id):
            logger.debug(f"Handling method: {method}")
            try:
                result = await self._dispatch(method, params if isinstance(params, dict) else {})
            except JsonRpcError as e:
                response = self._error(request_id, e.code, e.message)
            except Exception as e:
                logger.error(f"Error handling {method}: {e}")
                response = self._error(request_id, INTERNAL_ERROR, str(e))
            else:
                response = success_response(request_id, result)

        return None if is_notification else response

    async def _dispatch(self, method: str, params: Dict[str, Any]) -> Any:
        if method == "initialize":
            return self._initialize(params)
        if method == "tools/list":
            return {"tools": [dict(t) for t in TOOL_DEFINITIONS]}
        if method == "tools/call":
            name = params.get("name")
            if not name:
                raise JsonRpcError(INVALID_PARAMS, "Invalid params: missing tool name")
            arguments = params.get("arguments")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                raise JsonRpcError(INVALID_PARAMS, "Invalid params: arguments must be an object")
            return text_content(await self.call_tool(name, arguments))
        if method == "resources/list":
            return {"resources": [dict(r) for r in RESOURCE_DEFINITIONS]}
        if method == "resources/read":
            uri = params.get("uri")
            if not uri:
                raise JsonRpcError(INVALID_PARAMS, "Invalid params: missing resource URI")
            return await self.read_resource(uri)
        if method == "ping":
            return {}
        raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Client initialize", extra_fields={"client_info": params.get("clientInfo")})
        self.initialized = True
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    def _error(self, request_id: Any, code: int, message: str) -> Dict[str, Any]:
        get_metrics().record_rpc_error(code)
        return error_response(request_id, code, message)

    # =========================================================================
    # Tools
    # =========================================================================

    async def call_tool(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        """Validate arguments and run a tool; returns the raw result payload.

        Raises:
            JsonRpcError: a required argument is missing
            ValueError: the tool is not declared
        """
        tool = get_tool(name)
        if tool is None:
            raise ValueError(f"Unknown tool: {name}")

        for field_name in tool["inputSchema"].get("required", []):
            if args.get(field_name) is None:
                raise JsonRpcError(
                    INVALID_PARAMS,
                    f"Invalid params: missing required argument '{field_name}' for tool {name}",
                )

        metrics = get_metrics()
        metrics.record_tool_started(name)
        start = time.perf_counter()

        with with_correlation(tool_name=name):
            logger.info(f"Tool call: {name}")
            try:
                result = await self._route_tool(name, args)
            except Exception:
                metrics.record_tool_failed(name)
                raise
            metrics.record_tool_completed(name, (time.perf_counter() - start) * 1000)
        return result

    async def _route_tool(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        if name.startswith("config_"):
            return await self.config_handlers.handle(name, args)
        if name.startswith("infor_"):
            return await self.infor_handlers.handle(name, args)

        if name in WRITE_TOOLS:
            blocked = await self._gate_write(name, args)
            if blocked is not None:
                return blocked

        return await self._sap_call(name, args)

    async def _sap_call(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        if self.is_live:
            return await self.live_handlers.handle(name, args)
        handler = MOCK_HANDLERS.get(name)
        if handler is None:
            raise ValueError(f"No mock handler for tool: {name}")
        return handler(args)

    async def _gate_write(self, name: str, args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Run the safety gates for a write. Returns the blocked payload, or None to proceed."""
        uri = args.get("objectUri")
        artifact = artifact_from_object_uri(uri, args.get("source"), args.get("transport"))
        decision = await self.bridge.check(
            tool_name=name,
            operation=f"Write source to {uri}",
            artifact=artifact,
        )
        if decision.allowed:
            return None

        logger.warning(f"{name} blocked for {artifact.name}: {decision.reason}")
        return {
            "uri": uri,
            "status": "blocked",
            "reason": decision.reason,
            "gateResults": [r.to_dict() for r in decision.gate_results],
        }

    # =========================================================================
    # Resources
    # =========================================================================

    async def read_resource(self, uri: str) -> Dict[str, Any]:
        """Resolve a ``sap://`` resource URI to a single content entry."""
        logger.info(f"Resource read: {uri}")

        if uri == "sap://system/info":
            text = json.dumps(await self._sap_call("getSystemInfo", {}), indent=2, default=str)
            mime_type = "application/json"
        elif _OBJECT_URI.match(uri):
            object_type, name = _OBJECT_URI.match(uri).groups()
            object_uri = f"/sap/bc/adt/{type_to_adt_path(object_type)}/{name}"
            text = (await self._sap_call("getSource", {"objectUri": object_uri}))["source"]
            mime_type = "text/plain"
        elif _STRUCTURE_URI.match(uri):
            table_name = _STRUCTURE_URI.match(uri).group(1)
            result = await self._sap_call("getTableStructure", {"tableName": table_name})
            text = json.dumps(result, indent=2, default=str)
            mime_type = "application/json"
        elif _DATA_URI.match(uri):
            table_name = _DATA_URI.match(uri).group(1)
            result = await self._sap_call("getTableData", {"tableName": table_name, "maxRows": 10})
            text = json.dumps(result, indent=2, default=str)
            mime_type = "application/json"
        else:
            raise ValueError(f"Unknown resource URI: {uri}")

        return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}
