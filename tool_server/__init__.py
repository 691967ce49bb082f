"""JSON-RPC tool server.

Exposes SAP, configuration and Infor tools plus ``sap://`` resources to
tool-calling clients over line-delimited JSON-RPC 2.0 on stdio.
"""

from tool_server.definitions import RESOURCE_DEFINITIONS, TOOL_DEFINITIONS
from tool_server.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
)
from tool_server.server import PROTOCOL_VERSION, ToolServer
from tool_server.stdio import LineBuffer, run_stdio, serve_lines

__all__ = [
    # Server
    "ToolServer",
    "PROTOCOL_VERSION",
    "TOOL_DEFINITIONS",
    "RESOURCE_DEFINITIONS",
    # Protocol
    "JsonRpcError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    # Transport
    "LineBuffer",
    "serve_lines",
    "run_stdio",
]
