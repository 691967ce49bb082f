"""Prefix-routed tool handler groups (``config_*`` and ``infor_*``)."""

from tool_server.handlers.config_tools import ConfigToolHandlers
from tool_server.handlers.infor_tools import InforToolHandlers

__all__ = [
    "ConfigToolHandlers",
    "InforToolHandlers",
]
