"""Live SAP gateway interface.

The capability set the live tool path needs from an SAP development and
runtime connection (ADT for repository objects, RFC for tables and function
modules, CTS for transports). Implementations wrap real wire clients; tests
double it with ``unittest.mock``.

All methods are coroutines.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class SapGateway(ABC):
    """External collaborator behind the live SAP tools."""

    # =========================================================================
    # Repository Objects (ADT)
    # =========================================================================

    @abstractmethod
    async def search_objects(self, query: str, object_type: Optional[str] = None,
                             max_results: int = 50) -> List[Dict[str, Any]]:
        """Search repository objects; returns [{name, type, uri, description}]."""
        pass

    @abstractmethod
    async def get_object_source(self, object_uri: str) -> str:
        pass

    @abstractmethod
    async def lock_object(self, object_uri: str) -> str:
        """Lock an object for editing; returns the lock handle."""
        pass

    @abstractmethod
    async def write_object_source(self, object_uri: str, source: str, lock_handle: str) -> None:
        pass

    @abstractmethod
    async def unlock_object(self, object_uri: str, lock_handle: str) -> None:
        pass

    # =========================================================================
    # Dictionary and Data (RFC)
    # =========================================================================

    @abstractmethod
    async def get_table_structure(self, table_name: str) -> Dict[str, Any]:
        """Field definitions: {tableName, fields: [...], ...}."""
        pass

    @abstractmethod
    async def read_table(self, table_name: str, fields: Optional[List[str]] = None,
                         where: Optional[str] = None, max_rows: int = 100) -> Dict[str, Any]:
        """Rows: {rows: [...], totalRows, fields}."""
        pass

    @abstractmethod
    async def discover_foreign_keys(self, table_name: str, depth: int = 1) -> List[Dict[str, Any]]:
        pass

    # =========================================================================
    # Function Modules (RFC)
    # =========================================================================

    @abstractmethod
    async def get_function_interface(self, function_module: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def call_function(self, function_module: str, imports: Optional[Dict[str, Any]] = None,
                            tables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def call_function_with_commit(self, function_module: str, imports: Optional[Dict[str, Any]] = None,
                                        tables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call a BAPI followed by BAPI_TRANSACTION_COMMIT."""
        pass

    # =========================================================================
    # Quality and Transports
    # =========================================================================

    @abstractmethod
    async def run_atc_check(self, object_set: str, check_variant: str = "S4HANA_READINESS") -> Dict[str, Any]:
        pass

    @abstractmethod
    async def create_transport(self, description: str, transport_type: str = "workbench") -> Dict[str, Any]:
        pass

    @abstractmethod
    async def release_transport(self, transport_number: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def check_transport(self, transport_number: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def list_transports(self) -> Dict[str, Any]:
        pass

    # =========================================================================
    # System
    # =========================================================================

    @abstractmethod
    async def get_system_info(self) -> Dict[str, Any]:
        """Raw RFC_SYSTEM_INFO result: {"RFCSI_EXPORT": {...}}."""
        pass
