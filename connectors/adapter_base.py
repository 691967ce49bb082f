"""Abstract Source Adapter Interface.

This module defines the interface every source-ERP adapter implements. It is
intentionally ERP-agnostic: no SAP or Infor specifics here.

Adapters:
1. Connect to their source system (or pretend to, in mock mode)
2. Read raw table rows and query entities
3. Report system info and health
4. Feed raw rows through the mapping resolver into canonical entities

Key Design Principles:
- Tool handlers and health checks depend ONLY on this interface
- Mock mode returns small, schema-shaped canned data with no I/O
- Live mode delegates to an injected wire client; adapters never open sockets
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from core.errors import AdapterError
from core.mapping.engine import MappingResolver
from core.models.canonical import CanonicalEntity
from core.models.registry import EntityRegistry, get_registry
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)

MOCK_MAX_ROWS = 5
MOCK_LATENCY_MS = 5


# =============================================================================
# Enums and Config
# =============================================================================

class AdapterMode(str, Enum):
    """Adapter operating mode."""
    MOCK = "mock"
    LIVE = "live"


@dataclass
class AdapterConfig:
    """Configuration for a source adapter.

    ``client`` is the live wire client (RFC, OData, ION, database...). It is
    only consulted in live mode and is expected to expose async
    ``read_table``, ``query_entities`` and ``get_system_info``.
    """
    mode: str = AdapterMode.MOCK.value
    client: Optional[Any] = None
    company: Optional[str] = None                # LN company / M3 company / CSI site
    custom_settings: Dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Abstract Adapter Interface
# =============================================================================

class SourceAdapter(ABC):
    """Abstract base class for source-ERP adapters.

    Subclasses name their ``source_system`` and may override ``mock_tables``
    with realistic rows keyed by table name. Unknown tables get synthesized
    ``<TABLE>_<FIELD>_VALUE`` rows.
    """

    mock_tables: ClassVar[Dict[str, List[Dict[str, Any]]]] = {}
    default_mock_fields: ClassVar[List[str]] = ["FIELD1", "FIELD2", "FIELD3"]

    def __init__(self, config: Optional[AdapterConfig] = None):
        """Initialize adapter with configuration."""
        self.config = config or AdapterConfig()
        if self.config.mode not in (AdapterMode.MOCK.value, AdapterMode.LIVE.value):
            raise AdapterError(f"Invalid adapter mode: {self.config.mode}")
        self._connected = False

    @property
    @abstractmethod
    def source_system(self) -> str:
        """Source system identifier, e.g. SAP or INFOR_LN."""
        pass

    @property
    def mode(self) -> str:
        return self.config.mode

    @property
    def is_mock(self) -> bool:
        return self.config.mode == AdapterMode.MOCK.value

    @property
    def connected(self) -> bool:
        return self._connected

    def _require_client(self) -> Any:
        if self.config.client is None:
            raise AdapterError(f"{self.source_system} adapter requires a client for live mode")
        return self.config.client

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def connect(self) -> Dict[str, Any]:
        """Connect to the source system.

        Raises:
            AdapterError: in live mode without a client
        """
        if not self.is_mock:
            self._require_client()
        self._connected = True
        logger.info(f"{self.source_system} adapter connected ({self.mode} mode)")
        return {"success": True, "systemInfo": await self.get_system_info()}

    async def disconnect(self) -> None:
        self._connected = False
        logger.info(f"{self.source_system} adapter disconnected")

    def get_status(self) -> Dict[str, Any]:
        return {
            "sourceSystem": self.source_system,
            "mode": self.mode,
            "connected": self._connected,
        }

    # =========================================================================
    # Data Access
    # =========================================================================

    async def read_table(
        self,
        table_name: str,
        fields: Optional[List[str]] = None,
        where: Optional[str] = None,
        max_rows: int = 100,
    ) -> Dict[str, Any]:
        """Read rows from a source table.

        Returns:
            {"rows": [...], "totalRows": n, "fields": [...]}
        """
        if self.is_mock:
            return self._mock_read_table(table_name, fields, max_rows)
        client = self._require_client()
        return await client.read_table(table_name, fields=fields, where=where, max_rows=max_rows)

    async def query_entities(self, entity_type: str, filter: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Query business entities.

        Returns:
            {"entities": [...], "totalCount": n}
        """
        if self.is_mock:
            return self._mock_query_entities(entity_type)
        client = self._require_client()
        return await client.query_entities(entity_type, filter or {})

    @abstractmethod
    async def get_system_info(self) -> Dict[str, Any]:
        """Describe the connected source system."""
        pass

    async def health_check(self) -> Dict[str, Any]:
        """Returns {healthy, latency_ms, details}."""
        if self.is_mock:
            return {
                "healthy": True,
                "latency_ms": MOCK_LATENCY_MS,
                "details": {"mode": self.mode, "connected": self._connected},
            }

        start = time.perf_counter()
        try:
            await self.get_system_info()
            return {
                "healthy": True,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                "details": {"mode": self.mode, "connected": self._connected},
            }
        except Exception as e:
            logger.warning(f"{self.source_system} health check failed: {e}")
            return {
                "healthy": False,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                "details": {"mode": self.mode, "connected": False, "error": str(e)},
            }

    async def read_canonical(
        self,
        entity_type: str,
        table_name: str,
        options: Optional[Mapping[str, Any]] = None,
        resolver: Optional[MappingResolver] = None,
        registry: Optional[EntityRegistry] = None,
    ) -> List[CanonicalEntity]:
        """Read raw rows and map each into a canonical entity.

        ``options`` accepts ``fields``, ``where`` and ``max_rows``.

        Raises:
            UnknownEntityTypeError: entity type is not registered
            MappingNotFoundError: no mapping for this source and entity
        """
        options = options or {}
        registry = registry or get_registry()

        with with_correlation(source_system=self.source_system, entity_type=entity_type):
            result = await self.read_table(
                table_name,
                fields=options.get("fields"),
                where=options.get("where"),
                max_rows=options.get("max_rows", 100),
            )
            entities = [
                registry.create(entity_type, resolver=resolver).from_source(self.source_system, row)
                for row in result.get("rows", [])
            ]
            logger.debug(f"Mapped {len(entities)} {entity_type} rows from {table_name}")
        return entities

    # =========================================================================
    # Mock Data
    # =========================================================================

    def _mock_read_table(self, table_name: str, fields: Optional[List[str]], max_rows: int) -> Dict[str, Any]:
        count = min(max_rows if max_rows is not None else 100, MOCK_MAX_ROWS)
        canned = self.mock_tables.get(table_name.upper()) or self.mock_tables.get(table_name)

        if canned:
            names = list(fields) if fields else list(canned[0].keys())
            rows = [
                {**{f: row.get(f) for f in names}, "ROW_INDEX": i + 1}
                for i, row in enumerate(canned[:count])
            ]
        else:
            names = list(fields) if fields else list(self.default_mock_fields)
            template = {f: f"{table_name}_{f}_VALUE" for f in names}
            rows = [{**template, "ROW_INDEX": i + 1} for i in range(count)]

        return {"rows": rows, "totalRows": len(rows), "fields": names + ["ROW_INDEX"]}

    def _mock_query_entities(self, entity_type: str) -> Dict[str, Any]:
        entities = [
            {"ID": "1001", "Name": f"{entity_type} Entity 1", "Status": "Active"},
            {"ID": "1002", "Name": f"{entity_type} Entity 2", "Status": "Active"},
            {"ID": "1003", "Name": f"{entity_type} Entity 3", "Status": "Inactive"},
        ]
        return {"entities": entities, "totalCount": len(entities)}


# =============================================================================
# Adapter Factory
# =============================================================================

_adapter_registry: Dict[str, type] = {}


def register_adapter(adapter_type: str):
    """Decorator to register an adapter implementation under an upper-cased name."""
    def decorator(cls):
        _adapter_registry[adapter_type.upper()] = cls
        return cls
    return decorator


def build_adapter(adapter_type: str, config: Optional[AdapterConfig] = None) -> SourceAdapter:
    """Construct an adapter without connecting.

    Raises:
        AdapterError: If adapter_type is not registered
    """
    key = (adapter_type or "").upper()
    if key not in _adapter_registry:
        available = list(_adapter_registry.keys())
        raise AdapterError(
            f"Unknown adapter type: {adapter_type}. "
            f"Available: {', '.join(available)}"
        )
    return _adapter_registry[key](config)


async def create_adapter(
    adapter_type: str,
    config: Optional[AdapterConfig] = None,
    connect: bool = False,
) -> SourceAdapter:
    """Create an adapter instance and optionally connect it.

    Args:
        adapter_type: Registered name, case-insensitive (SAP, INFOR_LN, ...)
        config: Adapter configuration; mock mode when omitted
        connect: Connect before returning

    Returns:
        Configured adapter instance
    """
    adapter = build_adapter(adapter_type, config)
    if connect:
        await adapter.connect()
    return adapter


def list_available_adapters() -> List[str]:
    """List all registered adapter types."""
    return list(_adapter_registry.keys())
