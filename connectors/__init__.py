"""Source ERP connectors.

Importing this package registers every built-in adapter with the factory.
"""

from connectors.adapter_base import (
    AdapterConfig,
    AdapterMode,
    SourceAdapter,
    build_adapter,
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from connectors.gateway import SapGateway
from connectors.infor import (
    InforCsiAdapter,
    InforLawsonAdapter,
    InforLnAdapter,
    InforM3Adapter,
)
from connectors.sap import SapAdapter

__all__ = [
    # Interface and factory
    "AdapterConfig",
    "AdapterMode",
    "SourceAdapter",
    "build_adapter",
    "create_adapter",
    "list_available_adapters",
    "register_adapter",
    # Live gateway
    "SapGateway",
    # Adapters
    "SapAdapter",
    "InforLnAdapter",
    "InforM3Adapter",
    "InforCsiAdapter",
    "InforLawsonAdapter",
]
