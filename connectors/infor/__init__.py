"""Infor Connector Package.

Implements the SourceAdapter interface for Infor LN, M3, CloudSuite
Industrial and Lawson.
"""

from connectors.infor.adapters import (
    InforAdapter,
    InforCsiAdapter,
    InforLawsonAdapter,
    InforLnAdapter,
    InforM3Adapter,
)

__all__ = [
    "InforAdapter",
    "InforLnAdapter",
    "InforM3Adapter",
    "InforCsiAdapter",
    "InforLawsonAdapter",
]
