"""SAP Connector Package.

Implements the SourceAdapter interface for SAP ECC / S/4HANA.
"""

from connectors.sap.adapter import SapAdapter

__all__ = ["SapAdapter"]
