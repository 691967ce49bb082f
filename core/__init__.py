"""Core module - ERP-neutral canonical model, mapping and safety pipeline.

This module contains the canonical entity schemas, the source-mapping
tables, the safety-gate engine, audit and observability components. It is
intentionally ERP-agnostic.

Source-specific access (SAP, Infor LN/M3/CSI/Lawson) belongs in /connectors/.
"""

__version__ = "1.0.0"
