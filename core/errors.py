"""Error hierarchy for the integration toolkit.

Entity and mapping errors are raised to the caller. The tool server turns
anything that escapes a handler into a JSON-RPC internal error frame.
"""

from typing import List, Optional


class ErpBridgeError(Exception):
    """Base class for all toolkit errors."""


# =============================================================================
# Canonical Model Errors
# =============================================================================

class CanonicalMappingError(ErpBridgeError):
    """Raised for canonical entity and source-mapping problems."""


class AbstractEntityError(CanonicalMappingError):
    """Raised when the untyped base entity is instantiated directly."""


class UnsupportedSourceError(CanonicalMappingError):
    """Raised when a source-mapping lookup names an unknown source system."""

    def __init__(self, source_system: str, supported: List[str]):
        self.source_system = source_system
        self.supported = list(supported)
        super().__init__(
            f"Unsupported source system: {source_system}. "
            f"Supported: {', '.join(self.supported)}"
        )


class UnknownEntityTypeError(CanonicalMappingError):
    """Raised when the registry is asked for an unregistered entity type."""

    def __init__(self, entity_type: str, available: List[str]):
        self.entity_type = entity_type
        self.available = list(available)
        super().__init__(
            f"Unknown entity type: {entity_type}. "
            f"Available: {', '.join(self.available)}"
        )


class MappingNotFoundError(CanonicalMappingError):
    """Raised by from_source when a known system has no table for the entity."""

    def __init__(self, source_system: str, entity_type: str):
        self.source_system = source_system
        self.entity_type = entity_type
        super().__init__(
            f"No mappings found for source '{source_system}' entity '{entity_type}'"
        )


# =============================================================================
# Safety Pipeline Errors
# =============================================================================

class SafetyGateError(ErpBridgeError):
    """Raised for invalid gate registration, strictness or artifact input."""


class ApprovalError(ErpBridgeError):
    """Raised when an approval transition is not allowed."""

    def __init__(self, message: str, approval_id: Optional[str] = None, not_found: bool = False):
        self.approval_id = approval_id
        self.not_found = not_found
        super().__init__(message)


# =============================================================================
# Adapter Errors
# =============================================================================

class AdapterError(ErpBridgeError):
    """Raised for adapter registry and adapter runtime problems."""
