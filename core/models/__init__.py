"""Core data models - ERP-neutral canonical types.

This package contains the canonical entity schemas and entities, which are
intentionally independent of any specific ERP system, plus the models the
safety pipeline passes around.
"""

from core.models.schemas import (
    ENTITY_SCHEMAS,
    EntitySchema,
    EntityType,
    FieldDefinition,
    FieldType,
    get_schema,
    list_entity_types,
)

from core.models.canonical import (
    # Base
    CanonicalEntity,
    ValidationResult,
    serialize,
    validate_data,
    validate_entity,

    # Master data
    Item,
    Customer,
    Vendor,
    ChartOfAccounts,
    Employee,
    FixedAsset,
    CostCenter,

    # Transactions
    SalesOrder,
    PurchaseOrder,
    ProductionOrder,
    Inventory,
    GlEntry,

    # Manufacturing
    Bom,
    Routing,
)

from core.models.registry import EntityRegistry, build_default_registry, get_registry

from core.models.refs import (
    ApprovalRequest,
    ApprovalStatus,
    Artifact,
    ArtifactType,
    AuditEntry,
    GateResult,
    GateStatus,
    GateSummary,
    OverallStatus,
    Strictness,
    ValidationReport,
)

__all__ = [
    # Schemas
    "ENTITY_SCHEMAS",
    "EntitySchema",
    "EntityType",
    "FieldDefinition",
    "FieldType",
    "get_schema",
    "list_entity_types",

    # Base
    "CanonicalEntity",
    "ValidationResult",
    "serialize",
    "validate_data",
    "validate_entity",

    # Entities
    "Item",
    "Customer",
    "Vendor",
    "ChartOfAccounts",
    "Employee",
    "FixedAsset",
    "CostCenter",
    "SalesOrder",
    "PurchaseOrder",
    "ProductionOrder",
    "Inventory",
    "GlEntry",
    "Bom",
    "Routing",

    # Registry
    "EntityRegistry",
    "build_default_registry",
    "get_registry",

    # Safety pipeline
    "ApprovalRequest",
    "ApprovalStatus",
    "Artifact",
    "ArtifactType",
    "AuditEntry",
    "GateResult",
    "GateStatus",
    "GateSummary",
    "OverallStatus",
    "Strictness",
    "ValidationReport",
]
