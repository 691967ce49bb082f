"""Canonical entities - vendor-neutral records built from any source ERP.

A canonical entity is a tag (the entity type) plus a mutable field map.
Validation and serialization are plain functions over (schema, data); the
entity classes are thin typed wrappers that bind a schema and a mapping
resolver.

Usage:
    item = Item(resolver=resolver).from_source("SAP", {"MATNR": "MAT-1", ...})
    result = item.validate()
    payload = item.to_json()   # {"_entityType": "Item", "_timestamp": "...", ...}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from core.errors import AbstractEntityError, UnknownEntityTypeError
from core.mapping.engine import MappingResolver, get_resolver
from core.models.schemas import (
    ENTITY_SCHEMAS,
    EntitySchema,
    EntityType,
    FieldDefinition,
    FieldType,
)
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)


# =============================================================================
# Value Checks
# =============================================================================

_DATE_FORMATS = ("%Y-%m-%d", "%Y%m%d")


def _is_date_string(value: str) -> bool:
    """True for ISO dates (2025-03-15), compact dates (20250315) and ISO timestamps."""
    s = value.strip()
    if not s:
        return False
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(s, fmt)
            return True
        except ValueError:
            continue
    try:
        datetime.fromisoformat(s.replace("Z", "+00:00"))
        return True
    except ValueError:
        return False


def _type_name(value: Any) -> str:
    """Runtime type name used in validation messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, (date, datetime)):
        return "date"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _matches_type(value: Any, field_type: FieldType) -> bool:
    if field_type == FieldType.STRING:
        return isinstance(value, str)
    if field_type == FieldType.NUMBER:
        return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
    if field_type == FieldType.BOOLEAN:
        return isinstance(value, bool)
    if field_type == FieldType.ARRAY:
        return isinstance(value, (list, tuple))
    if field_type == FieldType.DATE:
        if isinstance(value, (date, datetime)):
            return True
        return isinstance(value, str) and _is_date_string(value)
    return False


def _type_error(name: str, definition: FieldDefinition, value: Any) -> str:
    actual = _type_name(value)
    if definition.type == FieldType.DATE:
        return f"Field '{name}' must be a date or ISO date string, got {actual}"
    article = "an" if definition.type == FieldType.ARRAY else "a"
    return f"Field '{name}' must be {article} {definition.type.value}, got {actual}"


# =============================================================================
# Validation and Serialization
# =============================================================================

@dataclass
class ValidationResult:
    """Outcome of validating a canonical record."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


def validate_data(schema: EntitySchema, data: Mapping[str, Any]) -> ValidationResult:
    """Validate a field map against a schema.

    Pass 1 reports missing required fields (absent, None or "").
    Pass 2 checks declared type and max length for every present field that
    has a definition. Unknown fields are ignored.
    """
    errors: List[str] = []

    for name in sorted(schema.required_fields):
        value = data.get(name)
        if value is None or value == "":
            errors.append(f"Missing required field: {name}")

    for name, value in data.items():
        if value is None:
            continue
        definition = schema.field_definitions.get(name)
        if definition is None:
            continue

        if not _matches_type(value, definition.type):
            errors.append(_type_error(name, definition, value))

        if definition.max_length and isinstance(value, str) and len(value) > definition.max_length:
            errors.append(
                f"Field '{name}' exceeds max length {definition.max_length} (got {len(value)})"
            )

    return ValidationResult(valid=not errors, errors=errors)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-03-15T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def serialize(entity_type: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Serialize a record with `_entityType` and a fresh `_timestamp` first."""
    payload: Dict[str, Any] = {
        "_entityType": entity_type,
        "_timestamp": utc_timestamp(),
    }
    payload.update(data)
    return payload


def validate_entity(entity_type: str, data: Mapping[str, Any]) -> ValidationResult:
    """Validate a field map tagged with an entity type name.

    Raises:
        UnknownEntityTypeError: if no schema is registered for the tag
    """
    schema = ENTITY_SCHEMAS.get(entity_type)
    if schema is None:
        raise UnknownEntityTypeError(entity_type, list(ENTITY_SCHEMAS.keys()))
    return validate_data(schema, data)


# =============================================================================
# Entity Base
# =============================================================================

class CanonicalEntity:
    """Base for all canonical entities.

    Concrete entity classes set ``schema``; instantiating the base directly
    raises AbstractEntityError.
    """

    schema: ClassVar[Optional[EntitySchema]] = None

    def __init__(self, data: Optional[Mapping[str, Any]] = None, resolver: Optional[MappingResolver] = None):
        if self.schema is None:
            raise AbstractEntityError(
                f"{type(self).__name__} is abstract; instantiate a concrete entity type"
            )
        self.data: Dict[str, Any] = dict(data or {})
        self._resolver = resolver

    @property
    def entity_type(self) -> str:
        return self.schema.entity_type

    @property
    def required_fields(self) -> List[str]:
        return sorted(self.schema.required_fields)

    @property
    def field_definitions(self) -> Mapping[str, FieldDefinition]:
        return self.schema.field_definitions

    @property
    def resolver(self) -> MappingResolver:
        return self._resolver or get_resolver()

    def from_source(self, source_system: str, record: Mapping[str, Any]) -> "CanonicalEntity":
        """Populate fields from a raw source record. Returns self for chaining.

        Raises:
            UnsupportedSourceError: unknown source system
            MappingNotFoundError: no table for this entity under the system
        """
        with with_correlation(source_system=source_system, entity_type=self.entity_type):
            mapped = self.resolver.apply(source_system, self.entity_type, record)
            self.data.update(mapped)
            logger.debug(
                f"Mapped {len(mapped)} fields from {source_system}",
                extra_fields={"field_count": len(mapped)},
            )
        return self

    def validate(self) -> ValidationResult:
        return validate_data(self.schema, self.data)

    def to_json(self) -> Dict[str, Any]:
        return serialize(self.entity_type, self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data!r})"


# =============================================================================
# Concrete Entities
# =============================================================================

def _entity(entity_type: EntityType) -> EntitySchema:
    return ENTITY_SCHEMAS[entity_type.value]


class Item(CanonicalEntity):
    schema = _entity(EntityType.ITEM)


class Customer(CanonicalEntity):
    schema = _entity(EntityType.CUSTOMER)


class Vendor(CanonicalEntity):
    schema = _entity(EntityType.VENDOR)


class ChartOfAccounts(CanonicalEntity):
    schema = _entity(EntityType.CHART_OF_ACCOUNTS)


class SalesOrder(CanonicalEntity):
    schema = _entity(EntityType.SALES_ORDER)


class PurchaseOrder(CanonicalEntity):
    schema = _entity(EntityType.PURCHASE_ORDER)


class ProductionOrder(CanonicalEntity):
    schema = _entity(EntityType.PRODUCTION_ORDER)


class Inventory(CanonicalEntity):
    schema = _entity(EntityType.INVENTORY)


class GlEntry(CanonicalEntity):
    schema = _entity(EntityType.GL_ENTRY)


class Employee(CanonicalEntity):
    schema = _entity(EntityType.EMPLOYEE)


class Bom(CanonicalEntity):
    schema = _entity(EntityType.BOM)


class Routing(CanonicalEntity):
    schema = _entity(EntityType.ROUTING)


class FixedAsset(CanonicalEntity):
    schema = _entity(EntityType.FIXED_ASSET)


class CostCenter(CanonicalEntity):
    schema = _entity(EntityType.COST_CENTER)


BUILTIN_ENTITIES = (
    Item,
    Customer,
    Vendor,
    ChartOfAccounts,
    SalesOrder,
    PurchaseOrder,
    ProductionOrder,
    Inventory,
    GlEntry,
    Employee,
    Bom,
    Routing,
    FixedAsset,
    CostCenter,
)
