"""Canonical entity schemas (OAGIS-aligned).

One schema per entity type: the set of required fields plus a definition
for every known field. Schemas are built once at import time and are
read-only afterwards. Field names follow the canonical camelCase names used
on the wire, e.g. ``itemId`` or ``baseUom``.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional


class FieldType(str, Enum):
    """Declared type of a canonical field."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ARRAY = "array"


class EntityType(str, Enum):
    """Built-in canonical entity types."""
    ITEM = "Item"
    CUSTOMER = "Customer"
    VENDOR = "Vendor"
    CHART_OF_ACCOUNTS = "ChartOfAccounts"
    SALES_ORDER = "SalesOrder"
    PURCHASE_ORDER = "PurchaseOrder"
    PRODUCTION_ORDER = "ProductionOrder"
    INVENTORY = "Inventory"
    GL_ENTRY = "GlEntry"
    EMPLOYEE = "Employee"
    BOM = "Bom"
    ROUTING = "Routing"
    FIXED_ASSET = "FixedAsset"
    COST_CENTER = "CostCenter"


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a single canonical field."""
    type: FieldType
    required: bool = False
    max_length: Optional[int] = None  # strings only
    description: str = ""

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "type": self.type.value,
            "required": self.required,
            "description": self.description,
        }
        if self.max_length is not None:
            data["maxLength"] = self.max_length
        return data


@dataclass(frozen=True)
class EntitySchema:
    """Required field set and field definitions for one entity type.

    Every name in ``required_fields`` has a definition with ``required=True``;
    this is checked on construction.
    """
    entity_type: str
    field_definitions: Mapping[str, FieldDefinition]
    required_fields: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        for name in self.required_fields:
            definition = self.field_definitions.get(name)
            if definition is None or not definition.required:
                raise ValueError(
                    f"Schema {self.entity_type}: required field '{name}' "
                    f"must have a definition with required=True"
                )

    def to_dict(self) -> Dict[str, object]:
        return {
            "entityType": self.entity_type,
            "requiredFields": sorted(self.required_fields),
            "fieldDefinitions": {k: v.to_dict() for k, v in self.field_definitions.items()},
        }


def _s(description: str, required: bool = False, max_length: Optional[int] = None) -> FieldDefinition:
    return FieldDefinition(FieldType.STRING, required, max_length, description)


def _n(description: str, required: bool = False) -> FieldDefinition:
    return FieldDefinition(FieldType.NUMBER, required, None, description)


def _d(description: str, required: bool = False) -> FieldDefinition:
    return FieldDefinition(FieldType.DATE, required, None, description)


def _a(description: str) -> FieldDefinition:
    return FieldDefinition(FieldType.ARRAY, False, None, description)


def _b(description: str) -> FieldDefinition:
    return FieldDefinition(FieldType.BOOLEAN, False, None, description)


def _schema(entity_type: EntityType, fields: Dict[str, FieldDefinition]) -> EntitySchema:
    required = frozenset(name for name, d in fields.items() if d.required)
    return EntitySchema(
        entity_type=entity_type.value,
        field_definitions=MappingProxyType(dict(fields)),
        required_fields=required,
    )


# =============================================================================
# Master Data
# =============================================================================

_ADDRESS_FIELDS = {
    "name2": _s("Name line 2", max_length=40),
    "searchTerm": _s("Search term", max_length=20),
    "street": _s("Street address", max_length=60),
    "city": _s("City", max_length=40),
    "postalCode": _s("Postal code", max_length=10),
    "country": _s("ISO country code", required=True, max_length=3),
    "region": _s("Region / state", max_length=3),
    "phone": _s("Telephone number", max_length=30),
    "email": _s("E-mail address", max_length=241),
    "taxNumber": _s("VAT registration number", max_length=20),
    "paymentTerms": _s("Payment terms key", max_length=4),
    "currency": _s("Currency key", max_length=5),
    "accountGroup": _s("Account group", max_length=4),
}

ITEM_SCHEMA = _schema(EntityType.ITEM, {
    "itemId": _s("Material / item number", required=True, max_length=40),
    "description": _s("Item description", required=True, max_length=40),
    "baseUom": _s("Base unit of measure", required=True, max_length=3),
    "itemType": _s("Item / material type", max_length=10),
    "itemGroup": _s("Item / material group", max_length=9),
    "grossWeight": _n("Gross weight"),
    "netWeight": _n("Net weight"),
    "weightUnit": _s("Weight unit", max_length=3),
    "volume": _n("Volume"),
    "volumeUnit": _s("Volume unit", max_length=3),
    "materialGroup": _s("Basic material", max_length=48),
    "purchaseGroup": _s("Purchasing group", max_length=3),
    "mrpType": _s("MRP type", max_length=2),
    "lotSize": _s("Lot sizing procedure", max_length=2),
    "safetyStock": _n("Safety stock"),
})

CUSTOMER_SCHEMA = _schema(EntityType.CUSTOMER, {
    "customerId": _s("Customer number", required=True, max_length=10),
    "name": _s("Customer name", required=True, max_length=40),
    **_ADDRESS_FIELDS,
    "salesOrg": _s("Sales organization", max_length=4),
    "distributionChannel": _s("Distribution channel", max_length=2),
})

VENDOR_SCHEMA = _schema(EntityType.VENDOR, {
    "vendorId": _s("Vendor number", required=True, max_length=10),
    "name": _s("Vendor name", required=True, max_length=40),
    **_ADDRESS_FIELDS,
    "purchaseOrg": _s("Purchasing organization", max_length=4),
})

CHART_OF_ACCOUNTS_SCHEMA = _schema(EntityType.CHART_OF_ACCOUNTS, {
    "accountNumber": _s("G/L account number", required=True, max_length=10),
    "description": _s("Account long text", required=True, max_length=50),
    "accountType": _s("BS (balance sheet) or PL (profit and loss)", required=True, max_length=2),
    "accountGroup": _s("Account group", max_length=4),
    "balanceSheetIndicator": _s("Balance sheet account indicator", max_length=1),
    "plStatementType": _s("P&L statement account type", max_length=2),
    "currency": _s("Account currency", max_length=5),
    "taxCategory": _s("Tax category", max_length=2),
    "reconciliationType": _s("Reconciliation account type", max_length=1),
})

EMPLOYEE_SCHEMA = _schema(EntityType.EMPLOYEE, {
    "employeeId": _s("Personnel number", required=True, max_length=8),
    "firstName": _s("First name", required=True, max_length=40),
    "lastName": _s("Last name", required=True, max_length=40),
    "fullName": _s("Formatted full name", max_length=80),
    "personnelArea": _s("Personnel area", max_length=4),
    "personnelSubarea": _s("Personnel subarea", max_length=4),
    "employeeGroup": _s("Employee group", max_length=1),
    "employeeSubgroup": _s("Employee subgroup", max_length=2),
    "position": _s("Position", max_length=8),
    "jobTitle": _s("Job title", max_length=40),
    "orgUnit": _s("Organizational unit", max_length=8),
    "costCenter": _s("Cost center", max_length=10),
    "startDate": _d("Start date"),
    "email": _s("E-mail address", max_length=241),
})

FIXED_ASSET_SCHEMA = _schema(EntityType.FIXED_ASSET, {
    "assetNumber": _s("Main asset number", required=True, max_length=12),
    "assetSubnumber": _s("Asset subnumber", max_length=4),
    "description": _s("Asset description", required=True, max_length=50),
    "assetClass": _s("Asset class", required=True, max_length=8),
    "capitalizationDate": _d("Capitalization date"),
    "deactivationDate": _d("Deactivation date"),
    "companyCode": _s("Company code", required=True, max_length=4),
    "costCenter": _s("Cost center", max_length=10),
    "quantity": _n("Quantity"),
    "serialNumber": _s("Serial number", max_length=18),
    "inventoryNumber": _s("Inventory number", max_length=25),
})

COST_CENTER_SCHEMA = _schema(EntityType.COST_CENTER, {
    "costCenterId": _s("Cost center", required=True, max_length=10),
    "description": _s("Cost center name", required=True, max_length=40),
    "responsiblePerson": _s("Person responsible", max_length=20),
    "costCenterCategory": _s("Cost center category", max_length=1),
    "companyCode": _s("Company code", required=True, max_length=4),
    "controllingArea": _s("Controlling area", required=True, max_length=4),
    "profitCenter": _s("Profit center", max_length=10),
    "validFrom": _d("Valid from"),
    "validTo": _d("Valid to"),
    "currency": _s("Currency key", max_length=5),
})


# =============================================================================
# Transactional Data
# =============================================================================

SALES_ORDER_SCHEMA = _schema(EntityType.SALES_ORDER, {
    "orderNumber": _s("Sales document number", required=True, max_length=10),
    "orderType": _s("Sales document type", required=True, max_length=4),
    "customerNumber": _s("Sold-to party", required=True, max_length=10),
    "purchaseOrderNumber": _s("Customer purchase order number", max_length=35),
    "orderDate": _d("Document date", required=True),
    "requestedDeliveryDate": _d("Requested delivery date"),
    "currency": _s("Document currency", required=True, max_length=5),
    "salesOrg": _s("Sales organization", max_length=4),
    "distributionChannel": _s("Distribution channel", max_length=2),
    "division": _s("Division", max_length=2),
    "items": _a("Order line items"),
})

PURCHASE_ORDER_SCHEMA = _schema(EntityType.PURCHASE_ORDER, {
    "orderNumber": _s("Purchasing document number", required=True, max_length=10),
    "orderType": _s("Purchasing document type", required=True, max_length=4),
    "vendorNumber": _s("Vendor number", required=True, max_length=10),
    "orderDate": _d("Document date", required=True),
    "currency": _s("Document currency", required=True, max_length=5),
    "purchaseOrg": _s("Purchasing organization", max_length=4),
    "purchaseGroup": _s("Purchasing group", max_length=3),
    "companyCode": _s("Company code", max_length=4),
    "items": _a("Order line items"),
})

PRODUCTION_ORDER_SCHEMA = _schema(EntityType.PRODUCTION_ORDER, {
    "orderNumber": _s("Production order number", required=True, max_length=12),
    "orderType": _s("Order type", max_length=4),
    "materialNumber": _s("Material number", required=True, max_length=40),
    "quantity": _n("Total order quantity", required=True),
    "unit": _s("Unit of measure", required=True, max_length=3),
    "startDate": _d("Basic start date"),
    "endDate": _d("Basic finish date"),
    "plant": _s("Plant", required=True, max_length=4),
    "status": _s("Order status", max_length=40),
    "routingNumber": _s("Routing group", max_length=8),
    "bomNumber": _s("Bill of material", max_length=8),
})

INVENTORY_SCHEMA = _schema(EntityType.INVENTORY, {
    "materialNumber": _s("Material number", required=True, max_length=40),
    "plant": _s("Plant", required=True, max_length=4),
    "storageLocation": _s("Storage location", max_length=4),
    "batch": _s("Batch", max_length=10),
    "quantity": _n("Unrestricted stock quantity", required=True),
    "unit": _s("Unit of measure", required=True, max_length=3),
    "stockType": _s("Stock type", max_length=20),
    "qualityStatus": _s("Quality inspection status", max_length=1),
    "specialStock": _s("Special stock indicator", max_length=1),
})

GL_ENTRY_SCHEMA = _schema(EntityType.GL_ENTRY, {
    "documentNumber": _s("Accounting document number", required=True, max_length=10),
    "companyCode": _s("Company code", required=True, max_length=4),
    "fiscalYear": _s("Fiscal year", required=True, max_length=4),
    "postingDate": _d("Posting date", required=True),
    "documentDate": _d("Document date"),
    "documentType": _s("Document type", max_length=2),
    "currency": _s("Currency key", required=True, max_length=5),
    "referenceNumber": _s("Reference document number", max_length=16),
    "headerText": _s("Document header text", max_length=25),
    "items": _a("Line items"),
})

BOM_SCHEMA = _schema(EntityType.BOM, {
    "bomNumber": _s("Bill of material", required=True, max_length=8),
    "materialNumber": _s("Material number", required=True, max_length=40),
    "plant": _s("Plant", required=True, max_length=4),
    "bomUsage": _s("BOM usage", max_length=1),
    "baseQuantity": _n("Base quantity", required=True),
    "baseUnit": _s("Base unit", required=True, max_length=3),
    "validFrom": _d("Valid from"),
    "validTo": _d("Valid to"),
    "components": _a("BOM components"),
})

ROUTING_SCHEMA = _schema(EntityType.ROUTING, {
    "routingNumber": _s("Routing group", required=True, max_length=8),
    "materialNumber": _s("Material number", required=True, max_length=40),
    "plant": _s("Plant", required=True, max_length=4),
    "routingUsage": _s("Task list usage", max_length=3),
    "operations": _a("Routing operations"),
})


ENTITY_SCHEMAS: Mapping[str, EntitySchema] = MappingProxyType({
    s.entity_type: s for s in (
        ITEM_SCHEMA,
        CUSTOMER_SCHEMA,
        VENDOR_SCHEMA,
        CHART_OF_ACCOUNTS_SCHEMA,
        SALES_ORDER_SCHEMA,
        PURCHASE_ORDER_SCHEMA,
        PRODUCTION_ORDER_SCHEMA,
        INVENTORY_SCHEMA,
        GL_ENTRY_SCHEMA,
        EMPLOYEE_SCHEMA,
        BOM_SCHEMA,
        ROUTING_SCHEMA,
        FIXED_ASSET_SCHEMA,
        COST_CENTER_SCHEMA,
    )
})


def get_schema(entity_type: str) -> Optional[EntitySchema]:
    """Get the built-in schema for an entity type, or None."""
    return ENTITY_SCHEMAS.get(entity_type)


def list_entity_types() -> List[str]:
    return list(ENTITY_SCHEMAS.keys())
