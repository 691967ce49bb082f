"""
Tests for canonical entities, schemas and the entity registry.
"""

import pytest


MARA_RECORD = {
    "MATNR": "MAT-001",
    "MAKTX": "Steel bolt M8",
    "MEINS": "EA",
    "BRGEW": "0.450",
}


class TestFromSource:
    """Tests for mapping raw source records into entities."""

    def test_sap_material_maps_to_item(self):
        """A MARA record becomes a valid Item with a parsed weight."""
        from core.models.canonical import Item

        item = Item().from_source("SAP", MARA_RECORD)

        assert item.data["itemId"] == "MAT-001"
        assert item.data["description"] == "Steel bolt M8"
        assert item.data["baseUom"] == "EA"
        assert item.data["grossWeight"] == 0.45
        assert item.validate().valid is True

    def test_ln_item_type_code_is_translated(self):
        """LN item type code 1 maps to FERT."""
        from core.models.canonical import Item

        item = Item().from_source("INFOR_LN", {"T$ITEM": "ITM-1", "T$CTYP": 1})

        assert item.data["itemType"] == "FERT"

    def test_unknown_code_passes_through(self):
        """Codes missing from a code table are kept unchanged."""
        from core.models.canonical import Item

        item = Item().from_source("INFOR_LN", {"T$ITEM": "ITM-1", "T$CTYP": "9"})

        assert item.data["itemType"] == "9"

    def test_source_system_is_case_insensitive(self):
        """Lowercase source system names resolve to the same tables."""
        from core.models.canonical import Item

        item = Item().from_source("sap", MARA_RECORD)

        assert item.data["itemId"] == "MAT-001"

    def test_missing_source_fields_are_not_written(self):
        """Absent and None raw values leave the target unset."""
        from core.models.canonical import Item

        item = Item().from_source("SAP", {"MATNR": "MAT-001", "MAKTX": None})

        assert "description" not in item.data
        assert "grossWeight" not in item.data

    def test_unsupported_source_raises(self):
        """Unknown source systems raise UnsupportedSourceError listing the supported ones."""
        from core.errors import UnsupportedSourceError
        from core.models.canonical import Item

        with pytest.raises(UnsupportedSourceError) as exc_info:
            Item().from_source("ORACLE", {})

        assert "ORACLE" in str(exc_info.value)
        assert "SAP" in exc_info.value.supported

    def test_known_source_without_table_raises(self):
        """A known system with no table for the entity raises MappingNotFoundError."""
        from core.errors import MappingNotFoundError
        from core.models.canonical import SalesOrder

        with pytest.raises(MappingNotFoundError):
            SalesOrder().from_source("INFOR_LN", {"T$ORNO": "SO-1"})

    def test_from_source_is_idempotent(self):
        """Mapping the same record twice yields the same data."""
        from core.models.canonical import Item

        item = Item().from_source("SAP", MARA_RECORD)
        first = dict(item.data)
        item.from_source("SAP", MARA_RECORD)

        assert item.data == first

    def test_from_source_uses_injected_resolver(self):
        """An injected resolver replaces the built-in tables."""
        from core.mapping.engine import MappingResolver
        from core.mapping.entry import MappingEntry
        from core.models.canonical import Item

        resolver = MappingResolver({"TEST": {"Item": (MappingEntry("ID", "itemId"),)}})
        item = Item(resolver=resolver).from_source("TEST", {"ID": "X1", "MATNR": "ignored"})

        assert item.data == {"itemId": "X1"}


class TestValidation:
    """Tests for schema validation."""

    def test_missing_required_fields_reported(self):
        """Each missing required field yields one error."""
        from core.models.canonical import Item

        result = Item({"itemId": "MAT-001", "description": ""}).validate()

        assert result.valid is False
        assert "Missing required field: description" in result.errors
        assert "Missing required field: baseUom" in result.errors

    def test_type_mismatch_reported(self):
        """A string in a number field is a type error."""
        from core.models.canonical import Item

        result = Item({
            "itemId": "MAT-001",
            "description": "Bolt",
            "baseUom": "EA",
            "grossWeight": "heavy",
        }).validate()

        assert result.valid is False
        assert result.errors == ["Field 'grossWeight' must be a number, got string"]

    def test_max_length_reported(self):
        """Strings longer than max length are rejected."""
        from core.models.canonical import Item

        result = Item({"itemId": "MAT-001", "description": "Bolt", "baseUom": "EACH"}).validate()

        assert result.valid is False
        assert any("exceeds max length 3" in e for e in result.errors)

    def test_unknown_fields_ignored(self):
        """Fields without a definition do not affect validity."""
        from core.models.canonical import Item

        result = Item({
            "itemId": "MAT-001",
            "description": "Bolt",
            "baseUom": "EA",
            "plantNote": 42,
        }).validate()

        assert result.valid is True
        assert result.to_dict() == {"valid": True, "errors": []}

    def test_validate_entity_unknown_tag(self):
        """validate_entity rejects unknown entity type tags."""
        from core.errors import UnknownEntityTypeError
        from core.models.canonical import validate_entity

        with pytest.raises(UnknownEntityTypeError):
            validate_entity("Spaceship", {})


class TestSerialization:
    """Tests for to_json output."""

    def test_to_json_prefixes_type_and_timestamp(self):
        """_entityType and _timestamp come first, followed by the data."""
        from core.models.canonical import Item

        payload = Item().from_source("SAP", MARA_RECORD).to_json()
        keys = list(payload.keys())

        assert keys[:2] == ["_entityType", "_timestamp"]
        assert payload["_entityType"] == "Item"
        assert payload["_timestamp"].endswith("Z")
        assert payload["itemId"] == "MAT-001"


class TestEntityBase:
    """Tests for the abstract base entity."""

    def test_base_entity_cannot_be_instantiated(self):
        """Creating the untyped base raises AbstractEntityError."""
        from core.errors import AbstractEntityError
        from core.models.canonical import CanonicalEntity

        with pytest.raises(AbstractEntityError):
            CanonicalEntity()

    def test_entity_exposes_schema(self):
        """Concrete entities expose their type and required fields."""
        from core.models.canonical import Item

        item = Item()

        assert item.entity_type == "Item"
        assert item.required_fields == ["baseUom", "description", "itemId"]
        assert "grossWeight" in item.field_definitions


class TestEntityRegistry:
    """Tests for the entity registry."""

    def test_default_registry_has_builtin_entities(self):
        """All 14 built-in entity types are registered."""
        from core.models.registry import get_registry

        registry = get_registry()

        assert len(registry) == 14
        assert registry.has("Item")
        assert registry.has("CostCenter")

    def test_create_returns_fresh_instances(self):
        """create() never shares data between instances."""
        from core.models.registry import get_registry

        registry = get_registry()
        first = registry.create("Customer")
        first.data["customerId"] = "C1"
        second = registry.create("Customer")

        assert second.data == {}

    def test_create_unknown_raises(self):
        """Unknown names raise UnknownEntityTypeError listing available types."""
        from core.errors import UnknownEntityTypeError
        from core.models.registry import get_registry

        with pytest.raises(UnknownEntityTypeError) as exc_info:
            get_registry().create("Spaceship")

        assert "Item" in exc_info.value.available

    def test_register_overwrites(self):
        """Re-registering a name replaces the class."""
        from core.models.canonical import Customer, Item
        from core.models.registry import EntityRegistry

        registry = EntityRegistry()
        registry.register("Thing", Item)
        registry.register("Thing", Customer)

        assert registry.get("Thing") is Customer


class TestSchemas:
    """Tests for schema definitions."""

    def test_schema_to_dict(self):
        """Schemas serialize with camelCase keys and sorted required fields."""
        from core.models.schemas import get_schema

        data = get_schema("Item").to_dict()

        assert data["entityType"] == "Item"
        assert data["requiredFields"] == ["baseUom", "description", "itemId"]
        assert data["fieldDefinitions"]["itemId"]["maxLength"] == 40

    def test_required_field_must_be_defined(self):
        """A required field without a required definition is rejected."""
        from core.models.schemas import EntitySchema

        with pytest.raises(ValueError):
            EntitySchema(entity_type="Broken", field_definitions={}, required_fields=frozenset({"id"}))


def _valid_record(schema):
    """A record holding a well-typed value for every required field."""
    from core.models.schemas import FieldType

    samples = {
        FieldType.STRING: "A",
        FieldType.NUMBER: 1,
        FieldType.DATE: "2026-03-15",
        FieldType.BOOLEAN: True,
        FieldType.ARRAY: ["A"],
    }
    return {name: samples[schema.field_definitions[name].type] for name in schema.required_fields}


class TestSchemaInvariants:
    """Properties that hold for every built-in entity schema."""

    def test_required_fields_are_declared_required(self):
        """Every required field is defined with required=True and a known type."""
        from core.models.schemas import ENTITY_SCHEMAS, FieldType

        assert len(ENTITY_SCHEMAS) == 14
        for entity_type, schema in ENTITY_SCHEMAS.items():
            assert schema.required_fields, entity_type
            for name in schema.required_fields:
                definition = schema.field_definitions[name]
                assert definition.required is True, (entity_type, name)
                assert definition.type in set(FieldType), (entity_type, name)

    def test_complete_record_validates(self):
        """A record with every required field present and well typed is valid."""
        from core.models.registry import get_registry
        from core.models.schemas import ENTITY_SCHEMAS

        for entity_type, schema in ENTITY_SCHEMAS.items():
            entity = get_registry().create(entity_type)
            entity.data.update(_valid_record(schema))

            result = entity.validate()

            assert result.valid is True, (entity_type, result.errors)

    def test_dropping_any_required_field_invalidates(self):
        """Removing any one required field yields a missing-field error."""
        from core.models.canonical import validate_entity
        from core.models.schemas import ENTITY_SCHEMAS

        for entity_type, schema in ENTITY_SCHEMAS.items():
            record = _valid_record(schema)
            for name in schema.required_fields:
                partial = {k: v for k, v in record.items() if k != name}

                result = validate_entity(entity_type, partial)

                assert result.valid is False, (entity_type, name)
                assert f"Missing required field: {name}" in result.errors


class TestDateFields:
    """Tests for date-typed field validation."""

    def _order(self, order_date):
        from core.models.schemas import get_schema

        record = _valid_record(get_schema("SalesOrder"))
        record["orderDate"] = order_date
        return record

    def test_date_object_accepted(self):
        """A date value satisfies a date field."""
        from datetime import date

        from core.models.canonical import validate_entity

        assert validate_entity("SalesOrder", self._order(date(2026, 3, 15))).valid is True

    def test_iso_string_accepted(self):
        """ISO date strings and timestamps satisfy a date field."""
        from core.models.canonical import validate_entity

        assert validate_entity("SalesOrder", self._order("2026-03-15")).valid is True
        assert validate_entity("SalesOrder", self._order("2026-03-15T12:00:00.000Z")).valid is True

    def test_non_date_string_rejected(self):
        """Free text in a date field is a type error."""
        from core.models.canonical import validate_entity

        result = validate_entity("SalesOrder", self._order("next tuesday"))

        assert result.valid is False
        assert result.errors == ["Field 'orderDate' must be a date or ISO date string, got string"]

    def test_number_rejected(self):
        """Numbers are not dates."""
        from core.models.canonical import validate_entity

        result = validate_entity("SalesOrder", self._order(20260315))

        assert result.valid is False
        assert result.errors == ["Field 'orderDate' must be a date or ISO date string, got number"]
