"""Entity registry - entity type name to entity class.

Populated with the 14 built-in entities at import time. Lookups are by the
exact entity type name (e.g. "Item", "ChartOfAccounts").
"""

from typing import Dict, List, Optional, Type

from core.errors import UnknownEntityTypeError
from core.mapping.engine import MappingResolver
from core.models.canonical import BUILTIN_ENTITIES, CanonicalEntity
from core.observability.logging import get_logger

logger = get_logger(__name__)


class EntityRegistry:
    """Name -> entity class map with a factory for fresh instances."""

    def __init__(self):
        self._entities: Dict[str, Type[CanonicalEntity]] = {}

    def register(self, name: str, entity_class: Type[CanonicalEntity]) -> None:
        """Register an entity class. Re-registering a name overwrites it."""
        if name in self._entities:
            logger.warning(f"Entity type '{name}' already registered, overwriting")
        self._entities[name] = entity_class

    def get(self, name: str) -> Optional[Type[CanonicalEntity]]:
        return self._entities.get(name)

    def has(self, name: str) -> bool:
        return name in self._entities

    def create(self, name: str, resolver: Optional[MappingResolver] = None) -> CanonicalEntity:
        """Create a new, empty entity instance.

        Raises:
            UnknownEntityTypeError: if the name is not registered
        """
        entity_class = self._entities.get(name)
        if entity_class is None:
            raise UnknownEntityTypeError(name, self.list_types())
        return entity_class(resolver=resolver)

    def list_types(self) -> List[str]:
        return list(self._entities.keys())

    def clear(self) -> None:
        self._entities.clear()

    def __len__(self) -> int:
        return len(self._entities)


def build_default_registry() -> EntityRegistry:
    """Registry holding every built-in entity type."""
    registry = EntityRegistry()
    for entity_class in BUILTIN_ENTITIES:
        registry.register(entity_class.schema.entity_type, entity_class)
    return registry


_default_registry: Optional[EntityRegistry] = None


def get_registry() -> EntityRegistry:
    """Get the process-wide entity registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = build_default_registry()
    return _default_registry
