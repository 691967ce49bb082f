"""Source-mapping resolver.

Translates raw records from a source ERP into canonical field dictionaries
using the per-(source system, entity type) tables in core.mapping.tables.

The resolver is constructed once and handed to whatever builds canonical
entities, so entity code never reaches into the tables directly.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.errors import MappingNotFoundError, UnsupportedSourceError
from core.mapping.entry import MappingEntry
from core.mapping.tables import SOURCE_MAPPINGS, MappingTable


class MappingResolver:
    """Lookup and application of source-mapping tables.

    Usage:
        resolver = MappingResolver()
        data = resolver.apply("SAP", "Item", {"MATNR": "MAT-1", "BRGEW": "0.450"})
        # {"itemId": "MAT-1", "grossWeight": 0.45}
    """

    def __init__(self, tables: Optional[Mapping[str, Mapping[str, MappingTable]]] = None):
        """Initialize resolver.

        Args:
            tables: source system -> entity type -> ordered entries.
                Defaults to the built-in tables.
        """
        self._tables = tables if tables is not None else SOURCE_MAPPINGS

    def source_systems(self) -> List[str]:
        """List supported source systems."""
        return list(self._tables.keys())

    def entity_types(self, source_system: str) -> List[str]:
        """List entity types mapped for a source system."""
        return list(self._system_tables(source_system).keys())

    def _system_tables(self, source_system: str) -> Mapping[str, MappingTable]:
        key = (source_system or "").upper()
        if key not in self._tables:
            raise UnsupportedSourceError(source_system, self.source_systems())
        return self._tables[key]

    def get_mappings(self, source_system: str, entity_type: str) -> Optional[Tuple[MappingEntry, ...]]:
        """Get the ordered mapping entries for (source system, entity type).

        Raises:
            UnsupportedSourceError: if the source system is unknown

        Returns:
            The entries, or None when the system has no table for the entity
        """
        table = self._system_tables(source_system).get(entity_type)
        if table is None:
            return None
        return tuple(table)

    def apply(self, source_system: str, entity_type: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Map a raw record to canonical fields.

        Absent and None raw values skip the entry; the target is not written.

        Raises:
            UnsupportedSourceError: unknown source system
            MappingNotFoundError: known system without a table for the entity
        """
        entries = self.get_mappings(source_system, entity_type)
        if entries is None:
            raise MappingNotFoundError(source_system, entity_type)

        data: Dict[str, Any] = {}
        for entry in entries:
            raw = record.get(entry.source)
            if raw is None:
                continue
            data[entry.target] = entry.apply(raw, record)
        return data

    def find_by_source_field(self, source_system: str, source_field: str) -> List[Tuple[str, MappingEntry]]:
        """Find every (entity type, entry) that reads a given source field."""
        matches = []
        for entity_type, entries in self._system_tables(source_system).items():
            for entry in entries:
                if entry.source.upper() == source_field.upper():
                    matches.append((entity_type, entry))
        return matches

    def get_stats(self) -> Dict[str, int]:
        """Get count of mapped entity types by source system."""
        return {system: len(tables) for system, tables in self._tables.items()}


_default_resolver: Optional[MappingResolver] = None


def get_resolver() -> MappingResolver:
    """Get the process-wide resolver over the built-in tables."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = MappingResolver()
    return _default_resolver
