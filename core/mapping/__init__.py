"""Core mapping - source ERP field tables and the resolver that applies them.

Tables are keyed by (source system, entity type). Each entry names a source
field, a canonical target field and an optional converter.
"""

from core.mapping.converters import code_map, flag_map, to_float
from core.mapping.engine import MappingResolver, get_resolver
from core.mapping.entry import MappingEntry
from core.mapping.tables import SOURCE_MAPPINGS

__all__ = [
    "MappingEntry",
    "MappingResolver",
    "get_resolver",
    "SOURCE_MAPPINGS",
    # Converters
    "code_map",
    "flag_map",
    "to_float",
]
