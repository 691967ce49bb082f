"""Field converters used by source-mapping entries.

A converter is called as ``convert(raw_value, whole_record)`` and returns the
canonical value. Converters are pure and never raise on odd input.
"""

import math
import re
from typing import Any, Callable, Dict, Mapping, Optional

Converter = Callable[[Any, Mapping[str, Any]], Any]

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def to_float(value: Any, record: Optional[Mapping[str, Any]] = None) -> float:
    """Parse a leading decimal number, defaulting to 0 on non-numeric input.

    ``"0.450"`` -> 0.45, ``"12 KG"`` -> 12.0, ``"n/a"`` -> 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return 0.0
        result = float(match.group(0))
    else:
        return 0.0
    if math.isnan(result) or math.isinf(result) or result == 0:
        return 0.0
    return result


def code_map(table: Dict[str, str]) -> Converter:
    """Build a converter that translates source codes to canonical codes.

    Codes are matched on their string form so ``1`` and ``"1"`` hit the same
    entry. Unknown codes pass through unchanged.
    """
    lookup = {str(k): v for k, v in table.items()}

    def convert(value: Any, record: Optional[Mapping[str, Any]] = None) -> Any:
        return lookup.get(str(value), value)

    convert.table = dict(lookup)
    return convert


def flag_map(flag: str, when_set: str, otherwise: str) -> Converter:
    """Build a converter for indicator fields: ``flag`` -> when_set, anything else -> otherwise."""

    def convert(value: Any, record: Optional[Mapping[str, Any]] = None) -> str:
        return when_set if value == flag else otherwise

    return convert
