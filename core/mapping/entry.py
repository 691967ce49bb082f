"""A single source-field to canonical-field mapping entry."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from core.mapping.converters import Converter


@dataclass(frozen=True)
class MappingEntry:
    """Translate one ERP-specific field into one canonical field.

    Without ``convert`` the raw value is copied unchanged. With it, the
    canonical value is ``convert(raw, whole_record)``.
    """
    source: str
    target: str
    convert: Optional[Converter] = None

    def apply(self, raw: Any, record: Mapping[str, Any]) -> Any:
        if self.convert is None:
            return raw
        return self.convert(raw, record)

    def describe(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "converted": self.convert is not None,
        }
