"""
Entity kinds mirrored from the CMS
"""

from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    """Closed set of document types mirrored into the store"""
    LOCATION = "location"
    TENANT = "tenant"
    TRANSLATION = "translation"

    @property
    def collection(self) -> str:
        """Store collection holding documents of this kind"""
        return f"{self.value}s"

    @classmethod
    def parse(cls, value: Any) -> "EntityKind | None":
        """Return the kind for a CMS `_type` tag, or None if it is not mirrored"""
        try:
            return cls(value)
        except ValueError:
            return None
