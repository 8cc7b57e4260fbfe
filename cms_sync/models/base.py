"""
Base class for documents persisted in the store
"""

from pydantic import BaseModel, ConfigDict
from typing import Any, Dict


class StoreDocument(BaseModel):
    """Canonical document shape; field aliases are the stored (camelCase) keys"""

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for the store, leaving out every unset value"""
        return self.model_dump(by_alias=True, exclude_none=True)
