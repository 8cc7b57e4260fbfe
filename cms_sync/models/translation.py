"""
Translation model
"""

from pydantic import Field
from datetime import datetime
from typing import Any, Optional

from cms_sync.models.base import StoreDocument


class Translation(StoreDocument):
    """UI string keyed by a slug"""

    id: str
    key: Optional[str] = None
    text: Optional[Any] = Field(default=None, description="Plain string or per-language map")

    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
