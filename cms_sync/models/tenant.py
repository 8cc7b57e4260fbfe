"""
Tenant model - white-label configuration of the front-end
"""

from pydantic import Field
from datetime import datetime
from typing import List, Optional

from cms_sync.models.base import StoreDocument


class Branding(StoreDocument):
    """Tenant branding; colors are hex strings"""
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")
    product_name: Optional[str] = Field(default=None, alias="productName")
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")
    header_background_color: Optional[str] = Field(default=None, alias="headerBackgroundColor")


class Tenant(StoreDocument):
    """Tenant document"""

    id: str = Field(..., description="CMS document id")
    company_name: Optional[str] = Field(default=None, alias="companyName")
    subdomain: Optional[str] = Field(default=None, description="Subdomain the front-end is served on")
    locations: Optional[List[str]] = Field(
        default=None,
        description="Ids of the locations owned by this tenant, in CMS order"
    )
    branding: Optional[Branding] = None

    # Timestamps
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
