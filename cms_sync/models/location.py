"""
Location document model
"""

from pydantic import Field
from datetime import datetime
from typing import Any, List, Optional

from cms_sync.models.base import StoreDocument


class GeoPoint(StoreDocument):
    """Geocoordinate pair of a location"""
    lat: Optional[float] = None
    long: Optional[float] = None


class Address(StoreDocument):
    """Postal address embedded in a location document"""
    street_name: Optional[str] = Field(default=None, alias="streetName")
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    city: Optional[str] = None
    maps_link: Optional[str] = Field(default=None, alias="mapsLink")
    geopoint: Optional[GeoPoint] = None


class Location(StoreDocument):
    """Location as served to the front-end"""

    id: str = Field(..., description="CMS document id")

    # Display
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    # Foreign keys
    space_id: Optional[str] = Field(default=None, alias="spaceId")
    asset_id: Optional[str] = Field(default=None, alias="assetId")
    tenant_id: Optional[str] = Field(
        default=None,
        alias="tenantId",
        description="Owning tenant, set by the tenant cascade"
    )

    location: Optional[Address] = None

    # Occupancy, owned by the synchronizer and the popular times refresh
    absolute_occupancy: Optional[int] = Field(default=None, alias="absoluteOccupancy")
    relative_occupancy: Optional[int] = Field(default=None, alias="relativeOccupancy")
    popular_times: Optional[List[Any]] = Field(default=None, alias="popularTimes")

    # Timestamps
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
