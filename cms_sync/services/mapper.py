"""
Entity mapper: raw Sanity documents to canonical store documents

Pure transforms, no I/O. Fields missing from the CMS payload stay unset on
the resulting model instead of raising, and unset fields are never written.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union, assert_never

from cms_sync.core.images import ImageUrlResolver
from cms_sync.models import (
    Address, Branding, EntityKind, GeoPoint, Location, Tenant, Translation
)
from cms_sync.models.base import StoreDocument

MappedRecord = Union[Location, Tenant, Translation]

LOCATION_IMAGE_FORMAT = "webp"


def _get(data: Any, *path: str) -> Any:
    """Walk nested mappings, returning None at the first missing step"""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _unless_empty(model: Optional[StoreDocument]) -> Optional[StoreDocument]:
    """Drop a nested model that carries no values so merges leave the stored map alone"""
    if model is None or not model.to_document():
        return None
    return model


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class EntityMapper:
    """Maps CMS payloads to the shape persisted for their kind"""

    def __init__(self, images: ImageUrlResolver):
        self.images = images

    def map(self, kind: EntityKind, raw: Dict[str, Any]) -> MappedRecord:
        match kind:
            case EntityKind.LOCATION:
                return self.map_location(raw)
            case EntityKind.TENANT:
                return self.map_tenant(raw)
            case EntityKind.TRANSLATION:
                return self.map_translation(raw)
            case _:
                assert_never(kind)

    def map_location(self, raw: Dict[str, Any]) -> Location:
        image_url = None
        if raw.get("image"):
            image_url = self.images.resolve(raw["image"], fmt=LOCATION_IMAGE_FORMAT)

        address = raw.get("address") or {}
        return Location(
            id=raw.get("_id"),
            title=raw.get("name"),
            description=raw.get("description"),
            space_id=raw.get("spaceId"),
            asset_id=raw.get("assetId"),
            location=_unless_empty(Address(
                street_name=_get(address, "streetName"),
                zip_code=_get(address, "zipCode"),
                city=_get(address, "city"),
                maps_link=_get(address, "mapsLink"),
                geopoint=_unless_empty(GeoPoint(
                    lat=_get(address, "location", "lat"),
                    long=_get(address, "location", "lng"),
                )),
            )),
            image_url=image_url,
        )

    def map_tenant(self, raw: Dict[str, Any]) -> Tenant:
        logo_url = None
        if _get(raw, "branding", "logo"):
            logo_url = self.images.resolve(raw["branding"]["logo"])

        locations = None
        if raw.get("locations") is not None:
            refs = (
                ref.get("_ref") if isinstance(ref, dict) else ref
                for ref in raw["locations"]
            )
            locations = [ref for ref in refs if ref]

        return Tenant(
            id=raw.get("_id"),
            created_at=_parse_timestamp(raw.get("_createdAt")),
            company_name=raw.get("companyName"),
            locations=locations,
            subdomain=_get(raw, "subdomain", "current"),
            branding=_unless_empty(Branding(
                logo_url=logo_url,
                product_name=_get(raw, "branding", "productName"),
                primary_color=_get(raw, "branding", "primaryColor", "hex"),
                secondary_color=_get(raw, "branding", "secondaryColor", "hex"),
                header_background_color=_get(raw, "branding", "headerBackgroundColor", "hex"),
            )),
        )

    def map_translation(self, raw: Dict[str, Any]) -> Translation:
        return Translation(
            id=raw.get("_id"),
            created_at=_parse_timestamp(raw.get("_createdAt")),
            key=_get(raw, "key", "current"),
            text=raw.get("text"),
        )
