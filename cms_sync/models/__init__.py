from cms_sync.models.kinds import EntityKind
from cms_sync.models.location import Address, GeoPoint, Location
from cms_sync.models.tenant import Branding, Tenant
from cms_sync.models.translation import Translation
