"""
Image reference resolver

Sanity stores images as references to asset documents whose ids encode
everything needed to build the public CDN URL:

    image-<assetId>-<width>x<height>-<extension>

A crop set in the studio is applied through the CDN `rect` parameter.
"""

import math
import re
from typing import Any, Optional, Tuple
from urllib.parse import urlencode

from cms_sync.core.errors import InvalidImageReference

_ASSET_REF = re.compile(
    r"^image-(?P<asset_id>[A-Za-z0-9]+)-(?P<width>\d+)x(?P<height>\d+)-(?P<ext>[a-z0-9]+)$"
)


def extract_asset_ref(source: Any) -> Optional[str]:
    """Pull the asset reference out of an image field, asset object or bare string"""
    if not source:
        return None
    if isinstance(source, str):
        return source
    if isinstance(source, dict):
        asset = source.get("asset")
        if isinstance(asset, dict):
            return asset.get("_ref") or asset.get("_id")
        if isinstance(asset, str):
            return asset
        return source.get("_ref") or source.get("_id")
    return None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def crop_rect(source: Any, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
    """
    Pixel rectangle `(left, top, width, height)` selected by an image's crop

    Sanity stores the crop as fractions trimmed from each edge. Returns None
    when there is no crop or it keeps the whole asset.
    """
    crop = source.get("crop") if isinstance(source, dict) else None
    if not isinstance(crop, dict):
        return None

    left = _round_half_up((crop.get("left") or 0) * width)
    top = _round_half_up((crop.get("top") or 0) * height)
    rect = (
        left,
        top,
        _round_half_up(width - (crop.get("right") or 0) * width - left),
        _round_half_up(height - (crop.get("bottom") or 0) * height - top),
    )
    if rect == (0, 0, width, height):
        return None
    return rect


class ImageUrlResolver:
    """Builds deterministic CDN URLs for CMS image references"""

    def __init__(self, project_id: str, dataset: str, base_url: str = "https://cdn.sanity.io"):
        self.project_id = project_id
        self.dataset = dataset
        self.base_url = base_url.rstrip("/")

    def resolve(self, source: Any, fmt: Optional[str] = None) -> Optional[str]:
        """
        Resolve an image field to a public URL

        Args:
            source: Image object, asset object or asset reference string
            fmt: Output encoding requested from the CDN (e.g. "webp")

        Returns:
            The URL, or None when no reference is present
        """
        ref = extract_asset_ref(source)
        if not ref:
            return None

        match = _ASSET_REF.match(ref)
        if not match:
            raise InvalidImageReference(
                f"Malformed image reference: {ref}",
                {"ref": ref}
            )

        filename = (
            f"{match['asset_id']}-{match['width']}x{match['height']}.{match['ext']}"
        )
        url = f"{self.base_url}/images/{self.project_id}/{self.dataset}/{filename}"

        params = []
        rect = crop_rect(source, int(match["width"]), int(match["height"]))
        if rect:
            params.append(("rect", ",".join(str(value) for value in rect)))
        if fmt:
            params.append(("fm", fmt))
        if params:
            url = f"{url}?{urlencode(params, safe=',')}"
        return url
