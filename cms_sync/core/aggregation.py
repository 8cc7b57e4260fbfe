"""
Popular times aggregation client

The aggregation itself runs elsewhere; this module only knows how to ask for
it. Every failure is reported as AggregationError so callers can decide
whether it is fatal.
"""

from typing import Any, Dict, List, Optional, Protocol

import httpx
import structlog
from fastapi.encoders import jsonable_encoder

from cms_sync.core.errors import AggregationError

logger = structlog.get_logger(__name__)


class AggregationEngine(Protocol):
    """Computes the popular times dataset for one location"""

    async def compute(self, location: Dict[str, Any], force: bool = False) -> List[Any]:
        ...


class HttpAggregationEngine:
    """Aggregation engine reached over HTTP"""

    def __init__(
        self,
        url: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.url = url
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def compute(self, location: Dict[str, Any], force: bool = False) -> List[Any]:
        if not self.url:
            raise AggregationError("POPULAR_TIMES_URL is not configured")

        location_id = location.get("id")
        try:
            response = await self._http.post(
                self.url,
                json={"location": jsonable_encoder(location), "force": force},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise AggregationError(
                f"Popular times request for {location_id} failed with HTTP {e.response.status_code}",
                {"location_id": location_id, "status_code": e.response.status_code}
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise AggregationError(
                f"Popular times request for {location_id} failed: {e}",
                {"location_id": location_id}
            ) from e

        if isinstance(payload, dict):
            payload = payload.get("popularTimes")
        if not isinstance(payload, list):
            raise AggregationError(
                f"Popular times response for {location_id} is not a list",
                {"location_id": location_id}
            )
        return payload

    async def aclose(self):
        await self._http.aclose()
