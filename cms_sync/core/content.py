"""
Sanity content client

Only supports what reconciliation needs: fetching every document of one
type through the HTTP query API.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from cms_sync.core.errors import ContentSourceError
from cms_sync.models.kinds import EntityKind

logger = structlog.get_logger(__name__)


class SanityContentClient:
    """Read-only client for the Sanity query API"""

    def __init__(
        self,
        project_id: str,
        dataset: str,
        api_version: str,
        token: Optional[str] = None,
        use_cdn: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        self.token = token
        self.use_cdn = use_cdn
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def query_url(self) -> str:
        host = "apicdn.sanity.io" if self.use_cdn else "api.sanity.io"
        return (
            f"https://{self.project_id}.{host}/v{self.api_version}"
            f"/data/query/{self.dataset}"
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def query(self, groq: str) -> Any:
        """Run a GROQ query and return its `result` member"""
        try:
            response = await self._http.get(
                self.query_url,
                params={"query": groq},
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ContentSourceError(
                f"Sanity query failed with HTTP {e.response.status_code}",
                {"query": groq, "status_code": e.response.status_code}
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ContentSourceError(f"Sanity query failed: {e}", {"query": groq}) from e

        if not isinstance(payload, dict) or "result" not in payload:
            raise ContentSourceError("Sanity response has no result", {"query": groq})
        return payload["result"]

    async def fetch_all(self, kind: EntityKind) -> List[Dict[str, Any]]:
        """Fetch every document of the given kind"""
        result = await self.query(f'*[_type == "{kind.value}"]')
        if not isinstance(result, list):
            raise ContentSourceError(
                f"Expected a list of {kind.value} documents",
                {"kind": kind.value}
            )
        logger.info(f"Fetched {len(result)} {kind.value} documents from Sanity")
        return result

    async def aclose(self):
        await self._http.aclose()
