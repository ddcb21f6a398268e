"""
Singleton CMS client with rate limiting using aiolimiter.
"""
from aiohttp import ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from typing import Dict, Any, List, Optional
from loguru import logger

from vehicle_sync.config import BRAND_COLLECTION, CMS_RATE_LIMIT, CMS_TIMEOUT, CMS_URL, PAYLOAD_SECRET
from vehicle_sync.errors import CMSRequestError


class CMSClient:
    """
    Singleton client for the Payload CMS REST API.
    Uses AsyncLimiter for backpressure against the store instead of fixed delays.
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not CMSClient._initialized:
            self.base_url = f"{CMS_URL.rstrip('/')}/api"
            self.secret = PAYLOAD_SECRET
            # Token bucket: CMS_RATE_LIMIT requests per second
            self.rate_limiter = AsyncLimiter(max_rate=CMS_RATE_LIMIT, time_period=1.0)
            self._session: Optional[ClientSession] = None
            CMSClient._initialized = True

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=CMS_TIMEOUT))
        return self._session

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.secret:
            headers["Authorization"] = f"Bearer {self.secret}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send a request to the CMS and return the decoded JSON body.

        Args:
            method: HTTP method.
            endpoint: Path below /api, e.g. "/fordon".
            params: Optional query parameters.
            json_body: Optional JSON payload.

        Returns:
            Parsed JSON response body.

        Raises:
            CMSRequestError: If the CMS answers with a non-OK status.
        """
        async with self.rate_limiter:
            session = await self._get_session()
            url = f"{self.base_url}{endpoint}"
            try:
                async with session.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=self._headers(),
                ) as resp:
                    if not resp.ok:
                        raise CMSRequestError(resp.status, resp.reason or "unknown")
                    return await resp.json()
            except Exception as e:
                logger.debug(f"⚠️ CMS {method} {endpoint} failed: {e}")
                raise

    async def list_records(self, collection: str, limit: int = 1000, depth: int = 1) -> List[Dict[str, Any]]:
        """List documents of a collection."""
        data = await self.request("GET", f"/{collection}", params={"limit": limit, "depth": depth})
        docs = data.get("docs", [])
        return docs if isinstance(docs, list) else []

    async def create_record(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a document and return it."""
        response = await self.request("POST", f"/{collection}", json_body=data)
        return response.get("doc", response)

    async def update_record(self, collection: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Patch a document by id and return the updated document."""
        response = await self.request("PATCH", f"/{collection}/{record_id}", json_body=data)
        return response.get("doc", response)

    async def find_or_create_brand(self, name: Optional[str]) -> Optional[str]:
        """
        Resolve a brand name to its CMS id, creating a published brand when missing.

        Returns:
            The brand id, or None for a blank name.
        """
        if not name or not name.strip():
            return None
        name = name.strip()

        found = await self.request(
            "GET",
            f"/{BRAND_COLLECTION}",
            params={"where[title][equals]": name, "limit": 1},
        )
        docs = found.get("docs") or []
        if docs:
            logger.debug(f"✅ Found existing brand: {name} -> ID: {docs[0]['id']}")
            return str(docs[0]["id"])

        logger.info(f"🆕 Creating new brand: {name}")
        brand = await self.create_record(BRAND_COLLECTION, {"title": name, "_status": "published"})
        return str(brand["id"])

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
