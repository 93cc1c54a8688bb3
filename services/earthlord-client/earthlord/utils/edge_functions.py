"""
Edge Function HTTP Client
Client for invoking the project's serverless functions with the user's bearer token

Connection pooling follows the shared AsyncClient pattern:
- Single shared AsyncClient initialized at app startup
- Limits and timeouts set explicitly
"""

import httpx
import logging
from typing import Optional, Dict, Any

from earthlord.config import SupabaseConfig

logger = logging.getLogger(__name__)


class EdgeFunctionError(Exception):
    """Raised when a function call fails or returns a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EdgeFunctionClient:
    """
    HTTP client for serverless function calls.

    Lifecycle:
        - Call start() during app startup (FastAPI lifespan)
        - Call stop() during app shutdown
        - If not initialized, falls back to per-request client
    """

    MAX_CONNECTIONS = 10
    MAX_KEEPALIVE = 5
    KEEPALIVE_EXPIRY = 5.0

    CONNECT_TIMEOUT = 5.0
    READ_TIMEOUT = 30.0
    WRITE_TIMEOUT = 5.0
    POOL_TIMEOUT = 10.0

    def __init__(self, config: SupabaseConfig):
        self.config = config
        self.base_url = config.functions_url
        self._client: Optional[httpx.AsyncClient] = None

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.CONNECT_TIMEOUT,
            read=self.READ_TIMEOUT,
            write=self.WRITE_TIMEOUT,
            pool=self.POOL_TIMEOUT
        )

    async def start(self):
        """Initialize the shared HTTP client"""
        if self._client is not None:
            logger.warning("EdgeFunctionClient already started")
            return

        limits = httpx.Limits(
            max_connections=self.MAX_CONNECTIONS,
            max_keepalive_connections=self.MAX_KEEPALIVE,
            keepalive_expiry=self.KEEPALIVE_EXPIRY
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            limits=limits,
            timeout=self._timeout()
        )
        logger.info(f"EdgeFunctionClient started: base_url={self.base_url}")

    async def stop(self):
        """Close the HTTP client and release resources"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("EdgeFunctionClient stopped")

    async def invoke(
        self,
        function_name: str,
        authorization: str,
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        POST to a serverless function as the signed-in user

        Args:
            function_name: Function slug, e.g. 'delete-account'
            authorization: Authorization header value, the session's bearer credential
            body: Optional JSON body

        Returns:
            dict: Decoded JSON response, empty when the function returns no body

        Raises:
            EdgeFunctionError: On transport failure or non-2xx status
        """
        endpoint = f"/{function_name.strip('/')}"
        headers = {
            "Authorization": authorization,
            "apikey": self.config.supabase_anon_key,
            "Content-Type": "application/json",
        }

        try:
            if self._client:
                response = await self._client.post(endpoint, json=body or {}, headers=headers)
            else:
                logger.warning("EdgeFunctionClient not initialized, using per-request client")
                async with httpx.AsyncClient(timeout=self._timeout()) as client:
                    response = await client.post(f"{self.base_url}{endpoint}", json=body or {}, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Edge function {function_name} request failed: {type(e).__name__}: {e}")
            raise EdgeFunctionError(f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            detail = response.text
            try:
                payload = response.json()
                if isinstance(payload, dict):
                    detail = payload.get("error") or payload.get("message") or detail
            except ValueError:
                pass
            logger.error(f"Edge function {function_name} returned {response.status_code}: {detail}")
            raise EdgeFunctionError(str(detail), status_code=response.status_code)

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError:
            return {"raw": response.text}
        return payload if isinstance(payload, dict) else {"result": payload}
