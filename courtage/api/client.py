"""
HTTP client for the Alliance Courtage REST API
"""
import asyncio
import logging
import os
from typing import Any, Dict, Optional

import aiohttp

from ..cache.manager import get_cache_manager
from ..cache.store import KeyValueStore

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3001/api")
API_TIMEOUT_SECONDS = int(os.getenv("API_TIMEOUT_SECONDS", "30"))

# Store key of the session token, outside the cache namespace
TOKEN_KEY = "token"
AUTH_HEADER = "x-auth-token"

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error response from the portal API"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """JSON client sending the stored session token with every request

    The token is read from the same key-value store the cache uses, so
    clearing the cache never logs the user out.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = API_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.store = store if store is not None else get_cache_manager().store
        self.session = session
        self.timeout = timeout
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry"""
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close_session()

    async def start_session(self):
        """Initialize HTTP session"""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=10),
            )
            self._owns_session = True

    async def close_session(self):
        """Close HTTP session"""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    def get_token(self) -> Optional[str]:
        if self.store is None:
            return None
        try:
            return self.store.get_item(TOKEN_KEY)
        except Exception as e:
            logger.error(f"Error getting token: {e}")
            return None

    def set_token(self, token: Optional[str]) -> None:
        if self.store is None:
            return
        if token:
            self.store.set_item(TOKEN_KEY, token)
        else:
            self.store.remove_item(TOKEN_KEY)

    def _build_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.get_token()
        if token:
            headers[AUTH_HEADER] = token
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body

        Raises ApiError for non-2xx responses, using the server's ``error`` message.
        """
        if self.session is None:
            await self.start_session()

        url = f"{self.base_url}{endpoint}"
        if params:
            params = {k: str(v).lower() if isinstance(v, bool) else str(v) for k, v in params.items() if v is not None}

        logger.debug(f"API {method} {url}")
        try:
            async with self.session.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._build_headers(headers),
            ) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = None

                if response.status >= 400:
                    message = "Erreur serveur"
                    if isinstance(data, dict) and data.get("error"):
                        message = data["error"]
                    logger.warning(f"API {method} {endpoint} failed with {response.status}: {message}")
                    raise ApiError(message, response.status)

                return data
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout for {url}")
            raise ApiError(f"Timeout for {endpoint}") from e
        except aiohttp.ClientError as e:
            logger.error(f"API request error for {url}: {e}")
            raise ApiError(f"Request error for {endpoint}: {e}") from e

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate and keep the returned token for later requests"""
        data = await self.request("/auth/login", method="POST", body={"email": email, "password": password})
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ApiError("Réponse de connexion invalide")
        self.set_token(token)
        return data

    async def logout(self) -> None:
        """End the server session; the local token is dropped even if the call fails"""
        try:
            await self.request("/auth/logout", method="POST")
        finally:
            self.set_token(None)

    async def get_profile(self) -> Dict[str, Any]:
        return await self.request("/auth/me")
