"""
Shared HTTP session for one trading session.

Every REST call of a ``KumaSession`` reuses the same pooled
``aiohttp.ClientSession``; it is opened lazily and closed with the session.
"""

from typing import Optional

import aiohttp

from .constants import HTTP_POOL_SIZE, USER_AGENT
from .models.config import ConnectionConfig


class SessionManager:
    """Owns the pooled ``aiohttp.ClientSession`` for REST calls."""

    def __init__(self, config: ConnectionConfig):
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def create_session(self) -> aiohttp.ClientSession:
        """Return the open session, opening a new one after ``close_session``."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=HTTP_POOL_SIZE, ttl_dns_cache=300),
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )
        return self._session

    async def close_session(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        """The current session, or None before the first call."""
        return self._session
