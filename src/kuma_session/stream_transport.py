"""
Websocket transport for the authenticated Kuma stream.

Wraps one aiohttp websocket: connect, subscribe with a fresh wsToken,
iterate decoded messages until the socket goes away. Reconnect policy lives
in ``EventStream``, not here.
"""

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, Optional

import aiohttp

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]


class KumaStreamTransport:
    """Single authenticated websocket connection."""

    def __init__(self, ws_url: str, token_provider: TokenProvider, label: str = ""):
        """
        Args:
            ws_url: Websocket endpoint
            token_provider: Coroutine returning a wsToken for private channels
            label: Identifier used in log lines
        """
        self.ws_url = ws_url
        self._token_provider = token_provider
        self._label = label
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self) -> None:
        """Open a new socket, dropping any previous one."""
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        self._ws = await self._session.ws_connect(self.ws_url, heartbeat=60)
        logger.info(f"[{self._label}] Connected to {self.ws_url}")

    async def subscribe(self, channels: Iterable[str]) -> None:
        """Subscribe to private channels; raises if not connected or no token."""
        if not self.connected:
            raise ConnectionError("Websocket is not connected")
        token = await self._token_provider()
        if not token:
            raise ConnectionError("Could not obtain a websocket token")
        await self._ws.send_json({
            "method": "subscribe",
            "token": token,
            "subscriptions": [{"name": channel} for channel in channels],
        })

    async def messages(self) -> AsyncIterator[Dict[str, Any]]:
        """Yield decoded messages; returns when the socket closes or errors."""
        if self._ws is None:
            return
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    data = json.loads(msg.data)
                except json.JSONDecodeError:
                    logger.warning(f"[{self._label}] Dropping non-JSON frame: {msg.data[:200]}")
                    continue
                yield data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.error(f"[{self._label}] WebSocket error: {self._ws.exception()}")
                break
            elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                logger.warning(f"[{self._label}] WebSocket closed")
                break

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        self._ws = None
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
