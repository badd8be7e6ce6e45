"""
Message sinks for stream notifications.
"""

import logging
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramSink:
    """Sends HTML-formatted messages through the Telegram Bot API."""

    def __init__(self, token: str, api_url: str = TELEGRAM_API_URL, timeout: float = 10.0):
        self.base = f"{api_url}/bot{token}"
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def send(self, user_id: Any, text: str) -> bool:
        """Deliver ``text`` to chat ``user_id``; returns False if Telegram refused it."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

        payload = {
            "chat_id": user_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        async with self._session.post(f"{self.base}/sendMessage", json=payload) as response:
            if response.status == 200:
                return True
            body = await response.text()
            logger.warning(f"Telegram sendMessage to {user_id} failed ({response.status}): {body[:300]}")
            return False

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
