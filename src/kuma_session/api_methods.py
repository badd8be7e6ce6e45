"""
Kuma REST endpoints used by the session layer.

Thin wrappers that pick the HTTP method and path for each call. Parameters
arrive in wire form (camelCase, quantized strings, nonce included).
"""

import logging
from typing import Any, Dict, List, Optional

from .http_client import HttpClient
from .session_manager import SessionManager
from .utils import sanitize_dict

logger = logging.getLogger(__name__)


class ExchangeAPI:
    """Container for the authenticated endpoint calls."""

    def __init__(self, http_client: HttpClient, session_manager: SessionManager):
        self._http_client = http_client
        self._session_manager = session_manager

    async def _call(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any],
        wallet_signed: bool = False,
    ) -> Any:
        session = await self._session_manager.create_session()
        return await self._http_client.request(
            session, method, endpoint, sanitize_dict(params), wallet_signed=wallet_signed
        )

    # Trading
    async def create_order(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("POST", "/v1/orders", params, wallet_signed=True)

    async def cancel_orders(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._call("DELETE", "/v1/orders", params, wallet_signed=True)

    async def set_initial_margin_fraction_override(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call(
            "POST", "/v1/initialMarginFractionOverride", params, wallet_signed=True
        )

    async def get_initial_margin_fraction_override(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._call("GET", "/v1/initialMarginFractionOverride", params) or []

    # Account
    async def get_wallets(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._call("GET", "/v1/wallets", params) or []

    async def get_positions(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._call("GET", "/v1/positions", params) or []

    async def get_orders(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._call("GET", "/v1/orders", params) or []

    # Streaming
    async def get_ws_token(self, params: Dict[str, Any]) -> Optional[str]:
        """Short-lived token authorizing private websocket subscriptions."""
        response = await self._call("GET", "/v1/wsToken", params)
        if isinstance(response, dict):
            return response.get("token")
        logger.warning(f"Unexpected wsToken response: {response!r}")
        return None
