"""
HTTP client for the Kuma REST API.

Signs and executes single requests. There is no retry here: every request
carries its own nonce and callers decide whether to resubmit.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp
from aiohttp import ClientResponse, ClientSession

from .auth import KumaSigner
from .constants import ERROR_STATUS_CODE
from .errors import ExchangeClientError, ExchangeError, ExchangeServerError
from .models.config import ConnectionConfig
from .monitoring import RequestMonitor

logger = logging.getLogger(__name__)


class HttpClient:
    """HTTP client specialized for Kuma API interactions."""

    def __init__(
        self,
        config: ConnectionConfig,
        signer: KumaSigner,
        monitor: Optional[RequestMonitor] = None,
    ):
        self._config = config
        self._signer = signer
        self._monitor = monitor or RequestMonitor()

    @property
    def monitor(self) -> RequestMonitor:
        return self._monitor

    async def request(
        self,
        session: ClientSession,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        wallet_signed: bool = False,
    ) -> Any:
        """
        Execute an authenticated request and return the decoded JSON.

        GET parameters travel in the query string; everything else is sent as
        a ``{"parameters": ..., "signature": ...}`` JSON body. The HMAC covers
        exactly the bytes sent.
        """
        method = method.upper()
        url = f"{self._config.base_url}{endpoint}"
        params = params or {}
        request_kwargs: Dict[str, Any] = {"method": method, "url": url}

        if method == "GET":
            query_string = urlencode(sorted(params.items()))
            request_kwargs["params"] = query_string
            headers = self._signer.get_auth_headers(query_string)
        else:
            body: Dict[str, Any] = {"parameters": params}
            if wallet_signed:
                signature = self._signer.wallet_signature(params)
                if signature is not None:
                    body["signature"] = signature
            payload = json.dumps(body, separators=(",", ":"))
            request_kwargs["data"] = payload
            headers = self._signer.get_auth_headers(payload)
            headers["Content-Type"] = "application/json"
        request_kwargs["headers"] = headers

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status_code = ERROR_STATUS_CODE
        try:
            async with session.request(**request_kwargs) as response:
                status_code = response.status
                response_data = await self._process_response(response)
                if response.status >= 400:
                    raise self._error_for(response.status, response_data)
                return response_data
        except aiohttp.ClientError as e:
            logger.warning(f"{method} {endpoint} failed: {e}")
            raise
        finally:
            duration_ms = (loop.time() - start_time) * 1000
            self._monitor.record_request(endpoint, method, status_code, duration_ms)

    def _error_for(self, status: int, response_data: Any) -> ExchangeError:
        code = None
        message = response_data
        if isinstance(response_data, dict):
            code = response_data.get("code")
            message = response_data.get("message", response_data)

        error_class = ExchangeServerError if status >= 500 else ExchangeClientError
        return error_class(
            f"HTTP {status}: {message}",
            status_code=status,
            response_data=response_data if isinstance(response_data, dict) else None,
            code=code,
        )

    async def _process_response(self, response: ClientResponse) -> Any:
        """Process HTTP response and return data."""
        response_text = await response.text()

        if not response_text:
            return None

        try:
            return json.loads(response_text)
        except json.JSONDecodeError as e:
            raise ExchangeError(
                f"Invalid JSON response (Status {response.status}): {response_text[:200]}",
                status_code=response.status,
            ) from e
