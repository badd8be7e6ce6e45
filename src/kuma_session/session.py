"""
Kuma Session - per-user orchestration module.

Builds everything one bot user needs from their credentials:

- ``gateway``: order placement, cancellation and leverage (gateway.py)
- ``portfolio``: wallet, position and order queries (portfolio.py)
- ``watch()``: the reconnecting notification stream (event_stream.py)

The delegated signing address is derived from the session key once, here,
and handed to every component that signs requests.
"""

import logging
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .api_methods import ExchangeAPI
from .auth import ApiCredentials, KumaSigner, WalletSigner, derive_delegated_address
from .errors import classify_error
from .event_stream import EventStream, MessageSink
from .gateway import TradingGateway
from .http_client import HttpClient
from .localization import LocaleTexts, texts_for
from .models.config import ConnectionConfig, ReconnectPolicy, SessionCredentials
from .monitoring import RequestMonitor
from .portfolio import PortfolioReader
from .quantization import QuantizationRule
from .session_manager import SessionManager
from .stream_transport import KumaStreamTransport
from .translator import OrderTranslator
from .utils import new_nonce

load_dotenv()
logger = logging.getLogger(__name__)


class KumaSession:
    """
    Trading session for one user.

    Immutable once built: rebuild it from credentials instead of mutating.
    """

    def __init__(
        self,
        credentials: SessionCredentials,
        config: Optional[ConnectionConfig] = None,
        locales: Optional[Mapping[str, LocaleTexts]] = None,
        rules: Optional[Mapping[str, QuantizationRule]] = None,
        wallet_signer: Optional[WalletSigner] = None,
        reconnect_policy: Optional[ReconnectPolicy] = None,
    ):
        self.credentials = credentials
        self._config = config or ConnectionConfig()
        self.delegated_address = derive_delegated_address(credentials.session_key)
        self.texts = texts_for(credentials.lang, locales)
        self._reconnect_policy = reconnect_policy or ReconnectPolicy()

        signer = KumaSigner(
            ApiCredentials(api_key=credentials.api_key, api_secret=credentials.api_secret),
            wallet_signer,
        )
        self._session_manager = SessionManager(self._config)
        self._monitor = RequestMonitor()
        self._http_client = HttpClient(self._config, signer, self._monitor)
        self._api = ExchangeAPI(self._http_client, self._session_manager)

        self.translator = OrderTranslator(rules)
        self.gateway = TradingGateway(
            self._api,
            wallet=credentials.wallet,
            delegated_key=self.delegated_address,
            translator=self.translator,
            label=credentials.label,
        )
        self.portfolio = PortfolioReader(self._api, wallet=credentials.wallet)
        self._stream: Optional[EventStream] = None
        self._closed = False

    @classmethod
    def from_env(cls, user_id: Optional[int] = None, **kwargs) -> "KumaSession":
        """Create a session from ``KUMA_*`` environment variables."""
        credentials = SessionCredentials(
            wallet=os.getenv("KUMA_WALLET", ""),
            api_key=os.getenv("KUMA_API_KEY", ""),
            api_secret=os.getenv("KUMA_API_SECRET", ""),
            session_key=os.getenv("KUMA_SESSION_KEY", ""),
            lang=os.getenv("KUMA_LANG", "en"),
            user_id=user_id,
        )
        if "config" not in kwargs and os.getenv("KUMA_SANDBOX", "").lower() in ("1", "true", "yes"):
            kwargs["config"] = ConnectionConfig.for_sandbox()
        return cls(credentials, **kwargs)

    @property
    def monitor(self) -> RequestMonitor:
        return self._monitor

    @property
    def stream(self) -> Optional[EventStream]:
        return self._stream

    def describe_error(self, error: Any) -> str:
        """Localized, displayable text for a failed call."""
        return classify_error(error, self.texts)

    def create_event_stream(self, sink: MessageSink, user_id: Any = None) -> EventStream:
        """Build (but do not start) the notification stream for this user."""
        user_id = user_id if user_id is not None else self.credentials.user_id
        if user_id is None:
            raise ValueError("A user id is required to deliver notifications")

        async def ws_token():
            return await self._api.get_ws_token({
                "nonce": new_nonce(),
                "wallet": self.credentials.wallet,
            })

        transport = KumaStreamTransport(self._config.ws_url, ws_token, label=self.credentials.label)
        return EventStream(
            transport,
            sink,
            user_id=user_id,
            texts=self.texts,
            policy=self._reconnect_policy,
            label=self.credentials.label,
        )

    async def watch(self, sink: MessageSink, user_id: Any = None) -> None:
        """Run the notification stream until ``close()``."""
        if self._closed:
            raise RuntimeError("Session is closed")
        self._stream = self.create_event_stream(sink, user_id)
        await self._stream.run()

    async def close(self) -> None:
        """Stop the stream and release HTTP resources."""
        if self._closed:
            return
        self._closed = True
        if self._stream is not None:
            await self._stream.stop()
        await self._session_manager.close_session()
        logger.info(f"[{self.credentials.label}] Kuma session closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
