"""
Kuma Session - trading-session layer for the Kuma perpetuals exchange.

Turns chat-bot trade intents into exchange-compliant orders, answers
portfolio queries and streams localized fill/position notifications.
"""

from .session import KumaSession
from .gateway import TradingGateway
from .portfolio import PortfolioReader, reconcile_wallet
from .translator import (
    OrderTranslator,
    leverage_fraction,
    normalize_ticker,
    quantity_for_notional,
    resolve_direction,
)
from .quantization import QuantizationRule, load_rules
from .event_stream import EventStream, MessageSink
from .stream_transport import KumaStreamTransport
from .sinks import TelegramSink
from .localization import LocaleTexts, load_locales, substitute, texts_for
from .errors import (
    ErrorCode,
    ExchangeClientError,
    ExchangeError,
    ExchangeServerError,
    InvalidTicker,
    KumaError,
    ReconnectExhausted,
    classify_error,
)
from .models import (
    # Configuration
    ConnectionConfig,
    ReconnectPolicy,
    SessionCredentials,
    # Orders
    OrderRequest,
    OrderType,
    PositionSide,
    TradeAction,
    TradeIntent,
    WireSide,
    # Account
    WalletSnapshot,
    # Events
    ConnectionState,
    OrderFill,
    OrderFillBatch,
    PositionUpdate,
)

__all__ = [
    # Session
    "KumaSession",
    "TradingGateway",
    "PortfolioReader",
    "reconcile_wallet",
    # Translation
    "OrderTranslator",
    "QuantizationRule",
    "load_rules",
    "leverage_fraction",
    "normalize_ticker",
    "quantity_for_notional",
    "resolve_direction",
    # Streaming
    "EventStream",
    "MessageSink",
    "KumaStreamTransport",
    "TelegramSink",
    # Localization
    "LocaleTexts",
    "load_locales",
    "substitute",
    "texts_for",
    # Errors
    "ErrorCode",
    "ExchangeClientError",
    "ExchangeError",
    "ExchangeServerError",
    "InvalidTicker",
    "KumaError",
    "ReconnectExhausted",
    "classify_error",
    # Models
    "ConnectionConfig",
    "ReconnectPolicy",
    "SessionCredentials",
    "OrderRequest",
    "OrderType",
    "PositionSide",
    "TradeAction",
    "TradeIntent",
    "WireSide",
    "WalletSnapshot",
    "ConnectionState",
    "OrderFill",
    "OrderFillBatch",
    "PositionUpdate",
]
