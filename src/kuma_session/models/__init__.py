"""
Data models for the Kuma session layer.

Immutable data structures shared by the gateway, portfolio reader and
event stream.
"""

from .config import ConnectionConfig, ReconnectPolicy, SessionCredentials
from .orders import (
    OrderRequest, OrderType, PositionSide, TradeAction, TradeIntent, WireSide,
)
from .account import WalletSnapshot
from .events import (
    ConnectionState, OrderFill, OrderFillBatch, PositionUpdate, StreamEvent,
    parse_stream_event,
)

__all__ = [
    # Configuration
    "ConnectionConfig",
    "ReconnectPolicy",
    "SessionCredentials",
    # Orders
    "OrderRequest",
    "OrderType",
    "PositionSide",
    "TradeAction",
    "TradeIntent",
    "WireSide",
    # Account
    "WalletSnapshot",
    # Events
    "ConnectionState",
    "OrderFill",
    "OrderFillBatch",
    "PositionUpdate",
    "StreamEvent",
    "parse_stream_event",
]
