"""
Event stream models.

Raw stream messages look like ``{"type": "orders", "data": {...}}``; only the
``orders`` and ``positions`` channels are turned into typed events.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..utils import to_decimal


class ConnectionState(Enum):
    """Lifecycle of the authenticated stream."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBING = "subscribing"
    LIVE = "live"
    RECONNECTING = "reconnecting"


@dataclass(frozen=True)
class OrderFill:
    """A single fill inside an order update."""
    quote_quantity: Decimal
    position: str
    action: str
    fee: Optional[str] = None

    @property
    def is_liquidation(self) -> bool:
        return self.fee is None


@dataclass(frozen=True)
class OrderFillBatch:
    """Order update carrying one or more fills."""
    market: str
    fills: List[OrderFill] = field(default_factory=list)


@dataclass(frozen=True)
class PositionUpdate:
    """Position update for one market."""
    market: str
    status: str
    quantity: Decimal
    realized_pnl: Decimal
    exit_price: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    @property
    def direction(self) -> str:
        """Position side derived from the sign of the net quantity."""
        return "long" if self.quantity > 0 else "short"


StreamEvent = Union[OrderFillBatch, PositionUpdate]


def parse_stream_event(message: Dict[str, Any]) -> Optional[StreamEvent]:
    """
    Build a typed event from a raw stream message.

    Returns None for message types the session does not react to. Order
    updates without fills yield an empty batch.
    """
    message_type = message.get("type")
    data = message.get("data") or {}

    if message_type == "orders":
        fills = [
            OrderFill(
                quote_quantity=to_decimal(fill.get("quoteQuantity")),
                position=str(fill.get("position", "")),
                action=str(fill.get("action", "")),
                fee=fill.get("fee"),
            )
            for fill in data.get("fills") or []
        ]
        return OrderFillBatch(market=data.get("market", ""), fills=fills)

    if message_type == "positions":
        return PositionUpdate(
            market=data.get("market", ""),
            status=data.get("status", ""),
            quantity=to_decimal(data.get("quantity")),
            realized_pnl=to_decimal(data.get("realizedPnL")),
            exit_price=data.get("exitPrice"),
        )

    return None
