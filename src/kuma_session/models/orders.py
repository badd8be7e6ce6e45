"""
Order-related models.

Trade intents speak in exposure terms; ``OrderRequest`` is the wire record.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..utils import sanitize_dict


class PositionSide(Enum):
    """Side of the position a trade refers to."""
    LONG = "long"
    SHORT = "short"


class TradeAction(Enum):
    """Exposure change: BUY increases the position, SELL decreases or closes it."""
    BUY = "buy"
    SELL = "sell"


class WireSide(Enum):
    """Literal side accepted by the exchange."""
    BUY = "buy"
    SELL = "sell"


class OrderType(Enum):
    """Order types the gateway submits."""
    LIMIT = "limit"
    MARKET = "market"
    STOP_LOSS_MARKET = "stopLossMarket"


@dataclass(frozen=True)
class TradeIntent:
    """User-level trade request."""
    ticker: str
    position_side: PositionSide
    action: TradeAction
    quantity: Union[Decimal, float]
    price: Optional[Union[Decimal, float]] = None

    def __post_init__(self):
        # Accept plain strings from the bot layer
        object.__setattr__(self, "position_side", PositionSide(self.position_side))
        object.__setattr__(self, "action", TradeAction(self.action))


@dataclass(frozen=True)
class OrderRequest:
    """Order request data structure, already quantized."""
    market: str
    order_type: OrderType
    side: WireSide
    quantity: str
    wallet: str
    delegated_key: str
    nonce: str
    reduce_only: bool = False
    price: Optional[str] = None
    trigger_price: Optional[str] = None
    trigger_type: Optional[str] = None

    def to_parameters(self) -> Dict[str, Any]:
        """Wire parameters for the create-order call."""
        return sanitize_dict({
            "nonce": self.nonce,
            "wallet": self.wallet,
            "market": self.market,
            "type": self.order_type.value,
            "side": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "triggerPrice": self.trigger_price,
            "triggerType": self.trigger_type,
            "reduceOnly": self.reduce_only,
            "delegatedKey": self.delegated_key,
        })
