"""
Order translation: trade intent -> wire side and quantized strings.
"""

from decimal import Decimal
from typing import Mapping, Optional, Union

from .constants import LEVERAGE_FRACTION_DECIMALS
from .errors import InvalidTicker
from .models.orders import PositionSide, TradeAction, WireSide
from .quantization import QuantizationRule, default_rules, rule_for, to_wire
from .utils import to_decimal

Number = Union[Decimal, float, int, str]


def resolve_direction(
    position_side: Union[PositionSide, str],
    action: Union[TradeAction, str],
) -> WireSide:
    """
    Wire side for an exposure change.

    Longs map straight through (increase = buy, decrease = sell); shorts
    invert (increase = sell, decrease = buy back).
    """
    position_side = PositionSide(position_side)
    action = TradeAction(action)
    if position_side is PositionSide.LONG:
        return WireSide.BUY if action is TradeAction.BUY else WireSide.SELL
    return WireSide.SELL if action is TradeAction.BUY else WireSide.BUY


def normalize_ticker(ticker: str) -> str:
    """Map ``XXX-USDT`` symbols typed by users onto the exchange's ``XXX-USD``."""
    if ticker.endswith("USDT"):
        return ticker.replace("-USDT", "-USD")
    return ticker


def quantity_for_notional(current_price: Number, usd_amount: Number) -> Decimal:
    """Token quantity worth ``usd_amount`` at ``current_price``."""
    price = to_decimal(current_price)
    if price <= 0:
        raise ValueError(f"Price must be positive, got {current_price}")
    return to_decimal(usd_amount) / price


def leverage_fraction(leverage: Number) -> str:
    """Initial margin fraction for a leverage multiplier, e.g. 20 -> '0.05000000'."""
    multiplier = to_decimal(leverage)
    if multiplier <= 0:
        raise ValueError(f"Leverage must be positive, got {leverage}")
    return to_wire(Decimal(1) / multiplier, LEVERAGE_FRACTION_DECIMALS)


class OrderTranslator:
    """Quantizes prices and quantities against a market rule table."""

    def __init__(self, rules: Optional[Mapping[str, QuantizationRule]] = None):
        self._rules = rules if rules is not None else default_rules()

    def rule(self, ticker: str) -> QuantizationRule:
        return rule_for(ticker, self._rules)

    def validate_ticker(self, ticker: str) -> str:
        """Return ``ticker`` unchanged, or raise ``InvalidTicker``."""
        self.rule(ticker)
        return ticker

    def is_supported(self, ticker: str) -> bool:
        try:
            self.rule(ticker)
        except InvalidTicker:
            return False
        return True

    @property
    def markets(self) -> list:
        """Tickers with a known rule."""
        return sorted(self._rules)

    def quantize_price(self, ticker: str, price: Number) -> str:
        return self.rule(ticker).price(price)

    def quantize_quantity(self, ticker: str, quantity: Number) -> str:
        return self.rule(ticker).quantity(quantity)

    resolve_direction = staticmethod(resolve_direction)
