"""
Per-market quantization rules.

The exchange expects prices and quantities as strings with exactly
``WIRE_DECIMALS`` decimals, already snapped to the market's tick/step size.
Rules live in ``data/markets.yml`` and are loaded once per process.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .constants import WIRE_DECIMALS
from .errors import InvalidTicker
from .utils import to_decimal

_ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "down": ROUND_DOWN,
}


@dataclass(frozen=True)
class QuantizationRule:
    """Decimal places a market accepts for price and quantity."""
    price_decimals: int
    quantity_decimals: int
    price_rounding: str = "half_up"

    def __post_init__(self):
        for name in ("price_decimals", "quantity_decimals"):
            places = getattr(self, name)
            if not 0 <= places <= WIRE_DECIMALS:
                raise ValueError(f"{name} must be between 0 and {WIRE_DECIMALS}, got {places}")
        if self.price_rounding not in _ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.price_rounding}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuantizationRule":
        """Create from a markets-file entry."""
        return cls(
            price_decimals=int(data["price_decimals"]),
            quantity_decimals=int(data["quantity_decimals"]),
            price_rounding=data.get("price_rounding", "half_up"),
        )

    def price(self, value: Union[Decimal, float, str]) -> str:
        return to_wire(value, self.price_decimals, _ROUNDING_MODES[self.price_rounding])

    def quantity(self, value: Union[Decimal, float, str]) -> str:
        return to_wire(value, self.quantity_decimals)


def to_wire(value: Union[Decimal, float, str], places: int, rounding: str = ROUND_HALF_UP) -> str:
    """
    Round ``value`` to ``places`` decimals and pad to the wire length.
    NaN and infinities raise ``ValueError``.

    >>> to_wire(3512.347, 1)
    '3512.30000000'
    >>> to_wire(812, 0)
    '812.00000000'
    """
    number = to_decimal(value)
    if not number.is_finite():
        raise ValueError(f"Cannot quantize non-finite value {value!r}")
    snapped = number.quantize(Decimal(1).scaleb(-places), rounding=rounding)
    return f"{snapped:.{WIRE_DECIMALS}f}"


def load_rules(path: Optional[Union[str, Path]] = None) -> Dict[str, QuantizationRule]:
    """Load the market -> rule table from YAML (the packaged one by default)."""
    if path is None:
        return dict(default_rules())
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return {ticker: QuantizationRule.from_dict(entry) for ticker, entry in raw.items()}


@lru_cache(maxsize=1)
def default_rules() -> Dict[str, QuantizationRule]:
    text = resources.files("kuma_session").joinpath("data/markets.yml").read_text(encoding="utf-8")
    raw = yaml.safe_load(text)
    return {ticker: QuantizationRule.from_dict(entry) for ticker, entry in raw.items()}


def rule_for(ticker: str, rules: Optional[Mapping[str, QuantizationRule]] = None) -> QuantizationRule:
    """Rule for ``ticker``; raises ``InvalidTicker`` when the market is unknown."""
    table = rules if rules is not None else default_rules()
    try:
        return table[ticker]
    except (KeyError, TypeError):
        raise InvalidTicker(ticker) from None
