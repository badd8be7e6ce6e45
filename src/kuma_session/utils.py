"""
Utility functions for the Kuma session layer.
"""

import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Union


def new_nonce() -> str:
    """Fresh time-based UUID; the exchange rejects reused or non-v1 nonces."""
    return str(uuid.uuid1())


def to_decimal(value: Union[Decimal, float, int, str, None], default: str = "0") -> Decimal:
    """Convert a wire value to Decimal, going through str to avoid float noise."""
    if value is None or value == "":
        return Decimal(default)
    return Decimal(str(value))


def round_half_up(value: Union[Decimal, float, str], places: int) -> Decimal:
    """Round to a fixed number of decimal places, ties away from zero."""
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_decimal(value: Union[Decimal, float, str]) -> str:
    """Render a number without trailing zeros or exponent ("65000.50" -> "65000.5")."""
    try:
        normalized = to_decimal(value).normalize()
    except InvalidOperation:
        return str(value)
    return format(normalized, "f")


def sanitize_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Remove None values and empty strings from dictionary."""
    return {
        key: value for key, value in data.items()
        if value is not None and value != ""
    }


def safe_get(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Safely get nested dictionary values using dot notation."""
    keys = path.split(".")
    current = data

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default

    return current
