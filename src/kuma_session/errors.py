"""
Exceptions and user-facing error classification.

Exchange faults are raised as ``ExchangeError`` carrying the backend's error
code (when the response had one) next to the raw status and payload.
``classify_error`` turns any exception into a displayable localized string.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from .localization import GENERIC_ERROR_TEXT, LocaleTexts

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Backend error codes with a dedicated user message."""
    INVALID_PARAMETER = "INVALID_PARAMETER"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    LIMIT_PRICE_OUT_OF_BOUNDS = "LIMIT_PRICE_OUT_OF_BOUNDS"
    QUANTITY_TOO_LOW = "QUANTITY_TOO_LOW"


_CODE_TEXT_FIELDS = {
    ErrorCode.INVALID_PARAMETER: "error_params",
    ErrorCode.INSUFFICIENT_FUNDS: "error_insufficient_funds",
    ErrorCode.LIMIT_PRICE_OUT_OF_BOUNDS: "error_price",
    ErrorCode.QUANTITY_TOO_LOW: "error_quantity_low",
}


class KumaError(Exception):
    """Base exception for the session layer."""
    pass


class InvalidTicker(KumaError, ValueError):
    """Raised when a ticker has no quantization rule."""

    def __init__(self, ticker: str):
        super().__init__(f"Invalid ticker: {ticker}")
        self.ticker = ticker


class ReconnectExhausted(KumaError):
    """Raised when a bounded reconnect policy gives up."""
    pass


class ExchangeError(KumaError):
    """Fault returned by the exchange or raised while talking to it."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data
        self.code = code

    @property
    def error_code(self) -> Optional[ErrorCode]:
        """The code as a known ``ErrorCode``, or None."""
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None


class ExchangeServerError(ExchangeError):
    """Exception for server errors (5xx)."""
    pass


class ExchangeClientError(ExchangeError):
    """Exception for client errors (4xx)."""
    pass


def classify_error(error: Any, texts: LocaleTexts) -> str:
    """
    Map an exception to a localized message.

    Known backend codes get their own template; everything else, including
    errors without a code and non-exchange exceptions, gets the generic one.
    Never raises.
    """
    try:
        code = getattr(error, "code", None)
        if code is not None and not isinstance(code, ErrorCode):
            code = ErrorCode(code)
        field_name = _CODE_TEXT_FIELDS.get(code)
        if field_name:
            return getattr(texts, field_name)
    except (ValueError, TypeError):
        pass
    except Exception as e:
        logger.debug(f"Unclassifiable error {error!r}: {e}")
    return getattr(texts, "error_generic", None) or GENERIC_ERROR_TEXT
