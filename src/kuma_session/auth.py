"""
Authentication and signing utilities for the Kuma API.

Requests are authenticated with an API key header plus an HMAC-SHA256 of the
exact query string or JSON body being sent. Order-level wallet signatures
belong to the exchange's own scheme and are supplied by an external signer.
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from eth_account import Account

API_KEY_HEADER = "KUMA-API-KEY"
SIGNATURE_HEADER = "KUMA-HMAC-SIGNATURE"

# Produces the wallet signature for a request's parameters
WalletSigner = Callable[[Dict[str, Any]], str]


@dataclass(frozen=True)
class ApiCredentials:
    """Container for API credentials"""
    api_key: str
    api_secret: str


class KumaSigner:
    """Builds authentication headers for REST requests."""

    def __init__(self, credentials: ApiCredentials, wallet_signer: Optional[WalletSigner] = None):
        """
        Initialize the signer with API credentials.

        Args:
            credentials: API key and secret
            wallet_signer: Optional callable producing the wallet signature
                attached to trade and leverage requests
        """
        self.credentials = credentials
        self.wallet_signer = wallet_signer

    def hmac_signature(self, payload: str) -> str:
        """Hex-encoded HMAC-SHA256 of the serialized query string or body."""
        return hmac.new(
            self.credentials.api_secret.encode("utf-8"),
            payload.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def get_auth_headers(self, payload: Optional[str] = None) -> Dict[str, str]:
        """API key header, plus the HMAC header when a payload is signed."""
        headers = {API_KEY_HEADER: self.credentials.api_key}
        if payload is not None:
            headers[SIGNATURE_HEADER] = self.hmac_signature(payload)
        return headers

    def wallet_signature(self, parameters: Dict[str, Any]) -> Optional[str]:
        if self.wallet_signer is None:
            return None
        return self.wallet_signer(parameters)


def derive_delegated_address(session_key: str) -> str:
    """Checksummed public address of the session's private signing key."""
    return Account.from_key(session_key).address
