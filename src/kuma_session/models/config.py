"""
Configuration models for the Kuma session layer.

Immutable configuration structures validated on construction.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from ..constants import (
    DEFAULT_BASE_URL, DEFAULT_RECONNECT_DELAY, DEFAULT_TIMEOUT, DEFAULT_WS_URL,
    SANDBOX_BASE_URL, SANDBOX_WS_URL,
)


@dataclass(frozen=True)
class SessionCredentials:
    """Per-user credentials and preferences a session is built from."""
    wallet: str
    api_key: str
    api_secret: str
    session_key: str
    lang: str = "en"
    user_id: Optional[int] = None
    first_name: str = ""

    def __post_init__(self):
        """Validate credentials after initialization."""
        for name in ("wallet", "api_key", "api_secret", "session_key"):
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")

        if not self.wallet.startswith("0x") or len(self.wallet) != 42:
            raise ValueError(f"Wallet address looks malformed: {self.wallet!r}")

    @property
    def label(self) -> str:
        """Short identifier used in log lines."""
        return self.first_name or self.wallet[:10]


@dataclass(frozen=True)
class ConnectionConfig:
    """Endpoints and timeouts for the exchange."""
    base_url: str = DEFAULT_BASE_URL
    ws_url: str = DEFAULT_WS_URL
    timeout: float = DEFAULT_TIMEOUT
    sandbox: bool = False

    @classmethod
    def for_sandbox(cls, timeout: float = DEFAULT_TIMEOUT) -> "ConnectionConfig":
        """Configuration pointing at the sandbox environment."""
        return cls(
            base_url=SANDBOX_BASE_URL,
            ws_url=SANDBOX_WS_URL,
            timeout=timeout,
            sandbox=True,
        )


@dataclass(frozen=True)
class ReconnectPolicy:
    """
    How the event stream retries after a disconnect.

    The default waits a fixed 45 seconds before every attempt and never gives
    up. ``max_attempts`` and ``backoff_factor`` bound or stretch the loop.
    """
    delay: float = DEFAULT_RECONNECT_DELAY
    max_attempts: Optional[int] = None
    backoff_factor: float = 1.0

    def __post_init__(self):
        if self.delay < 0:
            raise ValueError("Reconnect delay cannot be negative")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_factor < 1.0:
            raise ValueError("backoff_factor must be >= 1.0")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before the given (0-based) attempt."""
        return self.delay * (self.backoff_factor ** attempt)

    def allows(self, attempt: int) -> bool:
        """Whether the given (0-based) attempt may run."""
        return self.max_attempts is None or attempt < self.max_attempts

    async def wait(self, attempt: int) -> None:
        """Sleep before the given attempt."""
        await asyncio.sleep(self.delay_for(attempt))
