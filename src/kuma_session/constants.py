"""
Constants for the Kuma session layer.
"""

# API Configuration
DEFAULT_BASE_URL = "https://api.kuma.bid"
DEFAULT_WS_URL = "wss://websocket.kuma.bid/v1"
SANDBOX_BASE_URL = "https://api-sandbox.kuma.bid"
SANDBOX_WS_URL = "wss://websocket-sandbox.kuma.bid/v1"
DEFAULT_TIMEOUT = 30.0
HTTP_POOL_SIZE = 20
USER_AGENT = "kuma-session/1.0"

# Wire format: every price/quantity string carries exactly this many decimals
WIRE_DECIMALS = 8
LEVERAGE_FRACTION_DECIMALS = 2
DEFAULT_MAX_LEVERAGE = 20

# Event stream
DEFAULT_RECONNECT_DELAY = 45.0  # seconds
STREAM_CHANNELS = ("orders", "positions")

# HTTP Status Codes
ERROR_STATUS_CODE = 500
