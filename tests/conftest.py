# -*- coding: utf-8 -*-
"""
Shared fixtures and utilities for testing the Kuma session layer.
"""

import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from kuma_session.api_methods import ExchangeAPI
from kuma_session.gateway import TradingGateway
from kuma_session.localization import LocaleTexts
from kuma_session.models.config import SessionCredentials
from kuma_session.portfolio import PortfolioReader

# Well-known test key; never funded
SESSION_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SESSION_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
WALLET = "0x1111111111111111111111111111111111111111"


class FakeStreamTransport:
    """
    Scripted stream transport.

    Each connection consumes one script (a list of messages; an Exception
    entry is raised from the iterator). After the last script the connection
    stays open until ``close()``; earlier scripts end in a disconnect.
    """

    def __init__(self, scripts: Optional[List[List[Any]]] = None, connect_errors: Optional[List[Any]] = None):
        self.scripts = list(scripts if scripts is not None else [[]])
        self.connect_errors = list(connect_errors or [])
        self.connect_calls = 0
        self.subscriptions: List[List[str]] = []
        self.connected = False
        self._closed = asyncio.Event()

    async def connect(self) -> None:
        self.connect_calls += 1
        error = self.connect_errors.pop(0) if self.connect_errors else None
        if error is not None:
            raise error
        self.connected = True

    async def subscribe(self, channels) -> None:
        self.subscriptions.append(list(channels))

    async def messages(self):
        script = self.scripts.pop(0) if self.scripts else []
        for message in script:
            if isinstance(message, Exception):
                self.connected = False
                raise message
            yield message
        if not self.scripts:
            await self._closed.wait()
        self.connected = False

    async def close(self) -> None:
        self.connected = False
        self._closed.set()


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it holds or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def texts() -> LocaleTexts:
    """Compact templates that keep assertions readable."""
    return LocaleTexts(
        order_filled="Filled %a USD | %pd | %a | fee %f",
        closed_position="%pd closed @ %ep: %pnl",
        error_params="bad params",
        error_insufficient_funds="no funds",
        error_price="bad price",
        error_quantity_low="too small",
        error_generic="generic error",
    )


@pytest.fixture
def credentials() -> SessionCredentials:
    return SessionCredentials(
        wallet=WALLET,
        api_key="test-api-key-0123456789",
        api_secret="test-api-secret-0123456789",
        session_key=SESSION_KEY,
        lang="en",
        user_id=424242,
        first_name="Alice",
    )


@pytest.fixture
def mock_api() -> AsyncMock:
    """ExchangeAPI double; every endpoint is an AsyncMock."""
    api = AsyncMock(spec=ExchangeAPI)
    api.create_order.return_value = {"orderId": "order-1"}
    api.cancel_orders.return_value = [{"orderId": "order-1"}]
    api.set_initial_margin_fraction_override.return_value = {}
    api.get_initial_margin_fraction_override.return_value = []
    api.get_wallets.return_value = []
    api.get_positions.return_value = []
    api.get_orders.return_value = []
    return api


@pytest.fixture
def gateway(mock_api) -> TradingGateway:
    return TradingGateway(mock_api, wallet=WALLET, delegated_key=SESSION_ADDRESS, label="test")


@pytest.fixture
def portfolio(mock_api) -> PortfolioReader:
    return PortfolioReader(mock_api, wallet=WALLET)


def _fill(quote_quantity: str, position: str = "long", action: str = "open", fee: Optional[str] = "0.0120") -> Dict[str, Any]:
    data = {"quoteQuantity": quote_quantity, "position": position, "action": action}
    if fee is not None:
        data["fee"] = fee
    return data


def _orders_message(market: str, fills: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "orders", "data": {"market": market, "fills": fills}}


def _positions_message(market: str, status: str, quantity: str = "0", realized_pnl: str = "0",
                       exit_price: Optional[str] = None) -> Dict[str, Any]:
    data = {"market": market, "status": status, "quantity": quantity, "realizedPnL": realized_pnl}
    if exit_price is not None:
        data["exitPrice"] = exit_price
    return {"type": "positions", "data": data}


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def session_key() -> str:
    return SESSION_KEY


@pytest.fixture
def session_address() -> str:
    """Address derived from ``session_key``."""
    return SESSION_ADDRESS


@pytest.fixture
def make_transport():
    """Factory for scripted stream transports."""
    return FakeStreamTransport


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def make_fill():
    """Builder for raw fill records."""
    return _fill


@pytest.fixture
def orders_message():
    """Builder for raw ``orders`` stream messages."""
    return _orders_message


@pytest.fixture
def positions_message():
    """Builder for raw ``positions`` stream messages."""
    return _positions_message
