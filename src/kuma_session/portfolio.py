"""
Read-only wallet, position and order queries.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .api_methods import ExchangeAPI
from .models.account import WalletSnapshot
from .utils import new_nonce, safe_get, to_decimal

logger = logging.getLogger(__name__)


def reconcile_wallet(wallet_data: Dict[str, Any]) -> WalletSnapshot:
    """
    Summarize a wallet record.

    The free collateral shown to the user is the wallet's
    ``availableCollateral``. ``used_balance`` is the equity not free as
    collateral plus what open orders hold:
    ``(equity - freeCollateral) + heldCollateral``.
    """
    equity = to_decimal(safe_get(wallet_data, "equity"))
    free_collateral = to_decimal(safe_get(wallet_data, "freeCollateral"))
    held_collateral = to_decimal(safe_get(wallet_data, "heldCollateral"))
    return WalletSnapshot(
        balance=equity,
        free_collateral=to_decimal(safe_get(wallet_data, "availableCollateral")),
        used_balance=(equity - free_collateral) + held_collateral,
    )


class PortfolioReader:
    """Account queries for one wallet."""

    def __init__(
        self,
        api: ExchangeAPI,
        wallet: str,
        nonce_factory: Callable[[], str] = new_nonce,
    ):
        self._api = api
        self._wallet = wallet
        self._nonce_factory = nonce_factory

    def _params(self, market: Optional[str] = None) -> Dict[str, Any]:
        params = {"nonce": self._nonce_factory(), "wallet": self._wallet}
        if market:
            params["market"] = market
        return params

    async def wallet_snapshot(self) -> WalletSnapshot:
        wallets = await self._api.get_wallets(self._params())
        if not wallets:
            logger.warning(f"No wallet data returned for {self._wallet}")
            return reconcile_wallet({})
        return reconcile_wallet(wallets[0])

    async def positions_for(self, ticker: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """First open position, optionally in one market; None when flat."""
        positions = await self._api.get_positions(self._params(ticker))
        return positions[0] if positions else None

    async def all_positions(self) -> Optional[List[Dict[str, Any]]]:
        """All open positions, or None when there are none."""
        positions = await self._api.get_positions(self._params())
        return positions or None

    async def orders_for(self, ticker: Optional[str] = None) -> List[Dict[str, Any]]:
        """Open orders, optionally in one market."""
        return await self._api.get_orders(self._params(ticker))
