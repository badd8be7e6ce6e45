# -*- coding: utf-8 -*-
"""
Tests for wallet reconciliation and account queries.
"""

from decimal import Decimal

import pytest

from kuma_session.models.account import WalletSnapshot
from kuma_session.portfolio import reconcile_wallet


class TestReconcileWallet:

    @pytest.mark.parametrize("equity, free, held, expected_used", [
        ("1000.00", "600.00", "50.00", "450.00"),
        ("0", "0", "0", "0"),
        ("0.10000001", "0.00000001", "0.00000002", "0.10000002"),
        ("250", "300", "0", "-50"),
        ("12345.6789", "12345.6789", "100.1", "100.1"),
    ])
    def test_used_balance_identity(self, equity, free, held, expected_used):
        snapshot = reconcile_wallet({
            "equity": equity,
            "freeCollateral": free,
            "heldCollateral": held,
        })

        assert snapshot.balance == Decimal(equity)
        assert snapshot.used_balance == Decimal(expected_used)
        assert snapshot.used_balance == (Decimal(equity) - Decimal(free)) + Decimal(held)

    def test_free_collateral_is_available_collateral(self):
        snapshot = reconcile_wallet({
            "equity": "100",
            "freeCollateral": "40",
            "availableCollateral": "35",
            "heldCollateral": "5",
        })

        assert snapshot.free_collateral == Decimal("35")
        assert snapshot.used_balance == Decimal("65")

    def test_missing_fields_read_as_zero(self):
        snapshot = reconcile_wallet({})

        assert snapshot == WalletSnapshot(Decimal(0), Decimal(0), Decimal(0))


class TestPortfolioReader:

    @pytest.mark.asyncio
    async def test_wallet_snapshot_uses_first_wallet(self, portfolio, mock_api, wallet):
        mock_api.get_wallets.return_value = [
            {"equity": "500", "freeCollateral": "200", "heldCollateral": "25"},
            {"equity": "1", "freeCollateral": "1", "heldCollateral": "0"},
        ]

        snapshot = await portfolio.wallet_snapshot()

        assert snapshot.balance == Decimal("500")
        assert snapshot.used_balance == Decimal("325")
        params = mock_api.get_wallets.await_args.args[0]
        assert params["wallet"] == wallet
        assert params["nonce"]
        assert "market" not in params

    @pytest.mark.asyncio
    async def test_wallet_snapshot_without_data(self, portfolio, mock_api):
        mock_api.get_wallets.return_value = []

        snapshot = await portfolio.wallet_snapshot()

        assert snapshot.balance == 0
        assert snapshot.used_balance == 0

    @pytest.mark.asyncio
    async def test_positions_for_market(self, portfolio, mock_api):
        position = {"market": "ETH-USD", "quantity": "1.5"}
        mock_api.get_positions.return_value = [position]

        assert await portfolio.positions_for("ETH-USD") == position
        assert mock_api.get_positions.await_args.args[0]["market"] == "ETH-USD"

    @pytest.mark.asyncio
    async def test_positions_for_flat_market(self, portfolio, mock_api):
        mock_api.get_positions.return_value = []

        assert await portfolio.positions_for("ETH-USD") is None

    @pytest.mark.asyncio
    async def test_all_positions(self, portfolio, mock_api):
        positions = [{"market": "ETH-USD"}, {"market": "BTC-USD"}]
        mock_api.get_positions.return_value = positions

        assert await portfolio.all_positions() == positions
        assert "market" not in mock_api.get_positions.await_args.args[0]

    @pytest.mark.asyncio
    async def test_all_positions_none_when_flat(self, portfolio, mock_api):
        mock_api.get_positions.return_value = []

        assert await portfolio.all_positions() is None

    @pytest.mark.asyncio
    async def test_orders_for(self, portfolio, mock_api):
        orders = [{"orderId": "1"}]
        mock_api.get_orders.return_value = orders

        assert await portfolio.orders_for("SOL-USD") == orders
        assert mock_api.get_orders.await_args.args[0]["market"] == "SOL-USD"

        await portfolio.orders_for()
        assert "market" not in mock_api.get_orders.await_args.args[0]

    @pytest.mark.asyncio
    async def test_query_fault_propagates(self, portfolio, mock_api):
        mock_api.get_wallets.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            await portfolio.wallet_snapshot()
