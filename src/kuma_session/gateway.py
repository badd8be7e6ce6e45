"""
Trading gateway - builds wire orders from trade intents and submits them.

Every request gets a fresh nonce and the session's delegated key. Exchange
and transport faults are not caught here; the caller owns retry policy and
uses ``classify_error`` for display.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .api_methods import ExchangeAPI
from .constants import DEFAULT_MAX_LEVERAGE
from .models.orders import (
    OrderRequest, OrderType, PositionSide, TradeAction, TradeIntent,
)
from .translator import Number, OrderTranslator, leverage_fraction, resolve_direction
from .utils import new_nonce, to_decimal

logger = logging.getLogger(__name__)


class TradingGateway:
    """Order placement, cancellation and leverage control for one wallet."""

    def __init__(
        self,
        api: ExchangeAPI,
        wallet: str,
        delegated_key: str,
        translator: Optional[OrderTranslator] = None,
        nonce_factory: Callable[[], str] = new_nonce,
        label: str = "",
    ):
        self._api = api
        self._wallet = wallet
        self._delegated_key = delegated_key
        self._translator = translator or OrderTranslator()
        self._nonce_factory = nonce_factory
        self._label = label or wallet[:10]

    def build_order(
        self,
        order_type: OrderType,
        ticker: str,
        position_side: Union[PositionSide, str],
        action: Union[TradeAction, str],
        quantity: Number,
        price: Optional[Number] = None,
    ) -> OrderRequest:
        """
        Translate an intent into a wire order without sending it.

        ``price`` is the limit price for limit orders and the trigger price
        for stop orders; market orders ignore it. Raises ``InvalidTicker``
        for markets without a quantization rule.
        """
        order_type = OrderType(order_type)
        action = TradeAction(action)
        rule = self._translator.rule(ticker)

        limit_price = trigger_price = trigger_type = None
        if order_type is not OrderType.MARKET:
            if price is None:
                raise ValueError(f"{order_type.value} order requires a price")
            if order_type is OrderType.LIMIT:
                limit_price = rule.price(price)
            else:
                trigger_price = rule.price(price)
                trigger_type = "last"

        return OrderRequest(
            market=ticker,
            order_type=order_type,
            side=resolve_direction(position_side, action),
            quantity=rule.quantity(quantity),
            wallet=self._wallet,
            delegated_key=self._delegated_key,
            nonce=self._nonce_factory(),
            reduce_only=action is TradeAction.SELL,
            price=limit_price,
            trigger_price=trigger_price,
            trigger_type=trigger_type,
        )

    async def submit(self, order: OrderRequest) -> Dict[str, Any]:
        logger.info(
            f"[{self._label}] {order.order_type.value} {order.side.value} "
            f"{order.quantity} {order.market}"
            + (f" @ {order.price or order.trigger_price}" if order.order_type is not OrderType.MARKET else "")
            + (" [reduce-only]" if order.reduce_only else "")
        )
        return await self._api.create_order(order.to_parameters())

    async def place_limit_order(
        self,
        ticker: str,
        position_side: Union[PositionSide, str],
        action: Union[TradeAction, str],
        quantity: Number,
        price: Number,
    ) -> Dict[str, Any]:
        order = self.build_order(OrderType.LIMIT, ticker, position_side, action, quantity, price)
        return await self.submit(order)

    async def place_market_order(
        self,
        ticker: str,
        position_side: Union[PositionSide, str],
        action: Union[TradeAction, str],
        quantity: Number,
    ) -> Dict[str, Any]:
        order = self.build_order(OrderType.MARKET, ticker, position_side, action, quantity)
        return await self.submit(order)

    async def place_stop_order(
        self,
        ticker: str,
        position_side: Union[PositionSide, str],
        action: Union[TradeAction, str],
        quantity: Number,
        trigger_price: Number,
    ) -> Dict[str, Any]:
        order = self.build_order(
            OrderType.STOP_LOSS_MARKET, ticker, position_side, action, quantity, trigger_price
        )
        return await self.submit(order)

    async def submit_intent(
        self,
        intent: TradeIntent,
        order_type: Optional[OrderType] = None,
    ) -> Dict[str, Any]:
        """Submit an intent; priced intents default to limit, unpriced to market."""
        if order_type is None:
            order_type = OrderType.MARKET if intent.price is None else OrderType.LIMIT
        order = self.build_order(
            order_type,
            intent.ticker,
            intent.position_side,
            intent.action,
            intent.quantity,
            intent.price,
        )
        return await self.submit(order)

    async def cancel_by_market(self, ticker: str) -> List[Dict[str, Any]]:
        """Cancel every open order in one market."""
        logger.info(f"[{self._label}] Cancelling all orders on {ticker}")
        return await self._api.cancel_orders({
            "nonce": self._nonce_factory(),
            "wallet": self._wallet,
            "market": ticker,
            "delegatedKey": self._delegated_key,
        })

    async def cancel_by_ids(self, order_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Cancel specific orders by exchange id."""
        order_ids = list(order_ids)
        logger.info(f"[{self._label}] Cancelling {len(order_ids)} orders")
        return await self._api.cancel_orders({
            "nonce": self._nonce_factory(),
            "wallet": self._wallet,
            "orderIds": order_ids,
            "delegatedKey": self._delegated_key,
        })

    async def set_leverage(self, ticker: str, leverage: Number) -> Dict[str, Any]:
        """Store ``1/leverage`` as the market's initial margin fraction override."""
        self._translator.validate_ticker(ticker)
        fraction = leverage_fraction(leverage)
        logger.info(f"[{self._label}] Setting {ticker} leverage to {leverage}x ({fraction})")
        return await self._api.set_initial_margin_fraction_override({
            "nonce": self._nonce_factory(),
            "wallet": self._wallet,
            "market": ticker,
            "initialMarginFractionOverride": fraction,
            "delegatedKey": self._delegated_key,
        })

    async def get_leverage(self, ticker: str) -> Optional[Decimal]:
        """
        Effective leverage for a market.

        Returns ``DEFAULT_MAX_LEVERAGE`` when no override is stored, and None
        when the response cannot be read.
        """
        self._translator.validate_ticker(ticker)
        overrides = await self._api.get_initial_margin_fraction_override({
            "nonce": self._nonce_factory(),
            "wallet": self._wallet,
            "market": ticker,
        })
        try:
            fraction = to_decimal(overrides[0]["initialMarginFractionOverride"])
            if fraction == 0:
                return Decimal(DEFAULT_MAX_LEVERAGE)
            return Decimal(1) / fraction
        except (IndexError, KeyError, TypeError, InvalidOperation) as e:
            logger.error(f"[{self._label}] Error reading {ticker} leverage: {e!r}")
            return None
