"""
Stream event -> user notification text.

Output uses the Telegram HTML subset (``<b>`` plus emoji).
"""

from typing import List, Optional

from .localization import LocaleTexts, substitute
from .models.events import OrderFill, OrderFillBatch, PositionUpdate, StreamEvent
from .utils import format_decimal, round_half_up

LIQUIDATION_FEE = "LIQUIDATION"


def market_tag(market: str) -> str:
    """Hashtag form of a market: ``BTC-USD`` -> ``BTCUSD``."""
    return market.replace("-", "", 1)


def format_fill(market: str, fill: OrderFill, texts: LocaleTexts) -> str:
    fee = LIQUIDATION_FEE if fill.is_liquidation else str(fill.fee)
    body = substitute(
        texts.order_filled,
        ("%a", str(round_half_up(fill.quote_quantity, 2))),
        ("%pd", fill.position),
        ("%a", fill.action),
        ("%f", fee),
    )
    return f"🟢 <b>#{market_tag(market)}</b> 🟢\n\n" + body


def format_closed_position(update: PositionUpdate, texts: LocaleTexts) -> Optional[str]:
    """Notification for a closed position; None for any other status."""
    if not update.is_closed:
        return None

    pnl = round_half_up(update.realized_pnl, 1)
    if pnl == 0:
        # Losses that round away show as 0.0, not -0.0
        pnl = abs(pnl)
    indicator = "🟢" if pnl > 0 else "🔴"
    pnl_text = f"{indicator} <b>{pnl}</b>USD"
    exit_price = format_decimal(update.exit_price) if update.exit_price is not None else "-"
    body = substitute(
        texts.closed_position,
        ("%pd", update.direction),
        ("%ep", exit_price),
        ("%pnl", pnl_text),
    )
    return f"🔵 <b>#{market_tag(update.market)}</b> 🔵\n" + body


def notifications_for(event: Optional[StreamEvent], texts: LocaleTexts) -> List[str]:
    """All notifications an event produces, in dispatch order."""
    if isinstance(event, OrderFillBatch):
        return [format_fill(event.market, fill, texts) for fill in event.fills]
    if isinstance(event, PositionUpdate):
        text = format_closed_position(event, texts)
        return [text] if text else []
    return []
