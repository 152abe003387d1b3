from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .categories import MARKET_CATEGORY_KEYWORDS, POSITION_CATEGORY_KEYWORDS
from .stats import compute_stats
from .types import Stats, TradeRecord, WalletData


class NoTradeHistoryError(ValueError):
    pass


@dataclass
class AppState:
    """Last analysis result, owned by whoever drives the analysis (the CLI)."""

    wallet: Optional[str] = None
    data: Optional[WalletData] = None
    stats: Optional[Stats] = None
    trade_offset: int = 0
    trades_per_page: int = 25


def analyze_wallet(state: AppState, data: WalletData, unify_keywords: bool = False) -> Stats:
    if not data.activity:
        raise NoTradeHistoryError(f"No trading history found for {data.wallet}")

    market_kw = POSITION_CATEGORY_KEYWORDS if unify_keywords else MARKET_CATEGORY_KEYWORDS
    stats = compute_stats(
        data.activity,
        data.positions,
        data.closed_positions,
        market_keywords=market_kw,
        position_keywords=POSITION_CATEGORY_KEYWORDS,
    )

    state.wallet = data.wallet
    state.data = data
    state.stats = stats
    state.trade_offset = 0
    return stats


def next_trades_page(state: AppState) -> List[TradeRecord]:
    """Next page of the analysed wallet's activity; empty when exhausted."""
    if state.data is None:
        return []
    start = state.trade_offset
    page = state.data.activity[start : start + state.trades_per_page]
    state.trade_offset = start + len(page)
    return page


def short_wallet(wallet: str) -> str:
    return f"{wallet[:6]}...{wallet[38:]}"
