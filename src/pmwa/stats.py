from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .categories import (
    CATEGORIES,
    MARKET_CATEGORY_KEYWORDS,
    POSITION_CATEGORY_KEYWORDS,
    classify_title,
)
from .types import (
    Bucket,
    ClosedPosition,
    MonthVolume,
    OpenPosition,
    Ratio,
    Stats,
    TradeRecord,
    WinLossStats,
)

Keywords = Mapping[str, Sequence[str]]

DAY_NAMES: List[str] = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

PRICE_RANGES: List[str] = ["0–20¢", "20–40¢", "40–60¢", "60–80¢", "80–100¢"]
PRICE_BAND_NAMES: Dict[str, str] = {
    "0–20¢": "Longshots",
    "20–40¢": "Underdogs",
    "40–60¢": "Toss-ups",
    "60–80¢": "Favorites",
    "80–100¢": "Heavy Favorites",
}


def _utc(ts: int) -> dt.datetime:
    return dt.datetime.fromtimestamp(ts, tz=dt.timezone.utc)


def round_half_up(x: float, places: int = 0) -> float:
    """Round exact ties away from zero on the stored binary value, as a fixed-decimal display does."""
    return float(Decimal(x).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def price_band(avg_price: float) -> str:
    """Upper bounds are inclusive: 0.20 is a longshot, not an underdog."""
    p = avg_price or 0.0
    if p <= 0.20:
        return PRICE_RANGES[0]
    if p <= 0.40:
        return PRICE_RANGES[1]
    if p <= 0.60:
        return PRICE_RANGES[2]
    if p <= 0.80:
        return PRICE_RANGES[3]
    return PRICE_RANGES[4]


def _add_outcome(bucket: Bucket, pnl: float) -> None:
    bucket.count += 1
    bucket.total_pnl += pnl
    if pnl > 0:
        bucket.wins += 1
    elif pnl < 0:
        bucket.losses += 1


def _fill_win_rates(buckets: Mapping[str, Bucket]) -> None:
    for b in buckets.values():
        b.win_rate = (b.wins / b.count) * 100 if b.count > 0 else 0.0


def categorize_markets(trades: Iterable[TradeRecord], keywords: Keywords = MARKET_CATEGORY_KEYWORDS) -> Dict[str, int]:
    """
    Count unique markets (by conditionId) per category.
    The first trade seen for a market decides its category.
    """
    counts = {c: 0 for c in CATEGORIES}
    seen = set()
    for t in trades:
        if t.condition_id in seen:
            continue
        seen.add(t.condition_id)
        counts[classify_title(t.title, keywords)] += 1
    return counts


def hour_distribution(trades: Iterable[TradeRecord]) -> List[int]:
    hours = [0] * 24
    for t in trades:
        hours[_utc(t.timestamp).hour] += 1
    return hours


def day_distribution(trades: Iterable[TradeRecord]) -> Dict[str, int]:
    days = {d: 0 for d in DAY_NAMES}
    for t in trades:
        # datetime.weekday() is Monday=0, names start at Sunday
        days[DAY_NAMES[(_utc(t.timestamp).weekday() + 1) % 7]] += 1
    return days


def monthly_volume(trades: Iterable[TradeRecord]) -> Dict[str, MonthVolume]:
    monthly: Dict[str, MonthVolume] = {}
    for t in trades:
        key = _utc(t.timestamp).strftime("%Y-%m")
        m = monthly.setdefault(key, MonthVolume())
        m.volume += t.usdc_size or 0.0
        m.trades += 1
        if t.side == "BUY":
            m.buys += 1
        elif t.side == "SELL":
            m.sells += 1
    return {k: monthly[k] for k in sorted(monthly)}


def calculate_win_loss_by_category(
    closed_positions: Iterable[ClosedPosition],
    keywords: Keywords = POSITION_CATEGORY_KEYWORDS,
) -> Dict[str, Bucket]:
    categories: Dict[str, Bucket] = {}
    for p in closed_positions:
        cat = classify_title(p.title, keywords)
        _add_outcome(categories.setdefault(cat, Bucket()), p.realized_pnl or 0.0)
    _fill_win_rates(categories)
    return categories


def calculate_win_loss_by_price_range(closed_positions: Iterable[ClosedPosition]) -> Dict[str, Bucket]:
    ranges = {label: Bucket() for label in PRICE_RANGES}
    for p in closed_positions:
        _add_outcome(ranges[price_band(p.avg_price)], p.realized_pnl or 0.0)
    _fill_win_rates(ranges)
    return ranges


def calculate_win_loss_stats(
    closed_positions: Optional[Sequence[ClosedPosition]],
    keywords: Keywords = POSITION_CATEGORY_KEYWORDS,
) -> WinLossStats:
    if not closed_positions:
        return WinLossStats(
            total_resolved=0,
            wins=0,
            losses=0,
            breakeven=0,
            win_rate=0.0,
            total_realized_pnl=0.0,
            total_win_amount=0.0,
            total_loss_amount=0.0,
            avg_win_amount=0.0,
            avg_loss_amount=0.0,
            biggest_win=None,
            biggest_loss=None,
            profit_factor=Ratio.finite(0.0),
            expectancy=0.0,
            win_loss_by_category={},
            win_loss_by_price_range=calculate_win_loss_by_price_range([]),
            closed_positions=(),
        )

    wins = [p for p in closed_positions if (p.realized_pnl or 0.0) > 0]
    losses = [p for p in closed_positions if (p.realized_pnl or 0.0) < 0]
    breakeven = len(closed_positions) - len(wins) - len(losses)

    total = len(closed_positions)
    total_pnl = sum(p.realized_pnl or 0.0 for p in closed_positions)
    win_amount = sum(p.realized_pnl for p in wins)
    loss_amount = abs(sum(p.realized_pnl for p in losses))

    if loss_amount > 0:
        profit_factor = Ratio.finite(win_amount / loss_amount)
    elif win_amount > 0:
        profit_factor = Ratio.infinite()
    else:
        profit_factor = Ratio.finite(0.0)

    # Strict comparisons keep the first record on ties
    biggest_win: Optional[ClosedPosition] = None
    for p in wins:
        if biggest_win is None or p.realized_pnl > biggest_win.realized_pnl:
            biggest_win = p
    biggest_loss: Optional[ClosedPosition] = None
    for p in losses:
        if biggest_loss is None or p.realized_pnl < biggest_loss.realized_pnl:
            biggest_loss = p

    return WinLossStats(
        total_resolved=total,
        wins=len(wins),
        losses=len(losses),
        breakeven=breakeven,
        win_rate=(len(wins) / total) * 100,
        total_realized_pnl=total_pnl,
        total_win_amount=win_amount,
        total_loss_amount=loss_amount,
        avg_win_amount=win_amount / len(wins) if wins else 0.0,
        avg_loss_amount=loss_amount / len(losses) if losses else 0.0,
        biggest_win=biggest_win,
        biggest_loss=biggest_loss,
        profit_factor=profit_factor,
        expectancy=total_pnl / total,
        win_loss_by_category=calculate_win_loss_by_category(closed_positions, keywords),
        win_loss_by_price_range=calculate_win_loss_by_price_range(closed_positions),
        closed_positions=tuple(closed_positions),
    )


def compute_stats(
    activity: Optional[Sequence[TradeRecord]],
    positions: Optional[Sequence[OpenPosition]],
    closed_positions: Optional[Sequence[ClosedPosition]],
    *,
    market_keywords: Keywords = MARKET_CATEGORY_KEYWORDS,
    position_keywords: Keywords = POSITION_CATEGORY_KEYWORDS,
) -> Stats:
    """
    Aggregate a wallet's trades, open positions and closed positions into Stats.
    Pure function; missing numbers count as 0 and empty inputs give zeroed stats.
    """
    trades = [t for t in (activity or []) if t.type == "TRADE"]
    positions = list(positions or [])

    total_trades = len(trades)
    total_volume = sum(t.usdc_size or 0.0 for t in trades)

    buy_trades = [t for t in trades if t.side == "BUY"]
    sell_trades = [t for t in trades if t.side == "SELL"]
    buys, sells = len(buy_trades), len(sell_trades)
    if sells > 0:
        buy_sell_ratio = Ratio.finite(round_half_up(buys / sells, 2))
    elif buys > 0:
        buy_sell_ratio = Ratio.infinite()
    else:
        buy_sell_ratio = Ratio.undefined()

    trading_days = len({_utc(t.timestamp).date() for t in trades})
    timestamps = [t.timestamp for t in trades]

    return Stats(
        total_trades=total_trades,
        total_volume=total_volume,
        unique_markets=len({t.condition_id for t in trades}),
        avg_trade_size=total_volume / total_trades if total_trades > 0 else 0.0,
        buys=buys,
        sells=sells,
        buy_sell_ratio=buy_sell_ratio,
        trading_days=trading_days,
        first_trade=_utc(min(timestamps)) if timestamps else None,
        last_trade=_utc(max(timestamps)) if timestamps else None,
        trades_per_day=round_half_up(total_trades / trading_days, 1) if trading_days > 0 else 0.0,
        buy_volume=sum(t.usdc_size or 0.0 for t in buy_trades),
        sell_volume=sum(t.usdc_size or 0.0 for t in sell_trades),
        avg_buy_price=_mean([t.price or 0.0 for t in buy_trades]),
        avg_sell_price=_mean([t.price or 0.0 for t in sell_trades]),
        market_categories=categorize_markets(trades, market_keywords),
        total_position_value=sum(p.current_value or 0.0 for p in positions),
        total_unrealized_pnl=sum(p.cash_pnl or 0.0 for p in positions),
        hour_distribution=hour_distribution(trades),
        day_distribution=day_distribution(trades),
        monthly_volume=monthly_volume(trades),
        positions=len(positions),
        win_loss=calculate_win_loss_stats(closed_positions, position_keywords),
    )
