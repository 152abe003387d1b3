from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Tuple

from .formatting import format_currency, format_hour
from .stats import PRICE_BAND_NAMES, PRICE_RANGES, round_half_up
from .types import Bucket, Observation, Stats, WalletData

MIN_RESOLVED_FOR_EDGE = 5
MIN_BUCKET_COUNT = 3
US_HOURS_UTC = range(14, 21)


def _pct(part: float, whole: float) -> int:
    # Rounded to whole percent before any threshold comparison
    return int(round_half_up(part / whole * 100)) if whole else 0


def _pick(items: List[Tuple[str, Bucket]], better: Callable[[Bucket, Bucket], bool]) -> Tuple[str, Bucket]:
    # Later items win ties
    best = items[0]
    for item in items[1:]:
        if not better(best[1], item[1]):
            best = item
    return best


def _band_label(label: str) -> str:
    return f"{PRICE_BAND_NAMES.get(label, label)} ({label})"


def volume_observation(stats: Stats) -> Observation:
    vol, n, avg = stats.total_volume, stats.total_trades, stats.avg_trade_size
    if vol >= 100_000:
        return Observation(
            "High-Volume Trader",
            f"You've traded {format_currency(vol)} across {n} trades. Your average trade size of "
            f"{format_currency(avg)} suggests you're comfortable with significant positions.",
        )
    if vol >= 10_000:
        return Observation(
            "Active Trader",
            f"With {format_currency(vol)} in total volume and {n} trades, "
            "you're an active participant in prediction markets.",
        )
    if vol >= 1_000:
        return Observation(
            "Growing Trader",
            f"You've traded {format_currency(vol)} so far. "
            "As you gain experience, your trading patterns will become clearer.",
        )
    return Observation(
        "Getting Started",
        f"You're just getting started with {format_currency(vol)} in total volume. "
        "More data will help identify your trading patterns.",
    )


def category_observation(stats: Stats) -> Optional[Observation]:
    ranked = sorted(
        ((c, n) for c, n in stats.market_categories.items() if n > 0),
        key=lambda x: x[1],
        reverse=True,
    )
    if not ranked:
        return None

    top, top_count = ranked[0]
    total_markets = sum(stats.market_categories.values())
    pct = _pct(top_count, total_markets)

    if pct >= 60:
        detail = (
            f"{pct}% of your markets are in {top}. You have a strong preference for this category. "
            "Consider whether this concentration aligns with your actual knowledge advantage."
        )
    elif pct >= 40:
        detail = (
            f"{top} makes up {pct}% of your trading activity. You have a notable focus here, "
            "though you're also exploring other categories."
        )
    else:
        detail = (
            f"Your trading is distributed across categories, with {top} being slightly more common ({pct}%). "
            "This diversification may reflect broad interests or systematic exploration."
        )

    if len(ranked) >= 2:
        second, second_count = ranked[1]
        detail += f" {second} is your second most active category at {_pct(second_count, total_markets)}%."

    return Observation(f"{top} Focus", detail)


def buy_sell_observation(stats: Stats) -> Optional[Observation]:
    total = stats.buys + stats.sells
    if total == 0:
        return None
    buy_pct = _pct(stats.buys, total)
    sell_pct = _pct(stats.sells, total)

    if buy_pct >= 70:
        return Observation(
            "Position Builder",
            f"{buy_pct}% of your trades are buys. You tend to accumulate positions rather than actively trade "
            "in and out. This could indicate conviction in your picks, or it could mean you're not taking "
            "profits when available.",
        )
    if sell_pct >= 70:
        return Observation(
            "Active Profit-Taker",
            f"{sell_pct}% of your trades are sells. You actively manage and exit positions. "
            "This could indicate disciplined profit-taking or quick loss-cutting.",
        )
    return Observation(
        "Trading Direction",
        f"Your trades are balanced: {buy_pct}% buys and {sell_pct}% sells. "
        "This suggests active position management with both entries and exits.",
    )


def frequency_observation(stats: Stats) -> Optional[Observation]:
    if stats.first_trade is None or stats.last_trade is None:
        return None

    span_days = (stats.last_trade - stats.first_trade).total_seconds() / 86400
    day_range = math.ceil(span_days) + 1
    active = _pct(stats.trading_days, day_range)
    tpd = stats.trades_per_day
    days = f"{stats.trading_days} out of {day_range} days ({active}%)"

    if tpd >= 5:
        return Observation(
            "High-Frequency Trader",
            f"When you trade, you average {tpd:.1f} trades per day. You were active on {days}. "
            "This high activity level requires significant attention and may increase transaction costs.",
        )
    if tpd >= 2:
        return Observation(
            "Regular Trader",
            f"You average {tpd:.1f} trades on active days, trading on {days}. "
            "This moderate pace allows for thoughtful decision-making.",
        )
    return Observation(
        "Selective Trader",
        f"You trade selectively, averaging {tpd:.1f} trades on active days. You were active on {days}. "
        "This patience could indicate careful market selection.",
    )


def price_range_observation(data: WalletData) -> Optional[Observation]:
    trades = [t for t in data.activity if t.type == "TRADE"]
    if len(trades) < 5:
        return None

    ranges: Dict[str, int] = {"low": 0, "mid": 0, "high": 0, "extreme": 0}
    for t in trades:
        if t.price <= 0.20:
            ranges["low"] += 1
        elif t.price <= 0.50:
            ranges["mid"] += 1
        elif t.price <= 0.80:
            ranges["high"] += 1
        else:
            ranges["extreme"] += 1

    name, count = max(ranges.items(), key=lambda x: x[1])
    pct = _pct(count, len(trades))

    if name == "low" and pct >= 40:
        return Observation(
            "Longshot Hunter",
            f"{pct}% of your trades are at odds below 20¢. You're drawn to low-probability, high-payoff "
            "opportunities. These can be profitable if you have genuine insight, but be aware of the "
            "inherent difficulty in predicting rare events.",
        )
    if name == "extreme" and pct >= 40:
        return Observation(
            "Conservative Player",
            f"{pct}% of your trades are at odds above 80¢. You prefer high-probability outcomes with smaller "
            "potential returns. This conservative approach limits downside but caps upside.",
        )
    if name == "mid":
        return Observation(
            "Balanced Odds Seeker",
            f"{pct}% of your trades are in the 20-50¢ range. You gravitate toward more uncertain outcomes "
            "where the market is genuinely split. This can be where the most alpha exists, but also where "
            "overconfidence is most dangerous.",
        )
    return Observation(
        "Risk Preference",
        f"Your trades span various probability ranges, with {pct}% in the {name} odds category. "
        "This diversification across risk levels may indicate opportunistic trading based on perceived value.",
    )


def timing_observation(stats: Stats) -> Observation:
    hours = stats.hour_distribution
    peak_hour = hours.index(max(hours))
    peak_day = max(stats.day_distribution.items(), key=lambda x: x[1])[0]

    detail = f"Your most active trading hour is {format_hour(peak_hour)} UTC, and {peak_day} is your busiest day. "
    us_pct = _pct(sum(hours[h] for h in US_HOURS_UTC), sum(hours))
    if us_pct >= 50:
        detail += f"{us_pct}% of your trades occur during US market hours, suggesting you may be influenced by US news cycles."

    return Observation("Trading Time Patterns", detail)


def position_size_observation(stats: Stats) -> Optional[Observation]:
    if stats.total_trades < 5:
        return None
    avg = format_currency(stats.avg_trade_size)
    if stats.avg_trade_size >= 500:
        return Observation(
            "Large Position Trader",
            f"Your average trade is {avg}. Large positions can amplify both gains and losses. "
            "Consider whether your conviction truly justifies this sizing.",
        )
    if stats.avg_trade_size >= 100:
        return Observation(
            "Moderate Position Trader",
            f"Your average trade size is {avg}. This moderate sizing allows for meaningful returns while managing risk.",
        )
    return Observation(
        "Small Position Trader",
        f"Your average trade is {avg}. Small positions limit risk but also cap potential profits. "
        "As you develop conviction, you might consider scaling up selectively.",
    )


def current_positions_observation(stats: Stats, data: WalletData) -> Observation:
    n = len(data.positions)
    up = sum(1 for p in data.positions if p.cash_pnl > 0)
    down = sum(1 for p in data.positions if p.cash_pnl < 0)
    worth = format_currency(stats.total_position_value)
    pnl = stats.total_unrealized_pnl

    if pnl > 0:
        return Observation(
            "Current Portfolio",
            f"You have {n} open positions worth {worth} with {format_currency(pnl)} in unrealized gains. "
            f"{up} positions are profitable, {down} are underwater.",
            "positive",
        )
    if pnl < 0:
        return Observation(
            "Current Portfolio",
            f"You have {n} open positions worth {worth} with {format_currency(abs(pnl))} in unrealized losses. "
            f"{up} positions are profitable, {down} are underwater.",
            "negative",
        )
    return Observation(
        "Current Portfolio",
        f"You have {n} open positions worth {worth}. Your portfolio is currently at breakeven.",
    )


def win_loss_observation(stats: Stats) -> Observation:
    wl = stats.win_loss
    rate = f"{wl.win_rate:.1f}%"
    pnl = wl.total_realized_pnl

    if pnl > 0:
        if wl.win_rate >= 55:
            detail = (
                f"You've made {format_currency(pnl)} across {wl.total_resolved} resolved markets with a {rate} "
                "win rate. Your above-average hit rate suggests good prediction calibration."
            )
        else:
            detail = (
                f"You've made {format_currency(pnl)} across {wl.total_resolved} resolved markets despite a {rate} "
                f"win rate. Your profit factor of {wl.profit_factor.display()} shows you're making more on wins "
                "than you lose on losses."
            )
        return Observation("Profitable Track Record", detail, "positive")

    if pnl < 0:
        if wl.win_rate < 45:
            detail = (
                f"You've lost {format_currency(abs(pnl))} across {wl.total_resolved} resolved markets with a {rate} "
                "win rate. Consider whether you're overconfident in low-probability positions."
            )
        else:
            detail = (
                f"Despite a {rate} win rate, you've lost {format_currency(abs(pnl))}. Your average loss "
                f"({format_currency(wl.avg_loss_amount)}) exceeds your average win ({format_currency(wl.avg_win_amount)}). "
                "Consider tighter position sizing on uncertain bets."
            )
        return Observation("Room for Improvement", detail, "negative")

    return Observation(
        "Overall Performance",
        f"You're at breakeven across {wl.total_resolved} resolved markets with a {rate} win rate.",
    )


def category_edge_observation(stats: Stats) -> Optional[Observation]:
    cats = [(n, b) for n, b in stats.win_loss.win_loss_by_category.items() if b.count >= MIN_BUCKET_COUNT]
    if len(cats) < 2:
        return None

    best_name, best = _pick(cats, lambda a, b: a.win_rate > b.win_rate)
    worst_name, worst = _pick(cats, lambda a, b: a.win_rate < b.win_rate)
    if best.win_rate - worst.win_rate < 15:
        return None

    sentiment = "neutral"
    if best.win_rate >= 60 and best.total_pnl > 0:
        sentiment = "positive"
        detail = (
            f"You perform best in {best_name} ({best.win_rate:.0f}% win rate, "
            f"{format_currency(best.total_pnl)} profit). "
        )
    else:
        detail = f"Your strongest category is {best_name} at {best.win_rate:.0f}% win rate. "

    if worst.win_rate < 40 and worst.total_pnl < 0:
        detail += (
            f"Consider avoiding {worst_name} where you're at {worst.win_rate:.0f}% win rate with "
            f"{format_currency(worst.total_pnl)} in losses."
        )
        if sentiment != "positive":
            sentiment = "negative"
    else:
        detail += f"{worst_name} is your weakest at {worst.win_rate:.0f}%."

    return Observation("Category Edge", detail, sentiment)


def price_range_edge_observation(stats: Stats) -> Optional[Observation]:
    ranges = [(n, b) for n, b in stats.win_loss.win_loss_by_price_range.items() if b.count >= MIN_BUCKET_COUNT]
    if len(ranges) < 2:
        return None

    best_name, best = _pick(ranges, lambda a, b: a.win_rate > b.win_rate)
    worst_name, worst = _pick(ranges, lambda a, b: a.win_rate < b.win_rate)
    top_name, top = _pick(ranges, lambda a, b: a.total_pnl > b.total_pnl)

    title = "Probability Sweet Spot"
    if best_name == PRICE_RANGES[0] and best.win_rate > 30:
        return Observation(
            title,
            f"Impressive: you're hitting {best.win_rate:.0f}% on longshots (0-20¢). Either you have genuine edge "
            "in spotting undervalued outcomes, or this is a small sample size.",
            "positive",
        )
    if best_name == PRICE_RANGES[-1] and best.win_rate < 85:
        return Observation(
            title,
            f"Your heavy favorite picks (80-100¢) are winning at {best.win_rate:.0f}%, which is below what those "
            'prices imply. You may be overpaying for "safe" bets.',
            "negative",
        )
    if top.total_pnl > 0:
        return Observation(
            title,
            f"Your most profitable range is {_band_label(top_name)} with {format_currency(top.total_pnl)} in gains. "
            f"Your worst is {_band_label(worst_name)} at {worst.win_rate:.0f}% win rate.",
            "positive",
        )
    return Observation(
        title,
        f"You perform best at {_band_label(best_name)} ({best.win_rate:.0f}% win rate) and struggle with "
        f"{_band_label(worst_name)} ({worst.win_rate:.0f}%).",
    )


def generate_observations(stats: Stats, data: WalletData) -> List[Observation]:
    """
    Rule-based observations over computed stats. Rules that lack enough data
    return None and are dropped.
    """
    obs: List[Optional[Observation]] = [
        volume_observation(stats),
        category_observation(stats),
        buy_sell_observation(stats),
        frequency_observation(stats),
        price_range_observation(data),
        timing_observation(stats),
        position_size_observation(stats),
    ]
    if stats.positions > 0:
        obs.append(current_positions_observation(stats, data))
    if stats.win_loss.total_resolved > 0:
        obs.append(win_loss_observation(stats))
    if stats.win_loss.total_resolved >= MIN_RESOLVED_FOR_EDGE:
        obs.append(category_edge_observation(stats))
        obs.append(price_range_edge_observation(stats))
    return [o for o in obs if o is not None]
