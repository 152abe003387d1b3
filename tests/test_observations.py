"""Tests for rule-based observations."""
from pmwa.observations import (
    buy_sell_observation,
    category_edge_observation,
    frequency_observation,
    generate_observations,
    price_range_edge_observation,
    price_range_observation,
    timing_observation,
    volume_observation,
    win_loss_observation,
)
from pmwa.stats import compute_stats
from pmwa.types import WalletData

from conftest import DAY, JAN_1_2024


def _analyse(activity=(), positions=(), closed=()):
    data = WalletData(wallet="0x" + "1" * 40, activity=list(activity), positions=list(positions),
                      closed_positions=list(closed))
    return compute_stats(data.activity, data.positions, data.closed_positions), data


def test_empty_wallet_only_volume_and_timing():
    stats, data = _analyse()
    titles = [o.title for o in generate_observations(stats, data)]
    assert titles == ["Getting Started", "Trading Time Patterns"]


def test_volume_levels(make_trade):
    stats, _ = _analyse([make_trade(usdc=60_000), make_trade(usdc=50_000)])
    assert volume_observation(stats).title == "High-Volume Trader"
    stats, _ = _analyse([make_trade(usdc=2_000)])
    assert volume_observation(stats).title == "Growing Trader"


def test_buy_heavy_wallet_is_position_builder(make_trade):
    stats, _ = _analyse([make_trade(side="BUY")] * 8 + [make_trade(side="SELL")] * 2)
    obs = buy_sell_observation(stats)
    assert obs.title == "Position Builder"
    assert obs.detail.startswith("80%")


def test_sell_share_rounds_ties_up(make_trade):
    # 7 of 8 trades are sells: 87.5%
    stats, _ = _analyse([make_trade(side="BUY")] + [make_trade(side="SELL")] * 7)
    obs = buy_sell_observation(stats)
    assert obs.title == "Active Profit-Taker"
    assert obs.detail.startswith("88%")


def test_trading_rhythm_uses_rounded_pace(make_trade):
    per_day = [3, 2, 2, 2]
    trades = [make_trade(ts=JAN_1_2024 + d * DAY + h * 3600) for d, n in enumerate(per_day) for h in range(n)]
    stats, _ = _analyse(trades)
    obs = frequency_observation(stats)
    assert obs.title == "Regular Trader"
    assert "2.3 trades" in obs.detail


def test_longshot_hunter(make_trade):
    trades = [make_trade(price=0.1)] * 4 + [make_trade(price=0.9)]
    _, data = _analyse(trades)
    assert price_range_observation(data).title == "Longshot Hunter"


def test_price_range_needs_five_trades(make_trade):
    _, data = _analyse([make_trade(price=0.1)] * 4)
    assert price_range_observation(data) is None


def test_timing_flags_us_hours(make_trade):
    trades = [make_trade(ts=JAN_1_2024 + 15 * 3600)] * 3 + [make_trade(ts=JAN_1_2024 + 2 * 3600)]
    stats, _ = _analyse(trades)
    detail = timing_observation(stats).detail
    assert "3 PM UTC" in detail
    assert "Monday" in detail
    assert "75% of your trades occur during US market hours" in detail


def test_profitable_low_hit_rate_mentions_profit_factor(make_closed):
    stats, _ = _analyse(closed=[make_closed(50), make_closed(-20), make_closed(-5)])
    obs = win_loss_observation(stats)
    assert obs.sentiment == "positive"
    assert obs.title == "Profitable Track Record"
    assert "profit factor of 2.00" in obs.detail


def test_losing_wallet_is_negative(make_closed):
    stats, _ = _analyse(closed=[make_closed(-50), make_closed(10)])
    obs = win_loss_observation(stats)
    assert obs.sentiment == "negative"
    assert obs.title == "Room for Improvement"


def test_longshot_edge(make_closed):
    closed = [make_closed(10, avg_price=0.1)] * 3 + [make_closed(-5, avg_price=0.7)] * 3
    stats, _ = _analyse(closed=closed)
    obs = price_range_edge_observation(stats)
    assert obs.sentiment == "positive"
    assert "100% on longshots" in obs.detail


def test_category_edge_needs_gap(make_closed):
    closed = (
        [make_closed(10, title="Election night")] * 3
        + [make_closed(-10, title="Bitcoin price")] * 3
    )
    stats, _ = _analyse(closed=closed)
    obs = category_edge_observation(stats)
    assert obs is not None
    assert "You perform best in Politics" in obs.detail
    assert "Consider avoiding Crypto" in obs.detail

    even = [make_closed(10, title="Election night"), make_closed(-10, title="Election night")] * 2 + [
        make_closed(10, title="Bitcoin price"), make_closed(-10, title="Bitcoin price")
    ] * 2
    stats, _ = _analyse(closed=even)
    assert category_edge_observation(stats) is None


def test_full_wallet_includes_performance_observations(make_trade, make_closed, make_position):
    trades = [make_trade(ts=JAN_1_2024 + i * 86400, cid=f"m{i}", title="Election odds") for i in range(6)]
    closed = [make_closed(10, avg_price=0.1)] * 3 + [make_closed(-5, avg_price=0.7)] * 3
    stats, data = _analyse(trades, [make_position(20, pnl=5)], closed)
    titles = [o.title for o in generate_observations(stats, data)]
    assert "Politics Focus" in titles
    assert "Current Portfolio" in titles
    assert "Profitable Track Record" in titles
    assert "Probability Sweet Spot" in titles
