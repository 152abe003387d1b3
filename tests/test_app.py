"""Tests for the analyze-wallet action and its state."""
import pytest

from pmwa.app import AppState, NoTradeHistoryError, analyze_wallet, next_trades_page, short_wallet
from pmwa.types import WalletData

WALLET = "0x" + "ab" * 20


def test_no_activity_raises(make_closed):
    state = AppState()
    with pytest.raises(NoTradeHistoryError):
        analyze_wallet(state, WalletData(wallet=WALLET, closed_positions=[make_closed(5)]))
    assert state.stats is None


def test_analyze_stores_results(make_trade):
    state = AppState(trade_offset=7)
    data = WalletData(wallet=WALLET, activity=[make_trade(), make_trade(side="SELL")])
    stats = analyze_wallet(state, data)
    assert state.stats is stats
    assert state.data is data
    assert state.wallet == WALLET
    assert state.trade_offset == 0
    assert stats.total_trades == 2


def test_unified_keywords_change_market_categories(make_trade):
    data = WalletData(wallet=WALLET, activity=[make_trade(title="Will Lakers win tonight")])
    assert analyze_wallet(AppState(), data).market_categories["Sports"] == 1
    assert analyze_wallet(AppState(), data, unify_keywords=True).market_categories["Other"] == 1


def test_trade_pages(make_trade):
    state = AppState(trades_per_page=2)
    analyze_wallet(state, WalletData(wallet=WALLET, activity=[make_trade(ts=i) for i in range(1, 6)]))
    assert [t.timestamp for t in next_trades_page(state)] == [1, 2]
    assert [t.timestamp for t in next_trades_page(state)] == [3, 4]
    assert [t.timestamp for t in next_trades_page(state)] == [5]
    assert next_trades_page(state) == []


def test_next_page_without_analysis():
    assert next_trades_page(AppState()) == []


def test_short_wallet():
    assert short_wallet(WALLET) == "0xabab...abab"
