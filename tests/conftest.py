"""Shared test fixtures: record factories, temp LMDB."""
from __future__ import annotations

import pytest

from pmwa.storage_lmdb import LMDBStore
from pmwa.types import ClosedPosition, OpenPosition, TradeRecord

# 2024-01-01 00:00:00 UTC, a Monday
JAN_1_2024 = 1704067200
DAY = 86400


@pytest.fixture
def make_trade():
    def _make(
        ts: int = JAN_1_2024,
        side: str = "BUY",
        price: float = 0.5,
        usdc: float = 10.0,
        cid: str = "0xaaa",
        title: str = "Some market",
        type: str = "TRADE",
    ) -> TradeRecord:
        return TradeRecord(
            timestamp=ts,
            side=side,
            price=price,
            size=usdc / price if price else 0.0,
            usdc_size=usdc,
            condition_id=cid,
            title=title,
            type=type,
        )

    return _make


@pytest.fixture
def make_closed():
    def _make(pnl: float, avg_price: float = 0.5, title: str = "Some market") -> ClosedPosition:
        return ClosedPosition(realized_pnl=pnl, avg_price=avg_price, title=title)

    return _make


@pytest.fixture
def make_position():
    def _make(value: float, pnl: float = 0.0, title: str = "Some market") -> OpenPosition:
        return OpenPosition(current_value=value, initial_value=value - pnl, cash_pnl=pnl, title=title)

    return _make


@pytest.fixture
def store(tmp_path):
    s = LMDBStore(tmp_path / "test.lmdb")
    yield s
    s.close()
