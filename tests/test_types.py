"""Tests for record parsing and the Ratio result type."""
from pmwa.types import ClosedPosition, OpenPosition, Ratio, TradeRecord


def test_trade_from_api_maps_camel_case():
    t = TradeRecord.from_api(
        {
            "type": "TRADE",
            "timestamp": 1704067200,
            "side": "SELL",
            "price": "0.42",
            "size": 10,
            "usdcSize": 4.2,
            "conditionId": "0xabc",
            "title": "Fed cuts rates?",
            "outcome": "Yes",
            "transactionHash": "0xdead",
        }
    )
    assert t.side == "SELL"
    assert t.price == 0.42
    assert t.usdc_size == 4.2
    assert t.condition_id == "0xabc"
    assert t.outcome == "Yes"
    assert t.transaction_hash == "0xdead"


def test_trade_from_api_defaults_missing_fields():
    t = TradeRecord.from_api({"timestamp": 1704067200000, "side": "BUY", "usdcSize": None})
    assert t.timestamp == 1704067200  # ms normalised to seconds
    assert t.usdc_size == 0.0
    assert t.price == 0.0
    assert t.title == "Unknown"
    assert t.type == "TRADE"


def test_positions_from_api_default_to_zero():
    p = OpenPosition.from_api({"currentValue": 12.5, "cashPnl": None, "title": None})
    assert p.current_value == 12.5
    assert p.cash_pnl == 0.0
    assert p.title == "Unknown"

    c = ClosedPosition.from_api({"realizedPnl": "-3.5", "avgPrice": 0.3})
    assert c.realized_pnl == -3.5
    assert c.avg_price == 0.3


def test_ratio_variants():
    assert Ratio.finite(2.5).display() == "2.50"
    assert Ratio.finite(2.5).as_float() == 2.5
    assert Ratio.infinite().display() == "∞"
    assert Ratio.infinite().as_float(cap=999) == 999
    assert Ratio.undefined().display() == "-"
    assert Ratio.undefined().as_float() == 0.0
    assert not Ratio.undefined().is_infinite
