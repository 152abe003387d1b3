from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

Side = Literal["BUY", "SELL"]
Sentiment = Literal["positive", "negative", "neutral"]
RatioKind = Literal["finite", "infinite", "undefined"]


def _num(x: Any) -> float:
    # Missing / null / junk numerics count as zero
    if x is None:
        return 0.0
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def _to_int_ts(ts: Any) -> int:
    # Data API timestamps are usually seconds; handle ms too
    if ts is None:
        return 0
    try:
        t = int(ts)
    except (TypeError, ValueError):
        return 0
    if t > 10_000_000_000:
        t //= 1000
    return t


@dataclass(frozen=True)
class TradeRecord:
    timestamp: int  # unix seconds
    side: Side
    price: float
    size: float
    usdc_size: float
    condition_id: str
    title: str = "Unknown"
    type: str = "TRADE"
    outcome: Optional[str] = None
    transaction_hash: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "TradeRecord":
        return cls(
            timestamp=_to_int_ts(d.get("timestamp")),
            side=d.get("side") or "",
            price=_num(d.get("price")),
            size=_num(d.get("size")),
            usdc_size=_num(d.get("usdcSize")),
            condition_id=d.get("conditionId") or "",
            title=d.get("title") or "Unknown",
            type=d.get("type") or "TRADE",
            outcome=d.get("outcome"),
            transaction_hash=d.get("transactionHash"),
        )


@dataclass(frozen=True)
class OpenPosition:
    current_value: float = 0.0
    initial_value: float = 0.0
    avg_price: float = 0.0
    size: float = 0.0
    cash_pnl: float = 0.0
    outcome: Optional[str] = None
    title: str = "Unknown"
    condition_id: str = ""
    percent_pnl: float = 0.0

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "OpenPosition":
        return cls(
            current_value=_num(d.get("currentValue")),
            initial_value=_num(d.get("initialValue")),
            avg_price=_num(d.get("avgPrice")),
            size=_num(d.get("size")),
            cash_pnl=_num(d.get("cashPnl")),
            outcome=d.get("outcome"),
            title=d.get("title") or "Unknown",
            condition_id=d.get("conditionId") or "",
            percent_pnl=_num(d.get("percentPnl")),
        )


@dataclass(frozen=True)
class ClosedPosition:
    realized_pnl: float = 0.0
    avg_price: float = 0.0
    title: str = "Unknown"
    condition_id: str = ""
    outcome: Optional[str] = None
    timestamp: int = 0

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "ClosedPosition":
        return cls(
            realized_pnl=_num(d.get("realizedPnl")),
            avg_price=_num(d.get("avgPrice")),
            title=d.get("title") or "Unknown",
            condition_id=d.get("conditionId") or "",
            outcome=d.get("outcome"),
            timestamp=_to_int_ts(d.get("timestamp")),
        )


@dataclass(frozen=True)
class Ratio:
    """
    Ratio that may have no finite value:
      - finite    -> value holds the number
      - infinite  -> numerator > 0 over a zero denominator
      - undefined -> 0 / 0
    """

    kind: RatioKind
    value: Optional[float] = None

    @classmethod
    def finite(cls, value: float) -> "Ratio":
        return cls("finite", float(value))

    @classmethod
    def infinite(cls) -> "Ratio":
        return cls("infinite")

    @classmethod
    def undefined(cls) -> "Ratio":
        return cls("undefined")

    @property
    def is_infinite(self) -> bool:
        return self.kind == "infinite"

    def as_float(self, cap: float = 999.0) -> float:
        if self.kind == "finite":
            return float(self.value)
        if self.kind == "infinite":
            return cap
        return 0.0

    def display(self, decimals: int = 2) -> str:
        if self.kind == "infinite":
            return "∞"
        if self.kind == "undefined":
            return "-"
        return f"{self.value:.{decimals}f}"


@dataclass
class Bucket:
    count: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0


@dataclass
class MonthVolume:
    volume: float = 0.0
    trades: int = 0
    buys: int = 0
    sells: int = 0


@dataclass(frozen=True)
class WinLossStats:
    total_resolved: int
    wins: int
    losses: int
    breakeven: int
    win_rate: float
    total_realized_pnl: float
    total_win_amount: float
    total_loss_amount: float
    avg_win_amount: float
    avg_loss_amount: float
    biggest_win: Optional[ClosedPosition]
    biggest_loss: Optional[ClosedPosition]
    profit_factor: Ratio
    expectancy: float
    win_loss_by_category: Dict[str, Bucket]
    win_loss_by_price_range: Dict[str, Bucket]
    closed_positions: Tuple[ClosedPosition, ...] = ()


@dataclass(frozen=True)
class Stats:
    total_trades: int
    total_volume: float
    unique_markets: int
    avg_trade_size: float
    buys: int
    sells: int
    buy_sell_ratio: Ratio
    trading_days: int
    first_trade: Optional[datetime]
    last_trade: Optional[datetime]
    trades_per_day: float
    buy_volume: float
    sell_volume: float
    avg_buy_price: float
    avg_sell_price: float
    market_categories: Dict[str, int]
    total_position_value: float
    total_unrealized_pnl: float
    hour_distribution: List[int]
    day_distribution: Dict[str, int]
    monthly_volume: Dict[str, MonthVolume]
    positions: int
    win_loss: WinLossStats


@dataclass(frozen=True)
class Observation:
    title: str
    detail: str
    sentiment: Sentiment = "neutral"


@dataclass(frozen=True)
class WalletData:
    wallet: str
    activity: List[TradeRecord] = field(default_factory=list)
    positions: List[OpenPosition] = field(default_factory=list)
    closed_positions: List[ClosedPosition] = field(default_factory=list)
    fetched_ts: int = 0
