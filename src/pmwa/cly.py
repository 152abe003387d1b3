from __future__ import annotations

import argparse
import datetime as dt
import logging
from typing import Callable, List

import httpx
import orjson
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .app import AppState, analyze_wallet, next_trades_page, short_wallet
from .collector import fetch_wallet_data
from .config import Settings, load_settings
from .formatting import (
    format_compact_volume,
    format_currency,
    format_signed_currency,
)
from .leaderboard import (
    INFINITE_PF,
    entry_from_stats,
    load_entries,
    rank_text,
    standings,
    stored_anon_id,
    submit_entry,
    user_ranks,
    withdraw_entry,
)
from .log import setup_logging
from .observations import generate_observations
from .polymarket_client import PolymarketClient
from .stats import PRICE_BAND_NAMES
from .storage_lmdb import LMDBStore
from .types import Stats, TradeRecord

console = Console()
log = logging.getLogger(__name__)

_SENTIMENT_STYLE = {"positive": "green", "negative": "red", "neutral": "cyan"}


def _run_analysis(s: Settings, store: LMDBStore, wallet: str, refresh: bool) -> AppState:
    state = AppState(trades_per_page=s.trades_per_page)
    with PolymarketClient(base_url=s.data_api, timeout_sec=s.http_timeout_sec) as client:
        data = fetch_wallet_data(
            client,
            wallet,
            store=store,
            max_age_sec=0 if refresh else s.snapshot_max_age_sec,
            activity_page=s.activity_page,
            closed_page=s.closed_page,
            max_records=s.max_records,
            dust_usd=s.dust_usd,
        )
    analyze_wallet(state, data, unify_keywords=s.unify_keywords)
    return state


def _guarded(fn: Callable[[argparse.Namespace], int]) -> Callable[[argparse.Namespace], int]:
    def run(args: argparse.Namespace) -> int:
        try:
            return fn(args)
        except (ValueError, httpx.HTTPError) as e:
            log.debug("command failed", exc_info=True)
            console.print(f"[bold red]error[/bold red] {e}")
            return 1

    return run


def _pnl_style(v: float) -> str:
    return "green" if v >= 0 else "red"


def render_summary(stats: Stats) -> None:
    wl = stats.win_loss
    t = Table(title="Summary", show_header=False)
    t.add_column("metric", style="dim")
    t.add_column("value", justify="right")
    t.add_row("Win rate", f"{wl.win_rate:.1f}%")
    t.add_row("Trades", str(stats.total_trades))
    t.add_row("Volume", format_currency(stats.total_volume))
    t.add_row("Avg trade", format_currency(stats.avg_trade_size))
    t.add_row("W/L", f"{wl.wins}/{wl.losses}")
    pnl = wl.total_realized_pnl
    t.add_row("Realized P&L", f"[{_pnl_style(pnl)}]{format_signed_currency(pnl)}[/]")
    t.add_row("Avg win / loss", f"${wl.avg_win_amount:.0f}/${wl.avg_loss_amount:.0f}")
    t.add_row("Profit factor", wl.profit_factor.display())
    t.add_row("Expectancy", format_signed_currency(wl.expectancy))
    t.add_row("Buys / sells", f"{stats.buys}/{stats.sells} (ratio {stats.buy_sell_ratio.display()})")
    t.add_row("Markets", str(stats.unique_markets))
    t.add_row("Active days", f"{stats.trading_days} ({stats.trades_per_day:.1f} trades/day)")
    if stats.first_trade and stats.last_trade:
        t.add_row("Range", f"{stats.first_trade:%Y-%m-%d} → {stats.last_trade:%Y-%m-%d}")
    t.add_row("Open positions", f"{stats.positions} worth {format_currency(stats.total_position_value)}")
    upnl = stats.total_unrealized_pnl
    t.add_row("Unrealized P&L", f"[{_pnl_style(upnl)}]{format_signed_currency(upnl)}[/]")
    console.print(t)


def render_breakdowns(stats: Stats) -> None:
    wl = stats.win_loss

    pr = Table(title="Win/loss by entry price")
    for col in ("range", "n", "W", "L", "win %", "P&L"):
        pr.add_column(col, justify="left" if col == "range" else "right")
    for label, b in wl.win_loss_by_price_range.items():
        pr.add_row(
            f"{PRICE_BAND_NAMES[label]} ({label})",
            str(b.count), str(b.wins), str(b.losses), f"{b.win_rate:.0f}%", format_currency(b.total_pnl),
        )
    console.print(pr)

    if wl.win_loss_by_category:
        ct = Table(title="Win/loss by category")
        for col in ("category", "n", "W", "L", "win %", "P&L"):
            ct.add_column(col, justify="left" if col == "category" else "right")
        for cat, b in sorted(wl.win_loss_by_category.items(), key=lambda x: x[1].count, reverse=True):
            ct.add_row(cat, str(b.count), str(b.wins), str(b.losses), f"{b.win_rate:.0f}%", format_currency(b.total_pnl))
        console.print(ct)

    mt = Table(title="Monthly volume")
    for col in ("month", "volume", "trades", "buys", "sells"):
        mt.add_column(col, justify="left" if col == "month" else "right")
    for month, m in stats.monthly_volume.items():
        mt.add_row(month, format_currency(m.volume), str(m.trades), str(m.buys), str(m.sells))
    console.print(mt)

    if wl.biggest_win is not None:
        console.print(f"[green]Biggest win[/green] {format_currency(wl.biggest_win.realized_pnl)} {escape(wl.biggest_win.title)}")
    if wl.biggest_loss is not None:
        console.print(f"[red]Biggest loss[/red] {format_currency(wl.biggest_loss.realized_pnl)} {escape(wl.biggest_loss.title)}")


def cmd_analyze(args: argparse.Namespace) -> int:
    s = load_settings()
    setup_logging(s.log_dir, s.log_level)
    with LMDBStore(s.lmdb_path) as store:
        state = _run_analysis(s, store, args.wallet, args.refresh)

    if args.json:
        console.print_json(orjson.dumps(state.stats, option=orjson.OPT_NON_STR_KEYS).decode("utf-8"))
        return 0

    console.print(f"[bold]wallet[/bold] {short_wallet(state.wallet)}")
    render_summary(state.stats)
    render_breakdowns(state.stats)
    for o in generate_observations(state.stats, state.data):
        style = _SENTIMENT_STYLE[o.sentiment]
        console.print(f"[bold {style}]{o.title}[/bold {style}]\n  {o.detail}")
    return 0


def cmd_trades(args: argparse.Namespace) -> int:
    s = load_settings()
    setup_logging(s.log_dir, s.log_level)
    with LMDBStore(s.lmdb_path) as store:
        state = _run_analysis(s, store, args.wallet, refresh=False)

    state.trades_per_page = int(args.limit or s.trades_per_page)
    state.trade_offset = int(args.offset or 0)
    start = state.trade_offset
    page = next_trades_page(state)
    render_trades(page, start, len(state.data.activity))
    return 0


def render_trades(page: List[TradeRecord], start: int, total: int) -> None:
    if not page:
        console.print(f"[dim]no more trades[/dim] offset={start} total={total}")
        return

    t = Table(title=f"Trades {start + 1}-{start + len(page)} of {total}")
    for col in ("time (UTC)", "side", "outcome", "price", "usdc", "market"):
        t.add_column(col)
    for tr in page:
        t.add_row(
            dt.datetime.fromtimestamp(tr.timestamp, tz=dt.timezone.utc).strftime("%Y-%m-%d %H:%M"),
            tr.side,
            tr.outcome or "",
            f"{tr.price:.3f}",
            format_currency(tr.usdc_size),
            escape(tr.title),
        )
    console.print(t)


def _pf_text(pf: float) -> str:
    return "∞" if pf >= INFINITE_PF else f"{pf:.2f}"


def cmd_leaderboard(args: argparse.Namespace) -> int:
    s = load_settings()
    setup_logging(s.log_dir, s.log_level)
    with LMDBStore(s.lmdb_path) as store:
        state = _run_analysis(s, store, args.wallet, refresh=False)

        if args.submit:
            entry = submit_entry(store, args.wallet, state.stats)
            console.print(f"[green]submitted[/green] as {entry.id}")
        elif args.withdraw:
            withdraw_entry(store, args.wallet)
            console.print("[dim]withdrawn; your stats are private[/dim]")

        entries = load_entries(store)
        anon = stored_anon_id(store, args.wallet)

    user = entry_from_stats(anon or "you", state.stats)
    ranks = user_ranks(entries, user)
    console.print(
        f"win rate {user.win_rate:.1f}% [{rank_text(ranks['win_rate'])}]  "
        f"volume {format_currency(user.volume)} [{rank_text(ranks['volume'])}]  "
        f"profit factor {_pf_text(user.profit_factor)} [{rank_text(ranks['profit_factor'])}]",
        markup=False,
    )

    rows, position = standings(entries, user, top=int(args.top))
    t = Table(title="Leaderboard")
    for col in ("#", "win %", "volume", "PF", "markets"):
        t.add_column(col, justify="right")
    for i, e in enumerate(rows, start=1):
        t.add_row(str(i), f"{e.win_rate:.1f}%", format_compact_volume(e.volume), _pf_text(e.profit_factor),
                  str(e.markets), style="bold yellow" if e.is_user else None)
    if position > len(rows):
        t.add_row("...", "", "", "", "")
        t.add_row(f"#{position}", f"{user.win_rate:.1f}%", format_compact_volume(user.volume),
                  _pf_text(user.profit_factor), str(user.markets), style="bold yellow")
    console.print(t)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pmwa", description="Polymarket wallet analytics")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_a = sub.add_parser("analyze", help="Fetch a wallet's history and print stats + observations")
    p_a.add_argument("--wallet", type=str, required=True)
    p_a.add_argument("--json", action="store_true", help="print Stats as JSON")
    p_a.add_argument("--refresh", action="store_true", help="ignore the cached snapshot")
    p_a.set_defaults(fn=_guarded(cmd_analyze))

    p_t = sub.add_parser("trades", help="List a page of the wallet's trades")
    p_t.add_argument("--wallet", type=str, required=True)
    p_t.add_argument("--limit", type=int, default=None)
    p_t.add_argument("--offset", type=int, default=0)
    p_t.set_defaults(fn=_guarded(cmd_trades))

    p_l = sub.add_parser("leaderboard", help="Compare the wallet with opted-in wallets")
    p_l.add_argument("--wallet", type=str, required=True)
    g = p_l.add_mutually_exclusive_group()
    g.add_argument("--submit", action="store_true", help="opt in: store stats under an anonymous id")
    g.add_argument("--withdraw", action="store_true", help="opt out: remove stored stats")
    p_l.add_argument("--top", type=int, default=10)
    p_l.set_defaults(fn=_guarded(cmd_leaderboard))

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    rc = args.fn(args)
    raise SystemExit(rc)
