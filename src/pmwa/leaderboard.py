from __future__ import annotations

import secrets
import string
from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .storage_lmdb import LMDBStore
from .types import Stats

# Ranking value used for an infinite profit factor
INFINITE_PF = 999.0

_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    win_rate: float
    volume: float
    profit_factor: float
    markets: int
    is_user: bool = False


def entry_from_stats(entry_id: str, stats: Stats, is_user: bool = False) -> LeaderboardEntry:
    wl = stats.win_loss
    return LeaderboardEntry(
        id=entry_id,
        win_rate=wl.win_rate,
        volume=stats.total_volume,
        profit_factor=wl.profit_factor.as_float(cap=INFINITE_PF),
        markets=wl.total_resolved,
        is_user=is_user,
    )


def calculate_rank(value: float, all_values: Sequence[float]) -> int:
    """
    Percentile of value among all_values (100 = best).
    Values below every other entry land at 5.
    """
    ordered = sorted(all_values, reverse=True)
    rank = 0.0
    for i, v in enumerate(ordered):
        if value >= v:
            rank = ((len(ordered) - i) / len(ordered)) * 100
            break
    if rank == 0:
        rank = 5
    return int(rank + 0.5)


def rank_text(percentile: int) -> str:
    if percentile >= 90:
        return "Top 10%"
    if percentile >= 75:
        return "Top 25%"
    if percentile >= 50:
        return "Top 50%"
    if percentile >= 25:
        return "Top 75%"
    return "Bottom 25%"


def anon_id_for(store: LMDBStore, wallet: str) -> str:
    anon = stored_anon_id(store, wallet)
    if anon is not None:
        return anon
    anon = "anon_" + "".join(secrets.choice(_ALPHABET) for _ in range(9))
    store.put_json(LMDBStore.k_anon_id(wallet), anon)
    return anon


def submit_entry(store: LMDBStore, wallet: str, stats: Stats) -> LeaderboardEntry:
    """Opt-in: store the wallet's stats under an anonymous id."""
    entry = entry_from_stats(anon_id_for(store, wallet), stats)
    store.put_json(LMDBStore.k_leaderboard(entry.id), asdict(entry))
    return entry


def withdraw_entry(store: LMDBStore, wallet: str) -> None:
    anon = stored_anon_id(store, wallet)
    if anon is not None:
        store.delete(LMDBStore.k_leaderboard(anon))


def load_entries(store: LMDBStore) -> List[LeaderboardEntry]:
    return [LeaderboardEntry(**v) for _, v in store.scan_prefix("leaderboard:") if isinstance(v, dict)]


def standings(
    entries: Sequence[LeaderboardEntry],
    user: LeaderboardEntry,
    top: int = 10,
) -> Tuple[List[LeaderboardEntry], int]:
    """
    Merge the user into the board (replacing their own stored entry), sort by win rate.
    Returns (top rows, user's 1-based position).
    """
    user = replace(user, is_user=True)
    combined = [e for e in entries if e.id != user.id] + [user]
    combined.sort(key=lambda e: e.win_rate, reverse=True)
    position = next(i for i, e in enumerate(combined) if e.is_user) + 1
    return combined[:top], position


def user_ranks(entries: Sequence[LeaderboardEntry], user: LeaderboardEntry) -> Dict[str, int]:
    others = [e for e in entries if e.id != user.id]
    return {
        "win_rate": calculate_rank(user.win_rate, [e.win_rate for e in others]),
        "volume": calculate_rank(user.volume, [e.volume for e in others]),
        "profit_factor": calculate_rank(user.profit_factor, [e.profit_factor for e in others]),
    }


def stored_anon_id(store: LMDBStore, wallet: str) -> Optional[str]:
    anon = store.get_json(LMDBStore.k_anon_id(wallet))
    return anon if isinstance(anon, str) else None
