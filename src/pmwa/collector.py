from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from .polymarket_client import PolymarketClient, is_wallet_address
from .storage_lmdb import LMDBStore
from .types import ClosedPosition, OpenPosition, TradeRecord, WalletData

log = logging.getLogger(__name__)


def fetch_raw(
    client: PolymarketClient,
    wallet: str,
    activity_page: int = 500,
    closed_page: int = 50,
    max_records: int = 10000,
    dust_usd: float = 1.0,
) -> Dict[str, Any]:
    """
    Pull activity, open positions and closed positions for a wallet.
    Returns the raw API payloads plus fetch time, ready for caching.
    """
    wallet = (wallet or "").strip()
    if not is_wallet_address(wallet):
        raise ValueError("Invalid wallet address format. Must be 0x followed by 40 hex characters.")

    activity = client.fetch_all_activity(wallet, page_size=activity_page, max_records=max_records)
    positions = client.fetch_positions(wallet, min_value=dust_usd)
    closed = client.fetch_closed_positions(wallet, page_size=closed_page, max_records=max_records)
    log.info(
        "fetched %s: %d activity, %d open positions, %d closed positions",
        wallet, len(activity), len(positions), len(closed),
    )
    return {
        "wallet": wallet,
        "fetched_ts": int(time.time()),
        "activity": activity,
        "positions": positions,
        "closedPositions": closed,
    }


def parse_wallet_data(raw: Dict[str, Any]) -> WalletData:
    return WalletData(
        wallet=raw["wallet"],
        activity=[TradeRecord.from_api(a) for a in raw.get("activity") or []],
        positions=[OpenPosition.from_api(p) for p in raw.get("positions") or []],
        closed_positions=[ClosedPosition.from_api(c) for c in raw.get("closedPositions") or []],
        fetched_ts=int(raw.get("fetched_ts") or 0),
    )


def save_snapshot(store: LMDBStore, raw: Dict[str, Any]) -> None:
    store.put_json(LMDBStore.k_snapshot(raw["wallet"]), raw)


def load_snapshot(store: LMDBStore, wallet: str, max_age_sec: int, now: Optional[int] = None) -> Optional[Dict[str, Any]]:
    raw = store.get_json(LMDBStore.k_snapshot(wallet))
    if not isinstance(raw, dict):
        return None
    now = int(time.time()) if now is None else now
    if now - int(raw.get("fetched_ts") or 0) > max_age_sec:
        return None
    return raw


def fetch_wallet_data(
    client: PolymarketClient,
    wallet: str,
    store: Optional[LMDBStore] = None,
    max_age_sec: int = 0,
    **fetch_kwargs: Any,
) -> WalletData:
    """Serve from the snapshot cache when fresh enough, else fetch and cache."""
    wallet = (wallet or "").strip()
    if store is not None and max_age_sec > 0:
        cached = load_snapshot(store, wallet, max_age_sec)
        if cached is not None:
            log.info("using cached snapshot for %s", wallet)
            return parse_wallet_data(cached)

    raw = fetch_raw(client, wallet, **fetch_kwargs)
    if store is not None:
        save_snapshot(store, raw)
    return parse_wallet_data(raw)
