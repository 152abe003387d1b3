from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

DATA_API = "https://data-api.polymarket.com"

log = logging.getLogger(__name__)


def is_wallet_address(s: str) -> bool:
    s = (s or "").strip()
    if not (s.startswith("0x") and len(s) == 42):
        return False
    hexpart = s[2:]
    return all(c in "0123456789abcdefABCDEF" for c in hexpart)


class PolymarketClient:
    """Read-only Data API client. No auth needed."""

    def __init__(
        self,
        base_url: str = DATA_API,
        timeout_sec: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            headers={"User-Agent": "pmwa/0.1"},
            timeout=timeout_sec,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "PolymarketClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _get_list(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        r = self.client.get(f"{self.base_url}{path}", params=params)
        r.raise_for_status()
        data = r.json()
        if not isinstance(data, list):
            raise ValueError(f"Unexpected {path} response type: {type(data)}")
        return data

    # -------- activity --------
    def fetch_activity(self, wallet: str, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        params = {"user": wallet, "limit": limit, "offset": offset, "type": "TRADE"}
        return self._get_list("/activity", params)

    def fetch_all_activity(self, wallet: str, page_size: int = 500, max_records: int = 10000) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        offset = 0
        while True:
            batch = self.fetch_activity(wallet, limit=page_size, offset=offset)
            if not batch:
                break
            out.extend(batch)
            offset += len(batch)
            if offset >= max_records:
                log.warning("activity for %s reached %d record cap", wallet, max_records)
                break
            if len(batch) < page_size:
                break
        return out

    # -------- positions --------
    def fetch_positions(self, wallet: str, min_value: float = 1.0) -> List[Dict[str, Any]]:
        """Open positions, dust (currentValue < min_value) dropped."""
        params = {"user": wallet, "sizeThreshold": 0, "limit": 500}
        data = self._get_list("/positions", params)
        return [p for p in data if float(p.get("currentValue") or 0) >= min_value]

    def fetch_closed_positions(self, wallet: str, page_size: int = 50, max_records: int = 10000) -> List[Dict[str, Any]]:
        """
        Paginate /closed-positions. A 404 means the wallet has none (or no more);
        other failures are logged and whatever was collected so far is returned.
        """
        out: List[Dict[str, Any]] = []
        offset = 0
        try:
            while True:
                params = {"user": wallet, "limit": page_size, "offset": offset}
                r = self.client.get(f"{self.base_url}/closed-positions", params=params)
                if r.status_code == 404:
                    return out
                r.raise_for_status()
                data = r.json()
                if not isinstance(data, list):
                    raise ValueError(f"Unexpected /closed-positions response type: {type(data)}")
                if not data:
                    break
                out.extend(data)
                offset += len(data)
                if offset >= max_records or len(data) < page_size:
                    break
        except (httpx.HTTPError, ValueError) as e:
            log.error("closed positions fetch failed for %s after %d records: %s", wallet, len(out), e)
        return out
