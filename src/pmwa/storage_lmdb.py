from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional, Tuple

import lmdb
import orjson


def _enc(obj: Any) -> bytes:
    return orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS)


def _dec(b: Optional[bytes]) -> Any:
    if b is None:
        return None
    return orjson.loads(b)


class LMDBStore:
    """
    Small LMDB wrapper for wallet snapshots and leaderboard entries:
      - put/get json
      - prefix scan iterator
    """

    def __init__(self, path: Path, map_size: int = 256 * 1024**2) -> None:
        self.env = lmdb.open(
            str(path),
            map_size=map_size,
            subdir=True,
            create=True,
            lock=True,
            max_dbs=1,
        )

    def close(self) -> None:
        self.env.close()

    def __enter__(self) -> "LMDBStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def put_json(self, key: str, obj: Any) -> None:
        with self.env.begin(write=True) as txn:
            txn.put(key.encode("utf-8"), _enc(obj))

    def get_json(self, key: str) -> Any:
        with self.env.begin(write=False) as txn:
            return _dec(txn.get(key.encode("utf-8")))

    def delete(self, key: str) -> None:
        with self.env.begin(write=True) as txn:
            txn.delete(key.encode("utf-8"))

    def scan_prefix(self, prefix: str) -> Iterator[Tuple[str, Any]]:
        pref = prefix.encode("utf-8")
        with self.env.begin(write=False) as txn:
            cur = txn.cursor()
            if not cur.set_range(pref):
                return
            for k, v in cur:
                if not k.startswith(pref):
                    break
                yield k.decode("utf-8"), _dec(v)

    # Helpers for common keys
    @staticmethod
    def k_snapshot(wallet: str) -> str:
        return f"wallet:{wallet.lower()}:snapshot"

    @staticmethod
    def k_anon_id(wallet: str) -> str:
        return f"idx:wallet:{wallet.lower()}:anon_id"

    @staticmethod
    def k_leaderboard(anon_id: str) -> str:
        return f"leaderboard:{anon_id}"
