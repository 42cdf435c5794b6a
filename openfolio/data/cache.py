"""SQLite-backed cache for downloaded daily price histories.

Frames are stored as parquet blobs keyed by ticker with TTL-based
invalidation, so repeated sessions do not hit the remote source for every
lookup.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional
import sqlite3

import pandas as pd

from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass
class CacheConfig:
    """Configuration for cache behavior."""
    sqlite_path: str = "data_cache/prices.db"
    ttl: int = 86400  # 1 day in seconds


class PriceCache:
    """Ticker -> price history cache persisted in SQLite."""

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()
        self._conn: Optional[sqlite3.Connection] = None
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "errors": 0}
        self._init_db()

    def _init_db(self):
        """Initialize SQLite database."""
        db_path = Path(self.config.sqlite_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(db_path))
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS prices (
                ticker TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                expires_at REAL NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        self._conn.commit()
        LOGGER.info(f"Price cache initialized: {db_path}")

        self._cleanup_expired()

    def _cleanup_expired(self):
        """Remove expired entries."""
        now = datetime.now(timezone.utc).timestamp()
        cursor = self._conn.execute("DELETE FROM prices WHERE expires_at < ?", (now,))
        self._conn.commit()
        if cursor.rowcount > 0:
            LOGGER.debug(f"Cleaned {cursor.rowcount} expired price entries")

    @staticmethod
    def _serialize(df: pd.DataFrame) -> bytes:
        out = df.copy()
        out.index = pd.to_datetime(out.index)
        return out.to_parquet()

    @staticmethod
    def _deserialize(data: bytes) -> pd.DataFrame:
        df = pd.read_parquet(BytesIO(data))
        df.index = pd.Index([ts.date() for ts in pd.to_datetime(df.index)], name="Date")
        return df

    def get(self, ticker: str) -> Optional[pd.DataFrame]:
        """Cached history for ``ticker`` or None when absent or expired."""
        now = datetime.now(timezone.utc).timestamp()
        row = self._conn.execute(
            "SELECT value FROM prices WHERE ticker = ? AND expires_at > ?",
            (ticker, now),
        ).fetchone()
        if row is None:
            self._stats["misses"] += 1
            return None
        try:
            df = self._deserialize(row[0])
        except Exception as e:
            LOGGER.warning(f"Failed to deserialize cached prices for {ticker}: {e}")
            self._stats["errors"] += 1
            return None
        self._stats["hits"] += 1
        return df

    def set(self, ticker: str, df: pd.DataFrame) -> bool:
        """Store ``df`` for ``ticker``; returns False if the write failed."""
        now = datetime.now(timezone.utc).timestamp()
        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO prices (ticker, value, expires_at, created_at) VALUES (?, ?, ?, ?)",
                (ticker, self._serialize(df), now + self.config.ttl, now),
            )
            self._conn.commit()
        except (sqlite3.Error, ValueError, ImportError) as e:
            LOGGER.warning(f"Price cache write failed for {ticker}: {e}")
            self._stats["errors"] += 1
            return False
        self._stats["sets"] += 1
        return True

    def delete(self, ticker: str) -> bool:
        cursor = self._conn.execute("DELETE FROM prices WHERE ticker = ?", (ticker,))
        self._conn.commit()
        return cursor.rowcount > 0

    def clear(self) -> int:
        cursor = self._conn.execute("DELETE FROM prices")
        self._conn.commit()
        return cursor.rowcount

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self._conn.execute("SELECT COUNT(*) FROM prices").fetchone()[0]
        lookups = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / lookups if lookups > 0 else 0
        return {
            "total_keys": total,
            **self._stats,
            "hit_rate": f"{hit_rate:.2%}",
        }

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
