"""
Render cache for block output.
"""
import sqlite3
import time
import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# max-age value for entries that never expire
PERMANENT = -1

class RenderCache:
    """
    Caches rendered block output for the max-age each entry was stored with.
    """
    def __init__(self, db_path: str = "render_cache.db", clock: Callable[[], float] = time.time):
        """
        Initialize the RenderCache.

        Args:
            db_path: Path to the SQLite database file
            clock: Callable returning the current time in seconds
        """
        self.db_path = Path(db_path)
        self.clock = clock
        self._init_db()

    def _init_db(self):
        """Initialize the SQLite database for caching."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS render_cache (
                    cid TEXT PRIMARY KEY,
                    data TEXT,
                    expires REAL
                )
            """)

    def get(self, cid: str) -> Optional[str]:
        """
        Get cached output if it exists and is fresh.

        Args:
            cid: The cache id

        Returns:
            The cached data if found and fresh, None otherwise
        """
        with sqlite3.connect(self.db_path) as conn:
            result = conn.execute(
                "SELECT data, expires FROM render_cache WHERE cid = ?",
                (cid,)
            ).fetchone()

            if result:
                data, expires = result
                if expires is None or self.clock() < expires:
                    logger.debug(f"Render cache hit: {cid}")
                    return data
                # Clean up expired cache entry
                conn.execute("DELETE FROM render_cache WHERE cid = ?", (cid,))
                logger.debug(f"Render cache entry expired: {cid}")
            return None

    def set(self, cid: str, data: str, max_age: int):
        """
        Cache output for max_age seconds.

        Args:
            cid: The cache id
            data: The output to cache
            max_age: Seconds the entry stays fresh; 0 disables caching and
                PERMANENT never expires
        """
        if max_age == 0:
            return
        if max_age < PERMANENT:
            raise ValueError(f"Invalid cache max-age: {max_age}")
        expires = None if max_age == PERMANENT else self.clock() + max_age
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO render_cache (cid, data, expires)
                VALUES (?, ?, ?)
                """,
                (cid, data, expires)
            )

    def delete(self, cid: str):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM render_cache WHERE cid = ?", (cid,))

    def clear(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM render_cache")
