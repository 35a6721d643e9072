"""
Base repository - shared connection handling for all repositories
"""

import threading
from typing import Any, Dict, List, Optional, Sequence

from .drivers import DatabaseDriver


class BaseRepository:
    """Runs queries on the shared connection through the selected driver

    Requests are served from a thread pool, so access to the connection is
    serialized with a lock owned by the DatabaseManager.
    """

    def __init__(self, conn: Any, driver: DatabaseDriver, lock: threading.RLock):
        self._conn = conn
        self._driver = driver
        self._lock = lock

    def _fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._driver.fetch_one(self._conn, query, params)

    def _fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self._lock:
            return self._driver.fetch_all(self._conn, query, params)
