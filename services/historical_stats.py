"""
Historical Stats Database

Read-only SQL access to the downloadable NBA historical stats snapshot (a
SQLite file). Query results are cached per instance in a QueryCache.
"""

from pathlib import Path
from typing import Any, Optional, Sequence

from peewee import SqliteDatabase

from core.cache import QueryCache
from core.logging import get_logger
from core.resilience import ResilientHTTPClient, snapshot_circuit
from core.settings import settings

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class SnapshotNotAvailableError(Exception):
    """The snapshot file has not been downloaded."""


class HistoricalStatsDatabase:
    """
    Cached, read-only queries over the historical stats snapshot.

    Example:
        stats_db = HistoricalStatsDatabase()
        rows = stats_db.execute_query(
            "SELECT * FROM player_seasons WHERE player_id = ?", [2544]
        )
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        cache: Optional[QueryCache] = None,
        http_client: Optional[ResilientHTTPClient] = None,
    ):
        self.path = Path(path or settings.historical_db_path)
        self.cache = cache or QueryCache(
            ttl_seconds=settings.query_cache_ttl_seconds,
            max_entries=settings.query_cache_max_entries,
        )
        self.http_client = http_client or ResilientHTTPClient(
            max_retries=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            timeout=settings.http_timeout,
            circuit_breaker=snapshot_circuit,
        )
        self._database: Optional[SqliteDatabase] = None
        self.log = get_logger("historical_stats")

    @property
    def is_loaded(self) -> bool:
        return self._database is not None

    def _get_database(self) -> SqliteDatabase:
        if self._database is None:
            if not self.path.exists():
                raise SnapshotNotAvailableError(f"Snapshot not found at {self.path}")
            # mode=ro refuses writes at the SQLite level
            self._database = SqliteDatabase(
                f"file:{self.path.resolve()}?mode=ro",
                uri=True,
                check_same_thread=False,
            )
            self.log.info("snapshot_opened", path=str(self.path))
        return self._database

    def execute_query(
        self,
        query: str,
        params: Sequence[Any] = (),
        use_cache: bool = True,
    ) -> list[dict]:
        """
        Run a read-only query and return rows as dicts.

        Args:
            query: SQL with ? placeholders
            params: Bound parameters
            use_cache: Read from and store into the query cache

        Raises:
            SnapshotNotAvailableError: If the snapshot has not been downloaded
            peewee.DatabaseError: If the query fails
        """
        params = list(params)
        if use_cache:
            cached = self.cache.get(query, params)
            if cached is not None:
                return cached

        database = self._get_database()
        try:
            cursor = database.execute_sql(query, params)
            columns = [col[0] for col in cursor.description or ()]
            rows = [dict(zip(columns, values)) for values in cursor.fetchall()]
        except Exception as e:
            self.log.error("query_failed", query=query, params=params, error=str(e))
            raise

        if use_cache:
            self.cache.set(query, params, rows)
        return rows

    def status(self) -> dict:
        return {
            "is_loaded": self.is_loaded,
            "snapshot_exists": self.path.exists(),
            "path": str(self.path),
            "cache_size": len(self.cache),
        }

    def clear_cache(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        if self._database is not None and not self._database.is_closed():
            self._database.close()
        self._database = None

    def download_snapshot(self, url: Optional[str] = None) -> Path:
        """
        Download the snapshot file, replacing any local copy.

        The file is written to a temporary sibling and renamed into place once
        complete, so a failed download leaves the previous snapshot intact.

        Raises:
            ValueError: If no URL is given or configured
            NetworkError, ServerError, ClientError: On download failure
        """
        url = url or settings.historical_db_url
        if not url:
            raise ValueError("No snapshot URL configured (HISTORICAL_DB_URL)")

        self.log.info("snapshot_download_started", url=url)
        response = self.http_client.get(url, stream=True)

        total = int(response.headers.get("content-length") or 0)
        loaded = 0
        tmp_path = self.path.with_suffix(self.path.suffix + ".part")
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(tmp_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                loaded += len(chunk)
                if total:
                    self.log.debug(
                        "snapshot_download_progress",
                        percent=round(loaded / total * 100, 1),
                    )

        self.close()
        tmp_path.replace(self.path)
        self.clear_cache()
        self.log.info("snapshot_download_completed", path=str(self.path), bytes=loaded)
        return self.path
