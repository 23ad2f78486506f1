"""Storage for analysis results, keyed by file identifier.

Stored results expire after a time-to-live. Expiry is lazy on read and can
also be forced with ``purge_expired()``.
"""

import json
import time
from typing import Callable, Dict, Optional, Tuple
import logging

import pandas as pd
from sqlalchemy import create_engine, inspect, text

from sheetsane.config import RESULT_TTL_SECONDS
from sheetsane.core.models import AnalysisResult

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ResultStore:
    """Interface for analysis result storage."""

    def __init__(self, ttl_seconds: int = RESULT_TTL_SECONDS, clock: Clock = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def save(self, result: AnalysisResult) -> None:
        raise NotImplementedError

    def get(self, file_id: str) -> Optional[AnalysisResult]:
        raise NotImplementedError

    def delete(self, file_id: str) -> bool:
        raise NotImplementedError

    def purge_expired(self) -> int:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the store."""

    def _is_expired(self, stored_at: float) -> bool:
        return self.clock() - stored_at > self.ttl_seconds


class InMemoryResultStore(ResultStore):
    """In-memory implementation for testing and single-process use."""

    def __init__(self, ttl_seconds: int = RESULT_TTL_SECONDS, clock: Clock = time.time):
        super().__init__(ttl_seconds, clock)
        self._results: Dict[str, Tuple[AnalysisResult, float]] = {}

    def save(self, result: AnalysisResult) -> None:
        self._results[result.file_id] = (result, self.clock())
        logger.debug(f"Stored result for {result.file_id}")

    def get(self, file_id: str) -> Optional[AnalysisResult]:
        entry = self._results.get(file_id)
        if entry is None:
            return None
        result, stored_at = entry
        if self._is_expired(stored_at):
            del self._results[file_id]
            logger.debug(f"Result for {file_id} expired")
            return None
        return result

    def delete(self, file_id: str) -> bool:
        return self._results.pop(file_id, None) is not None

    def purge_expired(self) -> int:
        expired = [
            file_id
            for file_id, (_, stored_at) in self._results.items()
            if self._is_expired(stored_at)
        ]
        for file_id in expired:
            del self._results[file_id]
        if expired:
            logger.info(f"Purged {len(expired)} expired result(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._results)


class SQLResultStore(ResultStore):
    """SQLAlchemy-backed store.

    Each result is one row holding the score, counts and the full result as
    a JSON payload. Rows are written with pandas ``to_sql`` and read back
    with ``read_sql``.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///results.db``
        table_name: Table for storing results
        ttl_seconds: Time-to-live of stored results
        clock: Callable returning the current time in seconds
    """

    def __init__(
        self,
        database_url: str,
        table_name: str = "analysis_results",
        ttl_seconds: int = RESULT_TTL_SECONDS,
        clock: Clock = time.time,
    ):
        super().__init__(ttl_seconds, clock)
        self.table_name = table_name
        self.engine = create_engine(database_url)
        logger.info(f"Result store initialized for table {table_name}")

    def _table_exists(self) -> bool:
        return inspect(self.engine).has_table(self.table_name)

    def save(self, result: AnalysisResult) -> None:
        """Write a result, replacing any earlier row for the same file."""
        self.delete(result.file_id)

        df = pd.DataFrame([{
            "file_id": result.file_id,
            "file_name": result.file_name,
            "analyzed_at": result.analyzed_at,
            "score": result.score,
            "error_count": result.error_count,
            "warning_count": result.warning_count,
            "info_count": result.info_count,
            "payload": json.dumps(result.to_dict()),
            "stored_at": self.clock(),
        }])

        with self.engine.begin() as conn:
            df.to_sql(name=self.table_name, con=conn, if_exists="append", index=False)

        logger.info(f"Wrote result for {result.file_id} to {self.table_name}")

    def get(self, file_id: str) -> Optional[AnalysisResult]:
        if not self._table_exists():
            return None

        query = text(
            f"SELECT payload, stored_at FROM {self.table_name} "
            "WHERE file_id = :file_id ORDER BY stored_at DESC"
        )
        with self.engine.connect() as conn:
            df = pd.read_sql(query, con=conn, params={"file_id": file_id})

        if df.empty:
            return None

        row = df.iloc[0]
        if self._is_expired(float(row["stored_at"])):
            logger.debug(f"Result for {file_id} expired")
            self.delete(file_id)
            return None
        return AnalysisResult.from_dict(json.loads(row["payload"]))

    def delete(self, file_id: str) -> bool:
        if not self._table_exists():
            return False
        with self.engine.begin() as conn:
            deleted = conn.execute(
                text(f"DELETE FROM {self.table_name} WHERE file_id = :file_id"),
                {"file_id": file_id},
            )
        return deleted.rowcount > 0

    def purge_expired(self) -> int:
        if not self._table_exists():
            return 0
        cutoff = self.clock() - self.ttl_seconds
        with self.engine.begin() as conn:
            deleted = conn.execute(
                text(f"DELETE FROM {self.table_name} WHERE stored_at < :cutoff"),
                {"cutoff": cutoff},
            )
        if deleted.rowcount:
            logger.info(f"Purged {deleted.rowcount} expired result(s) from {self.table_name}")
        return deleted.rowcount

    def close(self) -> None:
        """Dispose the database engine."""
        if self.engine:
            self.engine.dispose()
