import os
import sqlite3
from typing import Any, Optional

import zstandard as zstd

from cloud_highway.common import constants
from cloud_highway.common.exceptions import RemoteClientError
from cloud_highway.common.models.remote_client.remote_client import RemoteClient
from cloud_highway.common.utils import compress_json_str, decompress_json_str


class IntegrationTestRemoteClient(RemoteClient):
    """
    Local sqlite backed stand-in for DynamoDB.

    Query and scan return pages of ``page_size`` items and a
    ``LastEvaluatedKey`` style continuation key, like DynamoDB does.
    """

    def __init__(self, page_size: int = constants.INTEGRATION_TEST_PAGE_SIZE) -> None:
        self._db_path = os.environ.get(
            "CLOUD_HIGHWAY_INTEGRATION_TEST_DB_PATH", os.path.join(os.getcwd(), "db.sqlite")
        )
        self._page_size = page_size
        self._initialize_db()

    def _db_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _initialize_db(self) -> None:
        self._execute(
            f"""
                CREATE TABLE IF NOT EXISTS {constants.LATENCY_TABLE} (
                    srcRegion TEXT,
                    dstRegion TEXT,
                    ping REAL,
                    PRIMARY KEY (srcRegion, dstRegion)
                )
            """
        )
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {constants.CACHE_TABLE} (key TEXT PRIMARY KEY, value BLOB, ttl INTEGER)"
        )

    def _execute(self, statement: str, parameters: tuple[Any, ...] = ()) -> list[tuple[Any, ...]]:
        try:
            conn = self._db_connection()
            try:
                cursor = conn.cursor()
                cursor.execute(statement, parameters)
                result = cursor.fetchall()
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise RemoteClientError(f"Integration test database operation failed: {str(e)}") from e
        return result

    def _page(
        self, rows: list[tuple[Any, ...]]
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        items = [{"srcRegion": row[0], "dstRegion": row[1], "ping": row[2]} for row in rows]
        last_evaluated_key = None
        if len(items) == self._page_size:
            # Like DynamoDB, a full page may be followed by an empty one
            last_evaluated_key = {"srcRegion": items[-1]["srcRegion"], "dstRegion": items[-1]["dstRegion"]}
        return items, last_evaluated_key

    def get_latency(self, table_name: str, src_region: str, dst_region: str) -> Optional[dict[str, Any]]:
        rows = self._execute(
            f"SELECT srcRegion, dstRegion, ping FROM {table_name} WHERE srcRegion=? AND dstRegion=?",
            (src_region, dst_region),
        )
        if not rows:
            return None
        return {"srcRegion": rows[0][0], "dstRegion": rows[0][1], "ping": rows[0][2]}

    def query_latencies(
        self, table_name: str, src_region: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        start_after = exclusive_start_key["dstRegion"] if exclusive_start_key else ""
        rows = self._execute(
            f"""
                SELECT srcRegion, dstRegion, ping FROM {table_name}
                WHERE srcRegion=? AND dstRegion>?
                ORDER BY dstRegion
                LIMIT ?
            """,
            (src_region, start_after, self._page_size),
        )
        return self._page(rows)

    def batch_get_latencies(self, table_name: str, src_region: str, dst_regions: list[str]) -> list[dict[str, Any]]:
        if not dst_regions:
            return []
        placeholders = ", ".join("?" for _ in dst_regions)
        rows = self._execute(
            f"""
                SELECT srcRegion, dstRegion, ping FROM {table_name}
                WHERE srcRegion=? AND dstRegion IN ({placeholders})
            """,
            (src_region, *dst_regions),
        )
        return [{"srcRegion": row[0], "dstRegion": row[1], "ping": row[2]} for row in rows]

    def scan_latencies(
        self, table_name: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        start_src = exclusive_start_key["srcRegion"] if exclusive_start_key else ""
        start_dst = exclusive_start_key["dstRegion"] if exclusive_start_key else ""
        rows = self._execute(
            f"""
                SELECT srcRegion, dstRegion, ping FROM {table_name}
                WHERE srcRegion>? OR (srcRegion=? AND dstRegion>?)
                ORDER BY srcRegion, dstRegion
                LIMIT ?
            """,
            (start_src, start_src, start_dst, self._page_size),
        )
        return self._page(rows)

    def set_latency(self, table_name: str, src_region: str, dst_region: str, ping: Optional[float]) -> None:
        self._execute(
            f"INSERT OR REPLACE INTO {table_name} (srcRegion, dstRegion, ping) VALUES (?, ?, ?)",
            (src_region, dst_region, ping),
        )

    def get_value_from_table(self, table_name: str, key: str) -> tuple[str, Optional[int]]:
        rows = self._execute(f"SELECT value, ttl FROM {table_name} WHERE key=?", (key,))
        if not rows or rows[0][0] is None:
            return "", None

        value, ttl = rows[0]
        if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int)):
            raise RemoteClientError(f"Malformed ttl of {key} in {table_name}: {ttl!r}")
        if isinstance(value, bytes):
            try:
                value = decompress_json_str(value)
            except (zstd.ZstdError, UnicodeDecodeError) as e:
                raise RemoteClientError(f"Could not decompress value of {key} in {table_name}: {str(e)}") from e
        elif not isinstance(value, str):
            raise RemoteClientError(f"Value of {key} in {table_name} is neither a string nor binary")
        return value, ttl

    def set_value_in_table(
        self, table_name: str, key: str, value: str, ttl: Optional[int] = None, convert_to_bytes: bool = False
    ) -> None:
        stored_value: Any = compress_json_str(value) if convert_to_bytes else value
        self._execute(
            f"INSERT OR REPLACE INTO {table_name} (key, value, ttl) VALUES (?, ?, ?)", (key, stored_value, ttl)
        )

    def remove_tables(self) -> None:
        for table_name in (constants.LATENCY_TABLE, constants.CACHE_TABLE):
            self._execute(f"DROP TABLE IF EXISTS {table_name}")
