"""
Secondary cache of expensive multi-row reads, stored in a key-value table.

This is not an API response cache. Several APIs make the same data request
but post-process it differently, e.g. "best region from a source" and "list
all latencies from a source" both read every latency of that source. So the
cache holds the raw "data request -> data response" pairs, keyed by a
canonical signature of the data request, and never a derived answer.

Since the latency data is only refreshed every probe cycle, serving slightly
stale rows within the TTL is acceptable. Because a cache write costs a
write operation of its own, small requests are not cached at all.
"""

import enum
import json
import logging
import math
import time
from typing import Any, Optional

from cloud_highway.common.constants import (
    ALL_DATA_CACHE_KEY,
    CACHE_KEY_DESTINATION_SEPARATOR,
    CACHE_KEY_SOURCE_SEPARATOR,
    CACHE_ROW_THRESHOLD,
    CACHE_TABLE,
    CACHE_TTL_IN_MINUTES,
    CACHE_VALUE_SEPARATOR,
)
from cloud_highway.common.exceptions import RemoteClientError
from cloud_highway.common.models.latency_record import LatencyRecord
from cloud_highway.common.models.region import Region
from cloud_highway.common.models.remote_client.remote_client import RemoteClient

logger = logging.getLogger(__name__)


class RequestType(enum.Enum):
    LATENCIES_FROM_ONE_REGION_TO_MULTI_REGION_CANDIDATES = "latencies_from_one_region_to_multi_region_candidates"
    ALL_DATA = "all_data"


def serialize_latency_records(records: list[LatencyRecord]) -> str:
    # '{"dstRegion": "aws@us-west-1", "ping": 45}|{"dstRegion": "aws@ap-east-1", "ping": 125}'
    return CACHE_VALUE_SEPARATOR.join(
        json.dumps({"dstRegion": record.destination_region, "ping": record.ping}) for record in records
    )


def deserialize_latency_records(value: str, source_region: str) -> list[LatencyRecord]:
    if not value:
        raise ValueError("Empty cache value")

    records = []
    for fragment in value.split(CACHE_VALUE_SEPARATOR):
        item = json.loads(fragment)
        if not isinstance(item, dict) or not isinstance(item.get("dstRegion"), str):
            raise ValueError(f"Malformed cache fragment {fragment!r}")
        Region.from_identifier(item["dstRegion"])
        ping = item.get("ping")
        if ping is not None and (
            isinstance(ping, bool) or not isinstance(ping, (int, float)) or not math.isfinite(ping)
        ):
            raise ValueError(f"Malformed ping in cache fragment {fragment!r}")
        records.append(LatencyRecord.from_item(item, source_region=source_region))
    return records


class ResultCache:
    def __init__(
        self,
        client: RemoteClient,
        table_name: str = CACHE_TABLE,
        ttl_in_minutes: int = CACHE_TTL_IN_MINUTES,
        row_threshold: int = CACHE_ROW_THRESHOLD,
    ) -> None:
        self._client = client
        self._table_name = table_name
        self._ttl_in_minutes = ttl_in_minutes
        self._row_threshold = row_threshold

    @staticmethod
    def derive_key(request_type: RequestType, payload: Optional[dict[str, Any]] = None) -> Optional[str]:
        if request_type == RequestType.LATENCIES_FROM_ONE_REGION_TO_MULTI_REGION_CANDIDATES:
            # Expect payload {"src": "aws@us-west-2", "dst": ["aws@us-west-1", "aws@ap-east-1"]}
            # with validated regions. Sorting makes the key independent of the candidate order.
            if payload is None:
                return None
            destinations = sorted(destination.lower() for destination in payload["dst"])
            return (
                f"{payload['src'].lower()}{CACHE_KEY_SOURCE_SEPARATOR}"
                f"{CACHE_KEY_DESTINATION_SEPARATOR.join(destinations)}"
            )
        if request_type == RequestType.ALL_DATA:
            return ALL_DATA_CACHE_KEY
        return None

    def should_cache(self, row_count: int) -> bool:
        return row_count > self._row_threshold

    def get(self, key: str) -> Optional[str]:
        try:
            value, ttl = self._client.get_value_from_table(self._table_name, key)
        except RemoteClientError as e:
            # The cache is only an accelerator, fall back to the latency store
            logger.warning("Reading cache key %s failed, treating as miss: %s", key, e)
            return None

        if not value or ttl is None or ttl <= int(time.time()):
            return None
        return value

    def put(self, key: str, value: str, compress: bool = False) -> None:
        ttl = int(time.time()) + self._ttl_in_minutes * 60
        try:
            self._client.set_value_in_table(self._table_name, key, value, ttl=ttl, convert_to_bytes=compress)
        except RemoteClientError as e:
            logger.error("Writing to cache failed for key %s: %s", key, e)
