import logging
from typing import Any, Callable, Optional

from cloud_highway.common.constants import LATENCY_TABLE, MAX_DST_REGION_CANDIDATES
from cloud_highway.common.exceptions import InvalidArgumentError, RemoteClientError, StoreUnavailableError
from cloud_highway.common.models.latency_record import LatencyRecord
from cloud_highway.common.models.remote_client.remote_client import RemoteClient

logger = logging.getLogger(__name__)

PageFetcher = Callable[[Optional[dict[str, Any]]], tuple[list[dict[str, Any]], Optional[dict[str, Any]]]]


class LatencyStore:
    """
    Access to the latency table, the data of record.

    Multi page reads are drained completely before returning, no partial
    result is ever handed to the caller. Every backend failure surfaces as a
    ``StoreUnavailableError``.
    """

    def __init__(
        self,
        client: RemoteClient,
        table_name: str = LATENCY_TABLE,
        max_batch_size: int = MAX_DST_REGION_CANDIDATES,
    ) -> None:
        self._client = client
        self._table_name = table_name
        self._max_batch_size = max_batch_size

    def get_one(self, src_region: str, dst_region: str) -> Optional[LatencyRecord]:
        try:
            item = self._client.get_latency(self._table_name, src_region, dst_region)
        except RemoteClientError as e:
            logger.error("Could not get latency %s -> %s: %s", src_region, dst_region, e)
            raise StoreUnavailableError(f"Could not get latency {src_region} -> {dst_region}") from e

        if item is None:
            return None
        return LatencyRecord.from_item(item, source_region=src_region)

    def query_by_source(self, src_region: str) -> list[LatencyRecord]:
        items = self._drain(
            lambda start_key: self._client.query_latencies(self._table_name, src_region, start_key),
            f"query latencies from {src_region}",
        )
        return [LatencyRecord.from_item(item, source_region=src_region) for item in items]

    def batch_get(self, src_region: str, dst_regions: list[str]) -> list[LatencyRecord]:
        if len(dst_regions) > self._max_batch_size:
            raise InvalidArgumentError(
                f"Batch get is limited to {self._max_batch_size} destinations, got {len(dst_regions)}"
            )

        try:
            items = self._client.batch_get_latencies(self._table_name, src_region, dst_regions)
        except RemoteClientError as e:
            logger.error("Could not batch get latencies from %s: %s", src_region, e)
            raise StoreUnavailableError(f"Could not batch get latencies from {src_region}") from e

        return [LatencyRecord.from_item(item, source_region=src_region) for item in items]

    def scan_all(self) -> list[LatencyRecord]:
        items = self._drain(
            lambda start_key: self._client.scan_latencies(self._table_name, start_key),
            "scan all latencies",
        )
        return [LatencyRecord.from_item(item) for item in items]

    def put(self, src_region: str, dst_region: str, ping: Optional[float]) -> None:
        try:
            self._client.set_latency(self._table_name, src_region, dst_region, ping)
        except RemoteClientError as e:
            raise StoreUnavailableError(f"Could not write latency {src_region} -> {dst_region}") from e

    def _drain(self, fetch_page: PageFetcher, description: str) -> list[dict[str, Any]]:
        # Each page needs the continuation key of the previous one, pages are fetched one by one
        items: list[dict[str, Any]] = []
        last_evaluated_key: Optional[dict[str, Any]] = None
        page_count = 0
        while True:
            try:
                page, last_evaluated_key = fetch_page(last_evaluated_key)
            except RemoteClientError as e:
                logger.error("Could not %s (after %s pages): %s", description, page_count, e)
                raise StoreUnavailableError(f"Could not {description}") from e

            items.extend(page)
            page_count += 1
            if not last_evaluated_key:
                break

        logger.debug("Drained %s items in %s pages to %s", len(items), page_count, description)
        return items
