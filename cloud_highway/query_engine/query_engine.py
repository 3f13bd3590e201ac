import json
import logging
from typing import Any, Optional

from cloud_highway.common.config.config import Config
from cloud_highway.common.constants import ALL_DATA_ACKNOWLEDGEMENT, MAX_DST_REGION_CANDIDATES
from cloud_highway.common.exceptions import InvalidArgumentError, LatencyNotFoundError, NoResultError
from cloud_highway.common.models.endpoints import Endpoints
from cloud_highway.common.models.latency_record import LatencyRecord
from cloud_highway.common.models.region import Region
from cloud_highway.common.models.region_catalog import RegionCatalog
from cloud_highway.query_engine.components.latency_store import LatencyStore
from cloud_highway.query_engine.components.result_cache import (
    RequestType,
    ResultCache,
    deserialize_latency_records,
    serialize_latency_records,
)

logger = logging.getLogger(__name__)


def select_minimum(records: list[LatencyRecord]) -> Optional[LatencyRecord]:
    # Self pairs and unreachable destinations never qualify, ties keep the first seen record
    best: Optional[LatencyRecord] = None
    for record in records:
        if record.is_self_pair or not record.is_reachable:
            continue
        if best is None or record.ping < best.ping:  # type: ignore
            best = record
    return best


def _reject_non_finite(constant: str) -> Any:
    raise ValueError(f"Non-finite number {constant} in cached full dump")


class QueryEngine:
    """
    Serves the read operations of the latency data.

    Every operation validates its input against the region catalog before
    any I/O, reads the result cache where it is worth it, and falls back to
    the latency store on a miss or on an unusable cache entry.
    """

    def __init__(
        self,
        region_catalog: RegionCatalog,
        latency_store: LatencyStore,
        result_cache: ResultCache,
        max_dst_region_candidates: int = MAX_DST_REGION_CANDIDATES,
    ) -> None:
        self._region_catalog = region_catalog
        self._latency_store = latency_store
        self._result_cache = result_cache
        self._max_dst_region_candidates = max_dst_region_candidates

    @classmethod
    def from_config(cls, config: Config) -> "QueryEngine":
        endpoints = Endpoints(config)
        return cls(
            region_catalog=config.region_catalog(),
            latency_store=LatencyStore(
                endpoints.get_datastore_client(), config.latency_table, config.max_dst_region_candidates
            ),
            result_cache=ResultCache(
                endpoints.get_cache_client(),
                config.cache_table,
                config.cache_ttl_in_minutes,
                config.cache_row_threshold,
            ),
            max_dst_region_candidates=config.max_dst_region_candidates,
        )

    def _validated_region(self, provider: Optional[str], code: Optional[str]) -> Region:
        if not provider or not code or not self._region_catalog.is_valid_region(provider, code):
            raise InvalidArgumentError(f"Invalid region {provider}@{code}")
        return Region(provider, code)

    def get_latency(
        self,
        src_provider: Optional[str],
        src_region: Optional[str],
        dst_provider: Optional[str],
        dst_region: Optional[str],
    ) -> Optional[float]:
        source = self._validated_region(src_provider, src_region)
        destination = self._validated_region(dst_provider, dst_region)

        # A single item is cheaper to get from the store than from the cache
        record = self._latency_store.get_one(source.identifier, destination.identifier)
        if record is None:
            raise LatencyNotFoundError(f"No latency from {source} to {destination}")
        return record.ping

    def get_best_destination_region(
        self,
        src_provider: Optional[str],
        src_region: Optional[str],
        dst_candidates: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        source = self._validated_region(src_provider, src_region)
        if not self._region_catalog.is_valid_candidate_list(dst_candidates, self._max_dst_region_candidates):
            raise InvalidArgumentError("Invalid destination candidates")

        check_against_all = not dst_candidates
        if check_against_all:
            candidates = self._region_catalog.all_regions_except(source.identifier)
        else:
            # Duplicated keys are rejected by a batch get
            candidates = list(dict.fromkeys(candidate.lower() for candidate in dst_candidates))  # type: ignore

        use_cache = self._result_cache.should_cache(len(candidates))
        cache_key = None
        if use_cache:
            cache_key = self._result_cache.derive_key(
                RequestType.LATENCIES_FROM_ONE_REGION_TO_MULTI_REGION_CANDIDATES,
                {"src": source.identifier, "dst": candidates},
            )

        best: Optional[LatencyRecord] = None
        if cache_key is not None:
            cached_records = self._read_cached_records(cache_key, source.identifier)
            if cached_records is not None:
                best = select_minimum(cached_records)

        if best is None:
            if check_against_all:
                records = self._latency_store.query_by_source(source.identifier)
            else:
                records = self._latency_store.batch_get(source.identifier, candidates)

            best = select_minimum(records)

            if best is not None and cache_key is not None:
                # Cache the raw rows, not the answer, other requests share the same rows
                self._result_cache.put(cache_key, serialize_latency_records(records))

        if best is None:
            logger.error("No result for best destination region from %s", source)
            raise NoResultError(f"No reachable destination region from {source}")
        return best.to_destination_dict()

    def get_all_destination_regions(
        self, src_provider: Optional[str], src_region: Optional[str]
    ) -> list[dict[str, Any]]:
        source = self._validated_region(src_provider, src_region)

        destinations = self._region_catalog.all_regions_except(source.identifier)
        cache_key = self._result_cache.derive_key(
            RequestType.LATENCIES_FROM_ONE_REGION_TO_MULTI_REGION_CANDIDATES,
            {"src": source.identifier, "dst": destinations},
        )

        if cache_key is not None:
            cached_records = self._read_cached_records(cache_key, source.identifier)
            if cached_records is not None:
                return [record.to_destination_dict() for record in cached_records if not record.is_self_pair]

        records = self._latency_store.query_by_source(source.identifier)
        result = [record.to_destination_dict() for record in records if not record.is_self_pair]

        if records and cache_key is not None and self._result_cache.should_cache(len(destinations)):
            self._result_cache.put(cache_key, serialize_latency_records(records))
        return result

    def get_all_data(self, acknowledgement: Optional[str]) -> list[dict[str, Any]]:
        # Guard against accidental full table scans
        if acknowledgement != ALL_DATA_ACKNOWLEDGEMENT:
            raise InvalidArgumentError("The acknowledgement does not match")

        cache_key = self._result_cache.derive_key(RequestType.ALL_DATA)
        if cache_key is not None:
            cached_value = self._result_cache.get(cache_key)
            if cached_value is not None:
                try:
                    data = json.loads(cached_value, parse_constant=_reject_non_finite)
                    if not isinstance(data, list):
                        raise ValueError("Cached full dump is not a list")
                    logger.info("Cache hit for %s", cache_key)
                    return data
                except ValueError as e:
                    logger.error("Cached full dump is malformed, reading from the store: %s", e)
            else:
                logger.info("Cache miss for %s", cache_key)

        records = self._latency_store.scan_all()
        result = [record.to_full_dict() for record in records]

        if cache_key is not None and self._result_cache.should_cache(len(result)):
            self._result_cache.put(cache_key, json.dumps(result), compress=True)
        return result

    def _read_cached_records(self, cache_key: str, source_region: str) -> Optional[list[LatencyRecord]]:
        cached_value = self._result_cache.get(cache_key)
        if cached_value is None:
            logger.info("Cache miss for %s", cache_key)
            return None

        try:
            records = deserialize_latency_records(cached_value, source_region)
        except ValueError as e:
            logger.error("Could not parse cached value for %s, reading from the store: %s", cache_key, e)
            return None

        logger.info("Cache hit for %s", cache_key)
        return records
