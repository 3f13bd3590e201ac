from abc import ABC, abstractmethod
from typing import Any, Optional


class RemoteClient(ABC):
    # Latency table
    ## Items are dictionaries with the keys "srcRegion", "dstRegion" and "ping",
    ## where ping is a float or None (unreachable)

    @abstractmethod
    def get_latency(self, table_name: str, src_region: str, dst_region: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError()

    @abstractmethod
    def query_latencies(
        self, table_name: str, src_region: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        # Returns one page of items and the key to continue from (None on the last page)
        raise NotImplementedError()

    @abstractmethod
    def batch_get_latencies(self, table_name: str, src_region: str, dst_regions: list[str]) -> list[dict[str, Any]]:
        raise NotImplementedError()

    @abstractmethod
    def scan_latencies(
        self, table_name: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        raise NotImplementedError()

    @abstractmethod
    def set_latency(self, table_name: str, src_region: str, dst_region: str, ping: Optional[float]) -> None:
        raise NotImplementedError()

    # Key value tables (Result cache)

    @abstractmethod
    def get_value_from_table(self, table_name: str, key: str) -> tuple[str, Optional[int]]:
        # Returns the value ("" if absent) and its ttl (None if absent)
        raise NotImplementedError()

    @abstractmethod
    def set_value_in_table(
        self, table_name: str, key: str, value: str, ttl: Optional[int] = None, convert_to_bytes: bool = False
    ) -> None:
        raise NotImplementedError()
