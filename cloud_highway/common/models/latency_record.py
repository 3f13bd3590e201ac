from dataclasses import dataclass
from typing import Any, Optional

from cloud_highway.common.models.region import split_region_identifier


@dataclass(frozen=True)
class LatencyRecord:
    """
    One measured (source, destination) pair.

    ``ping`` is the latency in milliseconds at full precision, ``None``
    denotes that the destination was unreachable in the last probe cycle.
    """

    source_region: str
    destination_region: str
    ping: Optional[float]

    @property
    def is_self_pair(self) -> bool:
        return self.source_region == self.destination_region

    @property
    def is_reachable(self) -> bool:
        return self.ping is not None

    @classmethod
    def from_item(cls, item: dict[str, Any], source_region: Optional[str] = None) -> "LatencyRecord":
        # Projected items ("dstRegion, ping") do not carry the source region
        source = item.get("srcRegion", source_region)
        if source is None:
            raise ValueError(f"Latency item {item} has no source region")
        ping = item.get("ping")
        return cls(source.lower(), item["dstRegion"].lower(), float(ping) if ping is not None else None)

    def to_destination_dict(self) -> dict[str, Any]:
        provider, code = split_region_identifier(self.destination_region)
        return {"dstProvider": provider, "dstRegion": code, "ping": self.ping}

    def to_full_dict(self) -> dict[str, Any]:
        src_provider, src_code = split_region_identifier(self.source_region)
        dst_provider, dst_code = split_region_identifier(self.destination_region)
        return {
            "srcProvider": src_provider,
            "srcRegion": src_code,
            "dstProvider": dst_provider,
            "dstRegion": dst_code,
            "ping": self.ping,
        }
