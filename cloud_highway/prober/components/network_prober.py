from abc import ABC, abstractmethod

from cloud_highway.common.models.region import Region


class NetworkProber(ABC):
    @abstractmethod
    def probe(self, region: Region, attempts: int) -> list[float]:
        # Returns the round trip samples in milliseconds, an empty list if the region was unreachable
        raise NotImplementedError()
