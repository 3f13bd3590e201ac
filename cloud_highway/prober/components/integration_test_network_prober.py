from cloud_highway.common.models.region import Region
from cloud_highway.prober.components.network_prober import NetworkProber


class IntegrationTestNetworkProber(NetworkProber):
    def __init__(self, source_code: str) -> None:
        super().__init__()

        self._latency_matrix = [[10, 150, 80, 200], [150, 10, 100, 250], [80, 100, 10, 150], [200, 250, 150, 10]]

        self._code_to_index = {"rivendell": 0, "lothlorien": 1, "anduin": 2, "fangorn": 3}

        if source_code not in self._code_to_index:
            raise ValueError(f"Unknown integration test region {source_code}")
        self._source_index = self._code_to_index[source_code]

    def probe(self, region: Region, attempts: int) -> list[float]:
        if region.code not in self._code_to_index:
            return []
        latency = self._latency_matrix[self._source_index][self._code_to_index[region.code]]
        return [float(latency)] * attempts
