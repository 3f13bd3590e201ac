from cloud_highway.common.config.config import Config
from cloud_highway.common.models.remote_client.remote_client import RemoteClient
from cloud_highway.common.models.remote_client.remote_client_factory import RemoteClientFactory


class Endpoints:
    def __init__(self, config: Config) -> None:
        # Both tables live in the system region, the remote client is shared
        self._datastore_region = config.system_region
        self._datastore_client = RemoteClientFactory.get_remote_client(config.provider, self._datastore_region)

        self._cache_client = self._datastore_client

    def get_datastore_client(self) -> RemoteClient:
        return self._datastore_client

    def get_cache_client(self) -> RemoteClient:
        return self._cache_client
