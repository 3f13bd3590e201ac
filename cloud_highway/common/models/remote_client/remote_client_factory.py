from cloud_highway.common.models.remote_client.aws_remote_client import AWSRemoteClient
from cloud_highway.common.models.remote_client.integration_test_remote_client import IntegrationTestRemoteClient
from cloud_highway.common.models.remote_client.remote_client import RemoteClient
from cloud_highway.common.provider import Provider


class RemoteClientFactory:
    @staticmethod
    def get_remote_client(provider: str, region: str) -> RemoteClient:
        try:
            provider_enum = Provider(provider)
        except ValueError as e:
            raise RuntimeError(f"Unknown provider {provider}") from e
        if provider_enum == Provider.AWS:
            return AWSRemoteClient(region)
        if provider_enum == Provider.INTEGRATION_TEST_PROVIDER:
            return IntegrationTestRemoteClient()
        raise RuntimeError(f"Unknown provider {provider}")
