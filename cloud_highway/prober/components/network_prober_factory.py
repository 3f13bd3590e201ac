from cloud_highway.common.provider import Provider
from cloud_highway.prober.components.integration_test_network_prober import IntegrationTestNetworkProber
from cloud_highway.prober.components.network_prober import NetworkProber


class NetworkProberFactory:
    @staticmethod
    def get_network_prober(provider: str, source_code: str) -> NetworkProber:
        try:
            provider_enum = Provider(provider)
        except ValueError as e:
            raise RuntimeError(f"Unknown provider {provider}") from e
        if provider_enum == Provider.AWS:
            # Transport level probing is provided by the deployment, not by this package
            raise NotImplementedError()
        if provider_enum == Provider.INTEGRATION_TEST_PROVIDER:
            return IntegrationTestNetworkProber(source_code)
        raise RuntimeError(f"Unknown provider {provider}")
