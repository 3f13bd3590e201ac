import unittest
from unittest.mock import MagicMock, call

from cloud_highway.common.exceptions import StoreUnavailableError
from cloud_highway.common.models.region import Region
from cloud_highway.common.models.region_catalog import RegionCatalog
from cloud_highway.prober.components.integration_test_network_prober import IntegrationTestNetworkProber
from cloud_highway.prober.components.network_prober import NetworkProber
from cloud_highway.prober.latency_prober import LatencyProber
from cloud_highway.query_engine.components.latency_store import LatencyStore


class TestLatencyProber(unittest.TestCase):
    def setUp(self):
        self.catalog = RegionCatalog({"aws": ["us-west-2", "us-west-1", "ap-east-1"]})
        self.source = Region("aws", "us-west-2")
        self.latency_store = MagicMock(spec=LatencyStore)
        self.network_prober = MagicMock(spec=NetworkProber)

    def test_run_writes_mean_for_every_region(self):
        self.network_prober.probe.side_effect = [[1.0, 2.0], [40.0, 50.0], [120.0, 130.0, 125.0]]
        prober = LatencyProber(self.source, self.catalog, self.latency_store, self.network_prober, attempts=2)

        result = prober.run()

        self.network_prober.probe.assert_has_calls(
            [
                call(Region("aws", "us-west-2"), 2),
                call(Region("aws", "us-west-1"), 2),
                call(Region("aws", "ap-east-1"), 2),
            ]
        )
        self.latency_store.put.assert_has_calls(
            [
                call("aws@us-west-2", "aws@us-west-2", 1.5),
                call("aws@us-west-2", "aws@us-west-1", 45.0),
                call("aws@us-west-2", "aws@ap-east-1", 125.0),
            ]
        )
        self.assertEqual(result, {"aws@us-west-2": 1.5, "aws@us-west-1": 45.0, "aws@ap-east-1": 125.0})

    def test_run_unreachable(self):
        self.network_prober.probe.side_effect = [[1.0], [], OSError("network unreachable")]
        prober = LatencyProber(self.source, self.catalog, self.latency_store, self.network_prober)

        result = prober.run()

        self.assertEqual(result, {"aws@us-west-2": 1.0, "aws@us-west-1": None, "aws@ap-east-1": None})
        self.latency_store.put.assert_any_call("aws@us-west-2", "aws@us-west-1", None)

    def test_run_continues_after_store_failure(self):
        self.network_prober.probe.return_value = [10.0]
        self.latency_store.put.side_effect = [None, StoreUnavailableError("throttled"), None]
        prober = LatencyProber(self.source, self.catalog, self.latency_store, self.network_prober)

        with self.assertLogs("cloud_highway.prober.latency_prober", level="ERROR"):
            result = prober.run()

        self.assertEqual(self.latency_store.put.call_count, 3)
        self.assertEqual(list(result), ["aws@us-west-2", "aws@ap-east-1"])

    def test_source_not_in_catalog(self):
        with self.assertRaises(ValueError):
            LatencyProber(Region("aws", "eu-west-1"), self.catalog, self.latency_store, self.network_prober)

    def test_run_with_integration_test_prober(self):
        catalog = RegionCatalog.integration_test()
        source = Region("integrationtestprovider", "rivendell")
        prober = LatencyProber(source, catalog, self.latency_store, IntegrationTestNetworkProber("rivendell"))

        result = prober.run()

        self.assertEqual(
            result,
            {
                "integrationtestprovider@rivendell": 10.0,
                "integrationtestprovider@lothlorien": 150.0,
                "integrationtestprovider@anduin": 80.0,
                "integrationtestprovider@fangorn": 200.0,
            },
        )


if __name__ == "__main__":
    unittest.main()
