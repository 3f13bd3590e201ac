import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from cloud_highway.common import constants
from cloud_highway.common.exceptions import RemoteClientError
from cloud_highway.common.models.remote_client.integration_test_remote_client import IntegrationTestRemoteClient


class TestIntegrationTestRemoteClient(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env_patcher = patch.dict(
            os.environ, {"CLOUD_HIGHWAY_INTEGRATION_TEST_DB_PATH": os.path.join(self.temp_dir, "db.sqlite")}
        )
        self.env_patcher.start()
        self.client = IntegrationTestRemoteClient(page_size=2)

    def tearDown(self):
        self.env_patcher.stop()
        shutil.rmtree(self.temp_dir)

    def _fill(self, src_region, dst_regions):
        for i, dst_region in enumerate(dst_regions):
            self.client.set_latency(constants.LATENCY_TABLE, src_region, dst_region, float(i))

    def test_get_latency(self):
        self.client.set_latency(constants.LATENCY_TABLE, "aws@us-west-2", "aws@us-west-1", 45.5)

        self.assertEqual(
            self.client.get_latency(constants.LATENCY_TABLE, "aws@us-west-2", "aws@us-west-1"),
            {"srcRegion": "aws@us-west-2", "dstRegion": "aws@us-west-1", "ping": 45.5},
        )
        self.assertIsNone(self.client.get_latency(constants.LATENCY_TABLE, "aws@us-west-1", "aws@us-west-2"))

    def test_set_latency_overwrites(self):
        self.client.set_latency(constants.LATENCY_TABLE, "aws@us-west-2", "aws@us-west-1", 45.5)
        self.client.set_latency(constants.LATENCY_TABLE, "aws@us-west-2", "aws@us-west-1", None)

        item = self.client.get_latency(constants.LATENCY_TABLE, "aws@us-west-2", "aws@us-west-1")

        self.assertIsNone(item["ping"])

    def test_query_latencies_paginates(self):
        self._fill("aws@us-west-2", ["aws@a", "aws@b", "aws@c"])
        self._fill("aws@us-west-1", ["aws@a"])

        first_page, last_key = self.client.query_latencies(constants.LATENCY_TABLE, "aws@us-west-2")
        second_page, final_key = self.client.query_latencies(constants.LATENCY_TABLE, "aws@us-west-2", last_key)

        self.assertEqual([item["dstRegion"] for item in first_page], ["aws@a", "aws@b"])
        self.assertIsNotNone(last_key)
        self.assertEqual([item["dstRegion"] for item in second_page], ["aws@c"])
        self.assertIsNone(final_key)

    def test_scan_latencies_paginates(self):
        self._fill("aws@us-west-1", ["aws@a", "aws@b"])
        self._fill("aws@us-west-2", ["aws@a"])

        items = []
        last_key = None
        pages = 0
        while True:
            page, last_key = self.client.scan_latencies(constants.LATENCY_TABLE, last_key)
            items.extend(page)
            pages += 1
            if not last_key:
                break

        self.assertEqual(pages, 2)
        self.assertEqual(
            [(item["srcRegion"], item["dstRegion"]) for item in items],
            [("aws@us-west-1", "aws@a"), ("aws@us-west-1", "aws@b"), ("aws@us-west-2", "aws@a")],
        )

    def test_batch_get_latencies(self):
        self._fill("aws@us-west-2", ["aws@a", "aws@b", "aws@c"])

        items = self.client.batch_get_latencies(constants.LATENCY_TABLE, "aws@us-west-2", ["aws@a", "aws@c", "aws@x"])

        self.assertEqual(sorted(item["dstRegion"] for item in items), ["aws@a", "aws@c"])
        self.assertEqual(self.client.batch_get_latencies(constants.LATENCY_TABLE, "aws@us-west-2", []), [])

    def test_value_in_table(self):
        self.client.set_value_in_table(constants.CACHE_TABLE, "key", "value", ttl=100)

        self.assertEqual(self.client.get_value_from_table(constants.CACHE_TABLE, "key"), ("value", 100))
        self.assertEqual(self.client.get_value_from_table(constants.CACHE_TABLE, "missing"), ("", None))

    def test_value_in_table_compressed(self):
        self.client.set_value_in_table(constants.CACHE_TABLE, "ALL_DATA", "[1, 2]", ttl=100, convert_to_bytes=True)

        self.assertEqual(self.client.get_value_from_table(constants.CACHE_TABLE, "ALL_DATA"), ("[1, 2]", 100))

    def test_value_in_table_malformed(self):
        self.client._execute(
            f"INSERT INTO {constants.CACHE_TABLE} (key, value, ttl) VALUES (?, ?, ?)", ("number", 12, 100)
        )
        self.client._execute(
            f"INSERT INTO {constants.CACHE_TABLE} (key, value, ttl) VALUES (?, ?, ?)", ("late", "value", "soon")
        )

        for key in ("number", "late"):
            with self.subTest(key=key):
                with self.assertRaises(RemoteClientError):
                    self.client.get_value_from_table(constants.CACHE_TABLE, key)

    def test_unknown_table(self):
        with self.assertRaises(RemoteClientError):
            self.client.get_latency("unknown_table", "aws@us-west-2", "aws@us-west-1")

    def test_remove_tables(self):
        self.client.remove_tables()

        with self.assertRaises(RemoteClientError):
            self.client.get_value_from_table(constants.CACHE_TABLE, "key")


if __name__ == "__main__":
    unittest.main()
