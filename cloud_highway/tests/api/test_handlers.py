import json
import unittest
from unittest.mock import MagicMock, patch

from cloud_highway.api import handlers
from cloud_highway.api.handlers import LatencyApiHandler
from cloud_highway.common.constants import ALL_DATA_ACKNOWLEDGEMENT
from cloud_highway.common.exceptions import (
    InvalidArgumentError,
    LatencyNotFoundError,
    NoResultError,
    StoreUnavailableError,
)
from cloud_highway.query_engine.query_engine import QueryEngine


class TestLatencyApiHandler(unittest.TestCase):
    def setUp(self):
        self.query_engine = MagicMock(spec=QueryEngine)
        self.handler = LatencyApiHandler(self.query_engine)

    def assertResponse(self, response, status_code, body):
        self.assertEqual(response["statusCode"], status_code)
        self.assertEqual(json.loads(response["body"]), body)

    def test_get_latency(self):
        self.query_engine.get_latency.return_value = 143.9680204
        event = {
            "queryStringParameters": {
                "srcProvider": "aws",
                "srcRegion": "us-west-2",
                "dstProvider": "aws",
                "dstRegion": "ap-east-1",
            }
        }

        response = self.handler.get_latency(event)

        self.query_engine.get_latency.assert_called_once_with("aws", "us-west-2", "aws", "ap-east-1")
        self.assertResponse(response, 200, {"ping": 143.9680204})
        self.assertEqual(response["body"], json.dumps({"ping": 143.9680204}, indent=2))

    def test_get_latency_without_parameters(self):
        for event in [None, {}, {"queryStringParameters": None}]:
            with self.subTest(event=event):
                self.assertResponse(self.handler.get_latency(event), 400, {"error": "Bad Request"})
        self.query_engine.get_latency.assert_not_called()

    def test_get_latency_errors(self):
        errors = [
            (InvalidArgumentError("invalid"), 400, "Bad Request"),
            (LatencyNotFoundError("missing"), 404, "Not Found"),
            (StoreUnavailableError("internal detail"), 500, "Internal Server Error"),
        ]
        for error, status_code, message in errors:
            with self.subTest(error=error):
                self.query_engine.get_latency.side_effect = error

                response = self.handler.get_latency({"queryStringParameters": {"srcProvider": "aws"}})

                self.assertResponse(response, status_code, {"error": message})
                self.assertNotIn(str(error), response["body"])

    def test_get_best_destination_region(self):
        self.query_engine.get_best_destination_region.return_value = {
            "dstProvider": "aws",
            "dstRegion": "us-west-1",
            "ping": 45,
        }
        event = {
            "queryStringParameters": {"srcProvider": "aws", "srcRegion": "us-west-2", "dstCandidate": "aws@ap-east-1"},
            "multiValueQueryStringParameters": {
                "srcProvider": ["aws"],
                "srcRegion": ["us-west-2"],
                "dstCandidate": ["aws@us-west-1", "aws@ap-east-1"],
            },
        }

        response = self.handler.get_best_destination_region(event)

        self.query_engine.get_best_destination_region.assert_called_once_with(
            "aws", "us-west-2", ["aws@us-west-1", "aws@ap-east-1"]
        )
        self.assertResponse(response, 200, {"result": {"dstProvider": "aws", "dstRegion": "us-west-1", "ping": 45}})

    def test_get_best_destination_region_without_candidates(self):
        self.query_engine.get_best_destination_region.return_value = {}

        self.handler.get_best_destination_region({"queryStringParameters": {"srcProvider": "aws", "srcRegion": "x"}})

        self.query_engine.get_best_destination_region.assert_called_once_with("aws", "x", None)

    def test_get_best_destination_region_errors(self):
        errors = [
            (InvalidArgumentError("invalid"), 400),
            (NoResultError("no result"), 500),
            (StoreUnavailableError("down"), 500),
        ]
        for error, status_code in errors:
            with self.subTest(error=error):
                self.query_engine.get_best_destination_region.side_effect = error

                response = self.handler.get_best_destination_region({"queryStringParameters": {"srcProvider": "aws"}})

                self.assertEqual(response["statusCode"], status_code)

    def test_get_all_destination_regions(self):
        data = [{"dstProvider": "aws", "dstRegion": "us-west-1", "ping": 45}]
        self.query_engine.get_all_destination_regions.return_value = data

        response = self.handler.get_all_destination_regions(
            {"queryStringParameters": {"srcProvider": "aws", "srcRegion": "us-west-2"}}
        )

        self.query_engine.get_all_destination_regions.assert_called_once_with("aws", "us-west-2")
        self.assertResponse(response, 200, {"data": data})

    def test_get_all_destination_regions_errors(self):
        self.query_engine.get_all_destination_regions.side_effect = StoreUnavailableError("down")

        response = self.handler.get_all_destination_regions({"queryStringParameters": {"srcProvider": "aws"}})

        self.assertResponse(response, 500, {"error": "Internal Server Error"})

    def test_get_all_data(self):
        self.query_engine.get_all_data.return_value = []

        response = self.handler.get_all_data({"queryStringParameters": {"acknowledgement": ALL_DATA_ACKNOWLEDGEMENT}})

        self.query_engine.get_all_data.assert_called_once_with(ALL_DATA_ACKNOWLEDGEMENT)
        self.assertResponse(response, 200, {"data": []})

    def test_get_all_data_errors(self):
        self.query_engine.get_all_data.side_effect = InvalidArgumentError("mismatch")

        response = self.handler.get_all_data({"queryStringParameters": {"acknowledgement": "yes"}})

        self.assertResponse(response, 400, {"error": "Bad Request"})
        self.assertResponse(self.handler.get_all_data({}), 400, {"error": "Bad Request"})


class TestHandlerEntryPoints(unittest.TestCase):
    def tearDown(self):
        handlers._handler = None

    @patch.object(QueryEngine, "from_config")
    @patch("cloud_highway.api.handlers.Config")
    def test_handler_is_built_once(self, mock_config, mock_from_config):
        mock_from_config.return_value.get_latency.return_value = 45
        event = {"queryStringParameters": {"srcProvider": "aws"}}

        handlers.get_latency(event, None)
        handlers.get_latency(event, None)

        mock_config.from_environment.assert_called_once_with()
        mock_from_config.assert_called_once_with(mock_config.from_environment.return_value)
        self.assertEqual(mock_from_config.return_value.get_latency.call_count, 2)


if __name__ == "__main__":
    unittest.main()
