import json
import logging
from typing import Any, Optional

from cloud_highway.common.config.config import Config
from cloud_highway.common.exceptions import (
    InvalidArgumentError,
    LatencyNotFoundError,
    NoResultError,
    StoreUnavailableError,
)
from cloud_highway.query_engine.query_engine import QueryEngine

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

logging.getLogger("botocore").setLevel(logging.WARNING)


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body, indent=2)}


def _bad_request() -> dict[str, Any]:
    return _response(400, {"error": "Bad Request"})


def _not_found() -> dict[str, Any]:
    return _response(404, {"error": "Not Found"})


def _internal_server_error() -> dict[str, Any]:
    return _response(500, {"error": "Internal Server Error"})


def _query_parameters(event: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not event:
        return None
    return event.get("queryStringParameters")


class LatencyApiHandler:
    """
    Maps API Gateway proxy events onto the query engine.

    Error bodies are fixed strings, the cause is only logged.
    """

    def __init__(self, query_engine: QueryEngine) -> None:
        self._query_engine = query_engine

    def get_latency(self, event: Optional[dict[str, Any]]) -> dict[str, Any]:
        # /getLatency?srcProvider=aws&srcRegion=us-west-2&dstProvider=aws&dstRegion=ap-east-1
        params = _query_parameters(event)
        if not params:
            return _bad_request()

        try:
            ping = self._query_engine.get_latency(
                params.get("srcProvider"), params.get("srcRegion"), params.get("dstProvider"), params.get("dstRegion")
            )
        except InvalidArgumentError as e:
            logger.info("Rejected latency request: %s", e)
            return _bad_request()
        except LatencyNotFoundError as e:
            logger.info("%s", e)
            return _not_found()
        except StoreUnavailableError as e:
            logger.error("Latency request failed: %s", e)
            return _internal_server_error()

        return _response(200, {"ping": ping})

    def get_best_destination_region(self, event: Optional[dict[str, Any]]) -> dict[str, Any]:
        # /getBestDstRegion?srcProvider=aws&srcRegion=us-west-2&dstCandidate=aws@us-west-1&dstCandidate=aws@ap-east-1
        params = _query_parameters(event)
        if not params:
            return _bad_request()

        multi_value_params = (event or {}).get("multiValueQueryStringParameters") or {}
        dst_candidates = multi_value_params.get("dstCandidate")

        try:
            result = self._query_engine.get_best_destination_region(
                params.get("srcProvider"), params.get("srcRegion"), dst_candidates
            )
        except InvalidArgumentError as e:
            logger.info("Rejected best destination request: %s", e)
            return _bad_request()
        except (StoreUnavailableError, NoResultError) as e:
            logger.error("Best destination request failed: %s", e)
            return _internal_server_error()

        return _response(200, {"result": result})

    def get_all_destination_regions(self, event: Optional[dict[str, Any]]) -> dict[str, Any]:
        params = _query_parameters(event)
        if not params:
            return _bad_request()

        try:
            data = self._query_engine.get_all_destination_regions(params.get("srcProvider"), params.get("srcRegion"))
        except InvalidArgumentError as e:
            logger.info("Rejected all destinations request: %s", e)
            return _bad_request()
        except StoreUnavailableError as e:
            logger.error("All destinations request failed: %s", e)
            return _internal_server_error()

        return _response(200, {"data": data})

    def get_all_data(self, event: Optional[dict[str, Any]]) -> dict[str, Any]:
        params = _query_parameters(event)
        if not params:
            return _bad_request()

        try:
            data = self._query_engine.get_all_data(params.get("acknowledgement"))
        except InvalidArgumentError as e:
            logger.info("Rejected all data request: %s", e)
            return _bad_request()
        except StoreUnavailableError as e:
            logger.error("All data request failed: %s", e)
            return _internal_server_error()

        return _response(200, {"data": data})


_handler: Optional[LatencyApiHandler] = None


def _get_handler() -> LatencyApiHandler:
    global _handler  # pylint: disable=global-statement
    if _handler is None:
        _handler = LatencyApiHandler(QueryEngine.from_config(Config.from_environment()))
    return _handler


def get_latency(event: dict[str, Any], context: Any) -> dict[str, Any]:  # pylint: disable=unused-argument
    return _get_handler().get_latency(event)


def get_best_destination_region(
    event: dict[str, Any], context: Any  # pylint: disable=unused-argument
) -> dict[str, Any]:
    return _get_handler().get_best_destination_region(event)


def get_all_destination_regions(
    event: dict[str, Any], context: Any  # pylint: disable=unused-argument
) -> dict[str, Any]:
    return _get_handler().get_all_destination_regions(event)


def get_all_data(event: dict[str, Any], context: Any) -> dict[str, Any]:  # pylint: disable=unused-argument
    return _get_handler().get_all_data(event)
