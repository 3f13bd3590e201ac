import logging
import time
from typing import Any, Optional

import zstandard as zstd
from boto3.session import Session
from botocore.exceptions import BotoCoreError, ClientError

from cloud_highway.common.exceptions import RemoteClientError
from cloud_highway.common.models.remote_client.remote_client import RemoteClient
from cloud_highway.common.utils import compress_json_str, decompress_json_str

logger = logging.getLogger(__name__)


class AWSRemoteClient(RemoteClient):
    # Attempts to resolve the UnprocessedKeys of a batch_get_item before giving up
    BATCH_GET_ATTEMPTS = 10
    # Base delay in seconds, doubled after every retry of the unprocessed keys
    DELAY_TIME = 0.05

    def __init__(self, region: str) -> None:
        self._session = Session(region_name=region)
        self._client_cache: dict[str, Any] = {}

    def _client(self, service_name: str) -> Any:
        if service_name not in self._client_cache:
            self._client_cache[service_name] = self._session.client(service_name)
        return self._client_cache[service_name]

    def _dynamodb_call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        client = self._client("dynamodb")
        try:
            return getattr(client, operation)(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise RemoteClientError(f"DynamoDB {operation} on {kwargs.get('TableName')} failed: {str(e)}") from e

    @staticmethod
    def _latency_key(src_region: str, dst_region: str) -> dict[str, Any]:
        return {"srcRegion": {"S": src_region}, "dstRegion": {"S": dst_region}}

    @staticmethod
    def _item_to_latency(item: dict[str, Any]) -> dict[str, Any]:
        # Convert from the typed DynamoDB representation,
        # e.g. {"dstRegion": {"S": "aws@us-west-1"}, "ping": {"N": "45.1"}}
        latency: dict[str, Any] = {"dstRegion": item["dstRegion"]["S"], "ping": None}
        if "srcRegion" in item:
            latency["srcRegion"] = item["srcRegion"]["S"]
        ping = item.get("ping", {})
        if "N" in ping:
            latency["ping"] = float(ping["N"])
        return latency

    def get_latency(self, table_name: str, src_region: str, dst_region: str) -> Optional[dict[str, Any]]:
        response = self._dynamodb_call(
            "get_item", TableName=table_name, Key=self._latency_key(src_region, dst_region)
        )
        if "Item" not in response:
            return None
        return self._item_to_latency(response["Item"])

    def query_latencies(
        self, table_name: str, src_region: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        kwargs: dict[str, Any] = {
            "TableName": table_name,
            "KeyConditionExpression": "srcRegion = :source",
            "ExpressionAttributeValues": {":source": {"S": src_region}},
            "ProjectionExpression": "dstRegion, ping",
        }
        if exclusive_start_key:
            kwargs["ExclusiveStartKey"] = exclusive_start_key

        response = self._dynamodb_call("query", **kwargs)
        items = [self._item_to_latency(item) for item in response.get("Items", [])]
        return items, response.get("LastEvaluatedKey")

    def batch_get_latencies(self, table_name: str, src_region: str, dst_regions: list[str]) -> list[dict[str, Any]]:
        if not dst_regions:
            return []

        request_items: dict[str, Any] = {
            table_name: {
                "Keys": [self._latency_key(src_region, dst_region) for dst_region in dst_regions],
                "ProjectionExpression": "dstRegion, ping",
            }
        }

        items: list[dict[str, Any]] = []
        for attempt in range(self.BATCH_GET_ATTEMPTS):
            response = self._dynamodb_call("batch_get_item", RequestItems=request_items)
            items.extend(self._item_to_latency(item) for item in response.get("Responses", {}).get(table_name, []))

            # DynamoDB may return part of the keys as unprocessed (e.g. due to throttling)
            request_items = response.get("UnprocessedKeys", {})
            if not request_items:
                return items
            if attempt == self.BATCH_GET_ATTEMPTS - 1:
                break
            logger.info(
                "Retrying %s unprocessed keys of batch get on %s",
                len(request_items.get(table_name, {}).get("Keys", [])),
                table_name,
            )
            time.sleep(self.DELAY_TIME * (2**attempt))

        raise RemoteClientError(f"Could not resolve all keys of batch get on {table_name}")

    def scan_latencies(
        self, table_name: str, exclusive_start_key: Optional[dict[str, Any]] = None
    ) -> tuple[list[dict[str, Any]], Optional[dict[str, Any]]]:
        kwargs: dict[str, Any] = {"TableName": table_name}
        if exclusive_start_key:
            kwargs["ExclusiveStartKey"] = exclusive_start_key

        response = self._dynamodb_call("scan", **kwargs)
        items = [self._item_to_latency(item) for item in response.get("Items", [])]
        return items, response.get("LastEvaluatedKey")

    def set_latency(self, table_name: str, src_region: str, dst_region: str, ping: Optional[float]) -> None:
        # repr keeps the shortest string that round trips to the same float
        value = {"N": repr(float(ping))} if ping is not None else {"NULL": True}
        self._dynamodb_call(
            "update_item",
            TableName=table_name,
            Key=self._latency_key(src_region, dst_region),
            UpdateExpression="SET #ping = :value",
            ExpressionAttributeNames={"#ping": "ping"},
            ExpressionAttributeValues={":value": value},
        )

    def get_value_from_table(self, table_name: str, key: str) -> tuple[str, Optional[int]]:
        response = self._dynamodb_call("get_item", TableName=table_name, Key={"key": {"S": key}})

        item = response.get("Item")
        if item is None or "value" not in item:
            return "", None

        ttl = self._item_ttl(item, table_name, key)
        value = item["value"]
        if not isinstance(value, dict):
            raise RemoteClientError(f"Malformed value of {key} in {table_name}")
        if "B" in value:
            try:
                return decompress_json_str(value["B"]), ttl
            except (zstd.ZstdError, UnicodeDecodeError, TypeError) as e:
                raise RemoteClientError(f"Could not decompress value of {key} in {table_name}: {str(e)}") from e
        if not isinstance(value.get("S"), str):
            raise RemoteClientError(f"Value of {key} in {table_name} is neither a string nor binary")
        return value["S"], ttl

    @staticmethod
    def _item_ttl(item: dict[str, Any], table_name: str, key: str) -> Optional[int]:
        if "ttl" not in item:
            return None
        ttl = item["ttl"]
        try:
            return int(ttl["N"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteClientError(f"Malformed ttl of {key} in {table_name}: {ttl!r}") from e

    def set_value_in_table(
        self, table_name: str, key: str, value: str, ttl: Optional[int] = None, convert_to_bytes: bool = False
    ) -> None:
        item: dict[str, Any] = {"key": {"S": key}}
        if convert_to_bytes:
            item["value"] = {"B": compress_json_str(value)}
        else:
            item["value"] = {"S": value}
        if ttl is not None:
            item["ttl"] = {"N": str(ttl)}

        self._dynamodb_call("put_item", TableName=table_name, Item=item)
