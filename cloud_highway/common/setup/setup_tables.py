import logging
from typing import Any, Optional

import boto3

from cloud_highway.common import constants
from cloud_highway.common.config.config import Config
from cloud_highway.common.models.remote_client.integration_test_remote_client import IntegrationTestRemoteClient

logger = logging.getLogger()


def _table_exists(dynamodb: Any, table_name: str) -> bool:
    try:
        dynamodb.describe_table(TableName=table_name)
        logger.info("Table %s already exists", table_name)
        return True
    except dynamodb.exceptions.ResourceNotFoundException:
        return False


def create_latency_table(dynamodb: Any, table_name: str) -> None:
    if _table_exists(dynamodb, table_name):
        return
    # One row per ordered (source, destination) pair
    dynamodb.create_table(
        TableName=table_name,
        AttributeDefinitions=[
            {"AttributeName": "srcRegion", "AttributeType": "S"},
            {"AttributeName": "dstRegion", "AttributeType": "S"},
        ],
        KeySchema=[
            {"AttributeName": "srcRegion", "KeyType": "HASH"},
            {"AttributeName": "dstRegion", "KeyType": "RANGE"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


def create_cache_table(dynamodb: Any, table_name: str) -> None:
    if _table_exists(dynamodb, table_name):
        return
    dynamodb.create_table(
        TableName=table_name,
        AttributeDefinitions=[{"AttributeName": "key", "AttributeType": "S"}],
        KeySchema=[{"AttributeName": "key", "KeyType": "HASH"}],
        BillingMode="PAY_PER_REQUEST",
    )

    # Expired entries are already ignored on read, this only reclaims the storage
    dynamodb.get_waiter("table_exists").wait(TableName=table_name)
    dynamodb.update_time_to_live(
        TableName=table_name,
        TimeToLiveSpecification={"Enabled": True, "AttributeName": constants.CACHE_TTL_ATTRIBUTE_NAME},
    )


def main(config: Optional[Config] = None) -> None:
    if config is None:
        config = Config.from_environment()

    if config.integration_test_on:
        # The sqlite backend creates its tables on construction
        IntegrationTestRemoteClient()
        logger.info("Integration test tables are ready")
        return

    dynamodb = boto3.client("dynamodb", region_name=config.system_region)

    logger.info("Creating table: %s", config.latency_table)
    create_latency_table(dynamodb, config.latency_table)

    logger.info("Creating table: %s", config.cache_table)
    create_cache_table(dynamodb, config.cache_table)


if __name__ == "__main__":
    main()
