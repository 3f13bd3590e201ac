import logging
from typing import Any, Optional

import boto3
import botocore

from cloud_highway.common.config.config import Config
from cloud_highway.common.models.remote_client.integration_test_remote_client import IntegrationTestRemoteClient

logger = logging.getLogger()


def remove_table(dynamodb: Any, table_name: str) -> bool:
    # Absent tables are skipped, returns whether a table was removed
    try:
        dynamodb.describe_table(TableName=table_name)
    except dynamodb.exceptions.ResourceNotFoundException:
        logger.info("Table %s does not exist (or was already removed)", table_name)
        return False

    dynamodb.delete_table(TableName=table_name)
    logger.info("Removed table %s", table_name)
    return True


def main(config: Optional[Config] = None) -> None:
    if config is None:
        config = Config.from_environment()

    if config.integration_test_on:
        IntegrationTestRemoteClient().remove_tables()
        logger.info("Integration test tables removed")
        return

    dynamodb = boto3.client("dynamodb", region_name=config.system_region)
    for table_name in (config.latency_table, config.cache_table):
        try:
            remove_table(dynamodb, table_name)
        except botocore.exceptions.ClientError as e:
            logger.error("Error removing table %s: %s", table_name, e)
            raise


if __name__ == "__main__":
    main()
