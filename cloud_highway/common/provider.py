from enum import Enum


# NOTE: Provider name MUST be lowercase and MUST NOT contain "@".
class Provider(Enum):
    AWS = "aws"

    # For integration tests
    INTEGRATION_TEST_PROVIDER = "integrationtestprovider"
