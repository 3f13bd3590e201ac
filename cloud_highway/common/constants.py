# Latency Store Tables
LATENCY_TABLE = "cloud_highway_latency_table"

# Result Cache Tables
CACHE_TABLE = "cloud_highway_cache_table"

# Global System Region (Both tables live here, regardless of the probed source region)
GLOBAL_SYSTEM_REGION = "us-west-2"

# Integration Test System Region
INTEGRATION_TEST_SYSTEM_REGION = "rivendell"

# Region identifiers
## Identifiers are in the form of "provider@code", e.g. "aws@us-west-2"
REGION_IDENTIFIER_SEPARATOR = "@"

# Result Cache parameters
## Cache values are "|" joined JSON objects of {"dstRegion": ..., "ping": ...}
CACHE_VALUE_SEPARATOR = "|"
## Cache keys are in the form of "src+dst1,dst2,..."
CACHE_KEY_SOURCE_SEPARATOR = "+"
CACHE_KEY_DESTINATION_SEPARATOR = ","
ALL_DATA_CACHE_KEY = "ALL_DATA"
CACHE_TTL_ATTRIBUTE_NAME = "ttl"
CACHE_TTL_IN_MINUTES = 30
## Only involve the cache if a request touches more than this many rows,
## a get of a few items is cheaper than the extra cache write.
CACHE_ROW_THRESHOLD = 5

# Query Engine parameters
## DynamoDB batch_get_item is limited to 100 keys per request
MAX_DST_REGION_CANDIDATES = 100
ALL_DATA_ACKNOWLEDGEMENT = (
    "Yes_I_Understand_This_Operation_Is_Expensive_And_I_Should_Only_Make_The_Request_When_I_Really_Need_It"
)

# Prober parameters
PROBE_ATTEMPTS = 5

# Authorizer
API_SECRET_HEADER = "X-RapidAPI-Proxy-Secret"
API_SECRET_ENVIRONMENT_VARIABLE = "RAPID_API_SECRET_KEY"

# Integration test backend
INTEGRATION_TEST_PAGE_SIZE = 10

# Region catalogs (Declaration order is the enumeration order)
SUPPORTED_REGIONS: dict[str, list[str]] = {
    "aws": [
        "us-east-1",
        "us-east-2",
        "us-west-1",
        "us-west-2",
        "af-south-1",
        "ap-east-1",
        "ap-south-1",
        "ap-northeast-1",
        "ap-northeast-2",
        "ap-northeast-3",
        "ap-southeast-1",
        "ap-southeast-2",
        "ca-central-1",
        "eu-central-1",
        "eu-west-1",
        "eu-west-2",
        "eu-west-3",
        "eu-south-1",
        "eu-north-1",
        "me-south-1",
        "sa-east-1",
    ],
}

INTEGRATION_TEST_REGIONS: dict[str, list[str]] = {
    "integrationtestprovider": ["rivendell", "lothlorien", "anduin", "fangorn"],
}
