import os
from typing import Any

from cloud_highway.common import constants
from cloud_highway.common.config.config_schema import ConfigSchema
from cloud_highway.common.models.region_catalog import RegionCatalog
from cloud_highway.common.provider import Provider
from cloud_highway.common.utils import str_to_bool

# Environment variable -> config field
_ENVIRONMENT_OVERRIDES = {
    "CLOUD_HIGHWAY_SYSTEM_REGION": "system_region",
    "CLOUD_HIGHWAY_LATENCY_TABLE": "latency_table",
    "CLOUD_HIGHWAY_CACHE_TABLE": "cache_table",
    "CLOUD_HIGHWAY_CACHE_TTL_IN_MINUTES": "cache_ttl_in_minutes",
    "CLOUD_HIGHWAY_CACHE_ROW_THRESHOLD": "cache_row_threshold",
    "CLOUD_HIGHWAY_MAX_DST_REGION_CANDIDATES": "max_dst_region_candidates",
    "CLOUD_HIGHWAY_PROBE_ATTEMPTS": "probe_attempts",
}


class Config:
    def __init__(self, config_schema: ConfigSchema) -> None:
        self._config_schema = config_schema

    @classmethod
    def from_environment(cls) -> "Config":
        values: dict[str, Any] = {}
        for variable, field in _ENVIRONMENT_OVERRIDES.items():
            if variable in os.environ:
                values[field] = os.environ[variable]

        integration_test_on = str_to_bool(os.environ.get("INTEGRATIONTEST_ON", "False"))
        if integration_test_on:
            values["provider"] = Provider.INTEGRATION_TEST_PROVIDER.value
            values.setdefault("system_region", constants.INTEGRATION_TEST_SYSTEM_REGION)

        return cls(ConfigSchema(**values))

    @property
    def provider(self) -> str:
        return self._config_schema.provider

    @property
    def system_region(self) -> str:
        return self._config_schema.system_region

    @property
    def latency_table(self) -> str:
        return self._config_schema.latency_table

    @property
    def cache_table(self) -> str:
        return self._config_schema.cache_table

    @property
    def cache_ttl_in_minutes(self) -> int:
        return self._config_schema.cache_ttl_in_minutes

    @property
    def cache_row_threshold(self) -> int:
        return self._config_schema.cache_row_threshold

    @property
    def max_dst_region_candidates(self) -> int:
        return self._config_schema.max_dst_region_candidates

    @property
    def probe_attempts(self) -> int:
        return self._config_schema.probe_attempts

    @property
    def integration_test_on(self) -> bool:
        return self.provider == Provider.INTEGRATION_TEST_PROVIDER.value

    def region_catalog(self) -> RegionCatalog:
        if self.integration_test_on:
            return RegionCatalog.integration_test()
        return RegionCatalog.default()
