from pydantic import BaseModel, Field, model_validator

from cloud_highway.common import constants
from cloud_highway.common.provider import Provider


class ConfigSchema(BaseModel):
    provider: str = Field(Provider.AWS.value, title="The backend provider of the latency and cache tables")
    system_region: str = Field(constants.GLOBAL_SYSTEM_REGION, title="The region hosting the tables")
    latency_table: str = Field(constants.LATENCY_TABLE, min_length=1, title="The latency table name")
    cache_table: str = Field(constants.CACHE_TABLE, min_length=1, title="The result cache table name")
    cache_ttl_in_minutes: int = Field(constants.CACHE_TTL_IN_MINUTES, gt=0, title="Time to live of cache entries")
    cache_row_threshold: int = Field(
        constants.CACHE_ROW_THRESHOLD, ge=0, title="Requests touching more rows than this are cached"
    )
    max_dst_region_candidates: int = Field(
        constants.MAX_DST_REGION_CANDIDATES,
        gt=0,
        le=constants.MAX_DST_REGION_CANDIDATES,
        title="Maximum number of destination candidates of a best region request",
    )
    probe_attempts: int = Field(constants.PROBE_ATTEMPTS, gt=0, title="Probes per destination per cycle")

    @model_validator(mode="after")
    def validate_config(self) -> "ConfigSchema":
        provider_values = [provider.value for provider in Provider]
        if self.provider not in provider_values:
            raise ValueError(f"Provider {self.provider} is not supported")
        if self.latency_table == self.cache_table:
            raise ValueError("The latency table and the cache table must be different tables")
        return self
