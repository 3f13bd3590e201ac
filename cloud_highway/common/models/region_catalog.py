from typing import Optional

from cloud_highway.common.constants import (
    CACHE_KEY_DESTINATION_SEPARATOR,
    CACHE_KEY_SOURCE_SEPARATOR,
    CACHE_VALUE_SEPARATOR,
    INTEGRATION_TEST_REGIONS,
    MAX_DST_REGION_CANDIDATES,
    REGION_IDENTIFIER_SEPARATOR,
    SUPPORTED_REGIONS,
)
from cloud_highway.common.models.region import Region

# Characters that would corrupt identifiers, cache keys or cache values
_RESERVED_CHARACTERS = (
    REGION_IDENTIFIER_SEPARATOR,
    CACHE_VALUE_SEPARATOR,
    CACHE_KEY_SOURCE_SEPARATOR,
    CACHE_KEY_DESTINATION_SEPARATOR,
)


class RegionCatalog:
    """
    Static mapping of provider to the region codes it offers.

    The declaration order of the mapping is the enumeration order used by
    ``all_regions`` and ``all_regions_except``.
    """

    def __init__(self, regions: dict[str, list[str]]) -> None:
        self._validate_catalog(regions)
        self._regions = {provider: list(codes) for provider, codes in regions.items()}

    @classmethod
    def default(cls) -> "RegionCatalog":
        return cls(SUPPORTED_REGIONS)

    @classmethod
    def integration_test(cls) -> "RegionCatalog":
        return cls(INTEGRATION_TEST_REGIONS)

    @staticmethod
    def _validate_catalog(regions: dict[str, list[str]]) -> None:
        for provider, codes in regions.items():
            for name in [provider, *codes]:
                if not name or name != name.lower():
                    raise ValueError(f"Catalog entry {name!r} must be a non-empty lowercase string")
                if any(character in name for character in _RESERVED_CHARACTERS):
                    raise ValueError(f"Catalog entry {name!r} contains a reserved character")
            if len(set(codes)) != len(codes):
                raise ValueError(f"Catalog for provider {provider} contains duplicate regions")

    def is_valid_provider(self, provider: str) -> bool:
        return provider in self._regions

    def is_valid_region(self, provider: str, code: str) -> bool:
        if not provider or not code:
            return False
        provider = provider.lower()
        if not self.is_valid_provider(provider):
            return False
        return code.lower() in self._regions[provider]

    def is_valid_candidate_list(
        self, candidates: Optional[list[str]], max_size: int = MAX_DST_REGION_CANDIDATES
    ) -> bool:
        if not candidates:
            # No candidates means check against all regions
            return True
        if len(candidates) > max_size:
            return False

        for candidate in candidates:
            try:
                region = Region.from_identifier(candidate)
            except ValueError:
                return False
            if not self.is_valid_region(region.provider, region.code):
                return False
        return True

    def all_regions(self) -> list[Region]:
        return [Region(provider, code) for provider, codes in self._regions.items() for code in codes]

    def all_regions_except(self, identifier: str) -> list[str]:
        excluded = identifier.lower()
        return [region.identifier for region in self.all_regions() if region.identifier != excluded]
