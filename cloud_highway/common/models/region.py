from dataclasses import dataclass

from cloud_highway.common.constants import REGION_IDENTIFIER_SEPARATOR


@dataclass(frozen=True)
class Region:
    provider: str
    code: str

    def __post_init__(self) -> None:
        # Regions are always stored lowercased
        object.__setattr__(self, "provider", self.provider.lower())
        object.__setattr__(self, "code", self.code.lower())

    @property
    def identifier(self) -> str:
        return f"{self.provider}{REGION_IDENTIFIER_SEPARATOR}{self.code}"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Region":
        parts = identifier.split(REGION_IDENTIFIER_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid region identifier {identifier!r}, expected 'provider@code'")
        return cls(parts[0], parts[1])

    def __str__(self) -> str:
        return self.identifier


def split_region_identifier(identifier: str) -> tuple[str, str]:
    region = Region.from_identifier(identifier)
    return region.provider, region.code
