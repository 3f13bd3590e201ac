import logging
from typing import Optional

import numpy as np

from cloud_highway.common.constants import PROBE_ATTEMPTS
from cloud_highway.common.exceptions import StoreUnavailableError
from cloud_highway.common.models.region import Region
from cloud_highway.common.models.region_catalog import RegionCatalog
from cloud_highway.prober.components.network_prober import NetworkProber
from cloud_highway.query_engine.components.latency_store import LatencyStore

logger = logging.getLogger(__name__)


class LatencyProber:
    """
    One probe cycle from a fixed source region to every catalog region
    (the source itself included), run on a schedule.

    Each destination gets exactly one latency row per cycle, either the
    mean of the probe samples or None when the destination was unreachable.
    """

    def __init__(
        self,
        source_region: Region,
        region_catalog: RegionCatalog,
        latency_store: LatencyStore,
        network_prober: NetworkProber,
        attempts: int = PROBE_ATTEMPTS,
    ) -> None:
        if not region_catalog.is_valid_region(source_region.provider, source_region.code):
            raise ValueError(f"Source region {source_region} is not in the region catalog")
        self._source_region = source_region
        self._region_catalog = region_catalog
        self._latency_store = latency_store
        self._network_prober = network_prober
        self._attempts = attempts

    def run(self) -> dict[str, Optional[float]]:
        written: dict[str, Optional[float]] = {}
        for destination in self._region_catalog.all_regions():
            ping = self._measure(destination)
            try:
                self._latency_store.put(self._source_region.identifier, destination.identifier, ping)
            except StoreUnavailableError as e:
                logger.error("Could not write latency %s -> %s: %s", self._source_region, destination, e)
                continue
            written[destination.identifier] = ping

        logger.info(
            "Probe cycle from %s wrote %s of %s destinations",
            self._source_region,
            len(written),
            len(self._region_catalog.all_regions()),
        )
        return written

    def _measure(self, destination: Region) -> Optional[float]:
        try:
            samples = self._network_prober.probe(destination, self._attempts)
        except OSError as e:
            logger.warning("Probing %s from %s failed: %s", destination, self._source_region, e)
            return None

        if not samples:
            logger.warning("%s is unreachable from %s", destination, self._source_region)
            return None
        return float(np.mean(samples))
