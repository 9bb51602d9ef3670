"""
ArcGIS basin-model value source.

Remote values arrive in millimeters and are converted to km here, before the
correction policy sees them.
"""
import logging
from typing import Optional

from .arcgis_client import ArcGisClient, SERVICE_NAME
from .base_source import ValueSource
from ..basin.models import BasinModel, BasinRegion, Coordinate, RawValues, SourceType
from ..basin.normalizer import ARCGIS_ROUND_MODEL
from ..exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

MM_PER_KM = 1000.0


class RemoteModelSource(ValueSource):
    """Value source backed by the remote ArcGIS basin depth service"""

    source_type = SourceType.REMOTE

    def __init__(self, client: Optional[ArcGisClient], name: str = "arcgis"):
        super().__init__(name)
        self.client = client

    @property
    def granularity(self) -> float:
        return ARCGIS_ROUND_MODEL

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def fetch(
        self,
        coordinate: Coordinate,
        model: BasinModel,
        region: Optional[BasinRegion] = None
    ) -> RawValues:
        if self.client is None:
            raise UpstreamUnavailable(SERVICE_NAME, "ARCGIS_HOST is not configured")

        basin_models = await self.client.query(coordinate)

        return RawValues(
            z1p0=to_km(basin_models.get(model.z1p0)),
            z2p5=to_km(basin_models.get(model.z2p5)),
            source_type=self.source_type
        )

    def get_statistics(self):
        stats = super().get_statistics()
        stats["configured"] = self.configured
        return stats


def to_km(value_mm: Optional[float]) -> Optional[float]:
    return None if value_mm is None else value_mm / MM_PER_KM
