"""
Basin term resolution pipeline.

normalize -> locate region -> select model -> fetch raw values -> correct.
The only branch is whether a region was found; a coordinate outside every
basin resolves successfully to null horizons.
"""
import logging
import time
from typing import Optional

from .corrections import BasinCorrectionPolicy
from .models import ResolvedTerm
from .normalizer import normalize
from .regions import RegionLocator
from .selector import ModelSelector
from ..data_sources.base_source import ValueSource
from ..logging_config import get_resolution_logger

logger = logging.getLogger(__name__)


class ResolutionEngine:
    """
    Resolves z1p0/z2p5 basin terms for a coordinate.

    Holds only read-only collaborators, so one instance is shared across all
    concurrent requests.
    """

    def __init__(
        self,
        locator: RegionLocator,
        selector: Optional[ModelSelector] = None,
        policy: Optional[BasinCorrectionPolicy] = None
    ):
        self.locator = locator
        self.selector = selector or ModelSelector()
        self.policy = policy or BasinCorrectionPolicy()

    async def resolve(
        self,
        latitude: float,
        longitude: float,
        granularity: float,
        source: ValueSource,
        model_id: Optional[str] = None
    ) -> ResolvedTerm:
        """
        Resolve the basin term for a raw coordinate.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            granularity: Rounding step (degrees) matching source's dataset
            source: Value source to fetch raw values from
            model_id: Optional basin model id overriding the region default

        Raises:
            InvalidCoordinate: if the coordinate is out of range or non-finite
            UnknownModel: if model_id does not name a known basin model
            UpstreamUnavailable: if a remote source fails or times out
        """
        start_time = time.time()
        coordinate = normalize(latitude, longitude, granularity)

        region = self.locator.locate(coordinate)
        if region is None:
            logger.info(
                f"({coordinate.latitude}, {coordinate.longitude}) is outside all basins",
                extra={"coordinates": {"lat": coordinate.latitude, "lon": coordinate.longitude}}
            )
            return ResolvedTerm(coordinate=coordinate, model=None, region=None, z1p0=None, z2p5=None)

        model = self.selector.select(region, model_id)
        raw = await source.fetch(coordinate, model, region)
        corrected = self.policy.correct(region, model, raw)

        get_resolution_logger(coordinate, region.id, model.id).info(
            f"Resolved basin term via {source.name}: z1p0={corrected.z1p0}, z2p5={corrected.z2p5}",
            extra={"response_time_ms": round((time.time() - start_time) * 1000, 2)}
        )

        return ResolvedTerm(
            coordinate=coordinate,
            model=model,
            region=region,
            z1p0=corrected.z1p0,
            z2p5=corrected.z2p5
        )
