"""
Region-specific corrections applied to raw basin values.

Each correction is a self-contained rule; the policy applies every matching
rule in order and otherwise passes values through untouched.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import BasinModel, BasinRegion, RawValues, SourceType

logger = logging.getLogger(__name__)

PUGET_LOWLAND_ID = "pugetlowland"


class BasinCorrection(ABC):
    """A single region-specific override rule"""

    @abstractmethod
    def applies(self, region: BasinRegion, model: BasinModel, raw: RawValues) -> bool:
        pass

    @abstractmethod
    def apply(self, raw: RawValues) -> RawValues:
        pass


class PugetLowlandZ1p0Correction(BasinCorrection):
    """
    Derive Seattle z1p0 from z2p5.

    Two regressions derived by M. Moschetti (memo dated July 6, 2018), each
    with 50% weight. The remote z1p0 dataset for this basin does not cover the
    full z2p5 footprint the region polygon was drawn from, so remote z1p0 is
    never used here.
    """

    region_id = PUGET_LOWLAND_ID

    def applies(self, region: BasinRegion, model: BasinModel, raw: RawValues) -> bool:
        return (
            region.id == self.region_id
            and raw.source_type is SourceType.REMOTE
            and raw.z2p5 is not None
        )

    def apply(self, raw: RawValues) -> RawValues:
        return raw.with_z1p0(z1p0_from_z2p5(raw.z2p5))


def z1p0_from_z2p5(z2p5: float) -> float:
    return 0.5 * (0.1146 * z2p5 + 0.2826) + 0.5 * (0.0933 * z2p5 + 0.1444)


class BasinCorrectionPolicy:
    """Applies region-specific corrections to raw values"""

    def __init__(self, corrections: Optional[List[BasinCorrection]] = None):
        if corrections is None:
            corrections = [PugetLowlandZ1p0Correction()]
        self.corrections = list(corrections)

    def correct(self, region: BasinRegion, model: BasinModel, raw: RawValues) -> RawValues:
        corrected = raw
        for correction in self.corrections:
            if correction.applies(region, model, corrected):
                logger.debug(
                    f"Applying {type(correction).__name__} for region '{region.id}', model '{model.id}'"
                )
                corrected = correction.apply(corrected)
        return corrected
