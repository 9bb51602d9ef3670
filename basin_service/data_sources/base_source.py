"""
Base value source for basin term resolution
Provides the abstract interface shared by local-grid and remote-model sources
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..basin.models import BasinModel, BasinRegion, Coordinate, RawValues, SourceType


class ValueSource(ABC):
    """
    Abstract source of raw z1p0/z2p5 values.

    Implementations receive a coordinate already normalized to their
    dataset's granularity and return values in km.
    """

    source_type: SourceType

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def fetch(
        self,
        coordinate: Coordinate,
        model: BasinModel,
        region: Optional[BasinRegion] = None
    ) -> RawValues:
        """Get raw basin values for a coordinate and model"""
        pass

    @property
    @abstractmethod
    def granularity(self) -> float:
        """Coordinate spacing (degrees) that this source is keyed on"""
        pass

    def get_statistics(self) -> Dict[str, Any]:
        return {"source": self.name, "source_type": self.source_type.value}
