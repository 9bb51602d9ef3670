"""
Core data model for basin term resolution.

Regions and models are process-wide static configuration; coordinates, raw
values and resolved terms are created per request and never shared.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import UnknownModel


class SourceType(Enum):
    LOCAL = "local"
    REMOTE = "remote"


class BasinModel(Enum):
    """Named depth-model datasets and the field keys of their two horizons"""

    BAY_AREA = ("bayarea", "Bay Area", "bayarea_z1p0", "bayarea_z2p5")
    CCA06 = ("cca06", "CCA06", "cca06_z1p0", "cca06_z2p5")
    CVMH1510 = ("cvmh1510", "CVM-H15.1.0", "cvmh1510_z1p0", "cvmh1510_z2p5")
    CVMS426 = ("cvms426", "CVM-S4.26", "cvms426_z1p0", "cvms426_z2p5")
    CVMS426M01 = ("cvms426-m01", "CVM-S4.26-M01", "cvms426m01_z1p0", "cvms426m01_z2p5")
    SEATTLE = ("seattle", "Seattle", "seattle_z1p0", "seattle_z2p5")
    WASATCH = ("wasatch", "Wasatch Front", "wfcvm_z1p0", "wfcvm_z2p5")

    def __init__(self, model_id: str, label: str, z1p0: str, z2p5: str):
        self.id = model_id
        self.label = label
        self.z1p0 = z1p0
        self.z2p5 = z2p5

    @classmethod
    def from_id(cls, model_id: str) -> "BasinModel":
        """Resolve a model by id or member name (case-insensitive)."""
        if model_id is not None:
            key = str(model_id).strip().lower()
            for model in cls:
                if key == model.id or key == model.name.lower():
                    return model
        raise UnknownModel(model_id, [m.id for m in cls])

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "z1p0": self.z1p0, "z2p5": self.z2p5}


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BasinRegion:
    """A named basin polygon with the model used when none is requested"""
    id: str
    title: str
    boundary: Any  # prepared shapely Polygon/MultiPolygon
    default_model: BasinModel

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "title": self.title, "defaultModel": self.default_model.id}


@dataclass(frozen=True)
class RawValues:
    """Horizon depths as retrieved from a value source, in km"""
    z1p0: Optional[float]
    z2p5: Optional[float]
    source_type: SourceType

    def with_z1p0(self, z1p0: Optional[float]) -> "RawValues":
        return replace(self, z1p0=z1p0)


@dataclass(frozen=True)
class ResolvedTerm:
    """Final basin term for a normalized coordinate.

    ``region`` and ``model`` are None when the coordinate lies outside every
    basin; in that case both horizons are None as well.
    """
    coordinate: Coordinate
    model: Optional[BasinModel]
    region: Optional[BasinRegion]
    z1p0: Optional[float]
    z2p5: Optional[float]

    @property
    def in_basin(self) -> bool:
        return self.region is not None
