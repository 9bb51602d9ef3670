"""Basin term resolution: regions, models, corrections and the resolution pipeline."""

from .models import BasinModel, BasinRegion, Coordinate, RawValues, ResolvedTerm, SourceType
from .normalizer import ARCGIS_ROUND_MODEL, BASIN_DATA_SPACING, normalize

__all__ = [
    'BasinModel', 'BasinRegion', 'Coordinate', 'RawValues', 'ResolvedTerm', 'SourceType',
    'ARCGIS_ROUND_MODEL', 'BASIN_DATA_SPACING', 'normalize',
]
