"""
Basin region dataset and point-in-polygon region lookup.

Regions come from a GeoJSON FeatureCollection whose features carry ``id``,
``title`` and ``defaultModel`` properties. Feature order in the file is the
lookup order: if two boundaries overlap, the earlier feature wins.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import geojson
import shapely
from shapely.geometry import MultiPolygon, Polygon, mapping, shape

from .models import BasinModel, BasinRegion, Coordinate
from ..exceptions import BasinDataError, UnknownModel

logger = logging.getLogger(__name__)

DEFAULT_REGIONS_PATH = Path(__file__).resolve().parent.parent / "data" / "basins.geojson"


class RegionDataset:
    """Ordered, read-only set of basin regions loaded once at startup"""

    def __init__(self, regions: List[BasinRegion], feature_collection: Optional[Dict[str, Any]] = None):
        ids = [region.id for region in regions]
        if len(set(ids)) != len(ids):
            raise BasinDataError("<regions>", f"duplicate region ids: {ids}")
        self._regions = tuple(regions)
        self._by_id = {region.id: region for region in regions}
        self._feature_collection = feature_collection

    @classmethod
    def from_file(cls, path: Union[str, Path] = DEFAULT_REGIONS_PATH) -> "RegionDataset":
        path = Path(path)
        if not path.exists():
            raise BasinDataError(path, "region file not found")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = geojson.load(f)
        except (OSError, ValueError) as e:
            raise BasinDataError(path, f"unreadable GeoJSON: {e}") from e

        dataset = cls.from_geojson(data, source=path)
        logger.info(f"Loaded {len(dataset)} basin regions from {path}")
        return dataset

    @classmethod
    def from_geojson(cls, data: Dict[str, Any], source: Union[str, Path] = "<geojson>") -> "RegionDataset":
        if data.get("type") != "FeatureCollection":
            raise BasinDataError(source, "expected a GeoJSON FeatureCollection")

        regions = []
        for index, feature in enumerate(data.get("features", [])):
            regions.append(_region_from_feature(feature, index, source))

        if not regions:
            raise BasinDataError(source, "no basin regions defined")

        return cls(regions, feature_collection=json.loads(json.dumps(data)))

    @property
    def regions(self) -> List[BasinRegion]:
        return list(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self):
        return iter(self._regions)

    def get(self, region_id: str) -> Optional[BasinRegion]:
        return self._by_id.get(region_id)

    @staticmethod
    def contains(region: BasinRegion, coordinate: Coordinate) -> bool:
        """Check if a region boundary contains the coordinate."""
        return bool(shapely.contains_xy(region.boundary, coordinate.longitude, coordinate.latitude))

    def to_geojson(self) -> Dict[str, Any]:
        """FeatureCollection of all regions, as served to map clients."""
        if self._feature_collection is not None:
            return self._feature_collection
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": region.id,
                    "properties": region.to_dict(),
                    "geometry": mapping(region.boundary),
                }
                for region in self._regions
            ],
        }


def _region_from_feature(feature: Dict[str, Any], index: int, source) -> BasinRegion:
    properties = feature.get("properties") or {}
    region_id = properties.get("id") or feature.get("id")
    title = properties.get("title")
    if not region_id or not title:
        raise BasinDataError(source, f"feature {index} is missing 'id' or 'title'")

    try:
        default_model = BasinModel.from_id(properties.get("defaultModel"))
    except UnknownModel as e:
        raise BasinDataError(source, f"region '{region_id}': {e.message}") from e

    try:
        boundary = shape(feature["geometry"])
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise BasinDataError(source, f"region '{region_id}' has invalid geometry: {e}") from e

    if not isinstance(boundary, (Polygon, MultiPolygon)):
        raise BasinDataError(source, f"region '{region_id}' geometry must be a Polygon or MultiPolygon")
    if not boundary.is_valid:
        raise BasinDataError(source, f"region '{region_id}' geometry is not valid")

    shapely.prepare(boundary)
    return BasinRegion(id=str(region_id), title=str(title), boundary=boundary, default_model=default_model)


class RegionLocator:
    """Finds the basin region containing a normalized coordinate"""

    def __init__(self, dataset: RegionDataset):
        self.dataset = dataset

    def locate(self, coordinate: Coordinate) -> Optional[BasinRegion]:
        """
        Return the first region (in dataset order) containing the coordinate.

        None means the coordinate is outside every basin, which is a normal
        outcome and not an error.
        """
        for region in self.dataset:
            if self.dataset.contains(region, coordinate):
                logger.debug(
                    f"({coordinate.latitude}, {coordinate.longitude}) located in basin '{region.id}'"
                )
                return region

        logger.debug(f"({coordinate.latitude}, {coordinate.longitude}) is outside all basin regions")
        return None
