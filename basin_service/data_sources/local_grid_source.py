"""
Local basin depth grids.

Each basin has one CSV grid named ``<basin_id>.csv`` with a ``lat,lon`` header
followed by one column per model field key (e.g. ``seattle_z1p0``). Values are
already in km; empty cells mean no value at that grid point.
"""
import csv
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .base_source import ValueSource
from ..basin.models import BasinModel, BasinRegion, Coordinate, RawValues, SourceType
from ..basin.normalizer import BASIN_DATA_SPACING, round_to
from ..exceptions import BasinDataError

logger = logging.getLogger(__name__)

DEFAULT_GRID_DIR = Path(__file__).resolve().parent.parent / "data" / "grids"

GridKey = Tuple[float, float]


class GridDataStore:
    """Precomputed basin grids, keyed by basin id and grid-snapped (lat, lon)"""

    def __init__(self, grids: Dict[str, Dict[GridKey, Dict[str, float]]], spacing: float = BASIN_DATA_SPACING):
        self._grids = grids
        self.spacing = spacing

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path] = DEFAULT_GRID_DIR,
        basin_ids: Optional[Iterable[str]] = None,
        spacing: float = BASIN_DATA_SPACING
    ) -> "GridDataStore":
        """
        Load every ``<basin_id>.csv`` in directory.

        If basin_ids is given, only those grids are loaded; a basin without a
        grid file is logged and served as an empty grid.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise BasinDataError(directory, "grid directory not found")

        if basin_ids is None:
            paths = {p.stem: p for p in sorted(directory.glob("*.csv"))}
        else:
            paths = {basin_id: directory / f"{basin_id}.csv" for basin_id in basin_ids}

        grids = {}
        for basin_id, path in paths.items():
            if not path.exists():
                logger.warning(f"No local grid for basin '{basin_id}' at {path}")
                continue
            grids[basin_id] = read_grid(path, spacing)
            logger.info(f"Loaded {len(grids[basin_id])} grid points for basin '{basin_id}'")

        return cls(grids, spacing)

    @property
    def basin_ids(self):
        return sorted(self._grids)

    def point_count(self, basin_id: str) -> int:
        return len(self._grids.get(basin_id, {}))

    def lookup(self, basin_id: str, coordinate: Coordinate) -> Dict[str, float]:
        """Field values at the grid cell for coordinate, empty if there is none."""
        grid = self._grids.get(basin_id)
        if not grid:
            return {}
        key = (round_to(coordinate.latitude, self.spacing), round_to(coordinate.longitude, self.spacing))
        return grid.get(key, {})


def read_grid(path: Path, spacing: float = BASIN_DATA_SPACING) -> Dict[GridKey, Dict[str, float]]:
    grid = {}
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or "lat" not in reader.fieldnames or "lon" not in reader.fieldnames:
            raise BasinDataError(path, "grid header must include 'lat' and 'lon'")

        value_fields = [name for name in reader.fieldnames if name not in ("lat", "lon")]
        for line_number, row in enumerate(reader, start=2):
            try:
                key = (round_to(float(row["lat"]), spacing), round_to(float(row["lon"]), spacing))
                values = {}
                for field in value_fields:
                    cell = (row.get(field) or "").strip()
                    if cell:
                        value = float(cell)
                        if math.isfinite(value):
                            values[field] = value
            except (TypeError, ValueError) as e:
                raise BasinDataError(path, f"line {line_number}: {e}") from e
            grid[key] = values

    return grid


class LocalGridSource(ValueSource):
    """Value source backed by the precomputed local basin grids"""

    source_type = SourceType.LOCAL

    def __init__(self, store: GridDataStore, name: str = "local_grid"):
        super().__init__(name)
        self.store = store

    @property
    def granularity(self) -> float:
        return self.store.spacing

    async def fetch(
        self,
        coordinate: Coordinate,
        model: BasinModel,
        region: Optional[BasinRegion] = None
    ) -> RawValues:
        if region is None:
            return RawValues(z1p0=None, z2p5=None, source_type=self.source_type)

        row = self.store.lookup(region.id, coordinate)
        if not row:
            logger.debug(
                f"No grid cell for basin '{region.id}' at ({coordinate.latitude}, {coordinate.longitude})"
            )

        return RawValues(
            z1p0=row.get(model.z1p0),
            z2p5=row.get(model.z2p5),
            source_type=self.source_type
        )

    def get_statistics(self):
        stats = super().get_statistics()
        stats["grids"] = {basin_id: self.store.point_count(basin_id) for basin_id in self.store.basin_ids}
        return stats
