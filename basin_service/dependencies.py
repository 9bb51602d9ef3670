"""
Dependency Injection Container for the Basin Term Service.

Datasets and clients are built once per process and shared read-only by all
requests; FastAPI routes reach them through the dependency functions below.
"""

import logging
from typing import Optional

from .config import Settings
from .basin.corrections import BasinCorrectionPolicy
from .basin.engine import ResolutionEngine
from .basin.regions import RegionDataset, RegionLocator
from .basin.selector import ModelSelector
from .data_sources.arcgis_client import ArcGisClient, ArcGisConfig
from .data_sources.arcgis_source import RemoteModelSource
from .data_sources.local_grid_source import GridDataStore, LocalGridSource

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Dependency injection container that manages service lifecycle and dependencies.

    Collaborators may be injected directly (tests do this); anything not
    injected is built lazily from settings on first access.
    """

    def __init__(
        self,
        settings: Settings,
        region_dataset: Optional[RegionDataset] = None,
        grid_store: Optional[GridDataStore] = None,
        arcgis_client: Optional[ArcGisClient] = None
    ):
        self.settings = settings
        self._region_dataset = region_dataset
        self._grid_store = grid_store
        self._arcgis_client = arcgis_client
        self._local_source: Optional[LocalGridSource] = None
        self._remote_source: Optional[RemoteModelSource] = None
        self._engine: Optional[ResolutionEngine] = None

    @property
    def region_dataset(self) -> RegionDataset:
        if self._region_dataset is None:
            self._region_dataset = RegionDataset.from_file(self.settings.BASIN_REGIONS_PATH)
        return self._region_dataset

    @property
    def grid_store(self) -> GridDataStore:
        if self._grid_store is None:
            basin_ids = [region.id for region in self.region_dataset]
            self._grid_store = GridDataStore.from_directory(self.settings.BASIN_DATA_DIR, basin_ids)
        return self._grid_store

    @property
    def arcgis_client(self) -> Optional[ArcGisClient]:
        if self._arcgis_client is None and self.settings.ARCGIS_HOST:
            self._arcgis_client = ArcGisClient(ArcGisConfig(
                host=self.settings.ARCGIS_HOST,
                service_path=self.settings.ARCGIS_SERVICE_PATH,
                timeout=self.settings.ARCGIS_TIMEOUT_SECONDS
            ))
        return self._arcgis_client

    @property
    def local_source(self) -> LocalGridSource:
        if self._local_source is None:
            self._local_source = LocalGridSource(self.grid_store)
        return self._local_source

    @property
    def remote_source(self) -> RemoteModelSource:
        if self._remote_source is None:
            self._remote_source = RemoteModelSource(self.arcgis_client)
        return self._remote_source

    @property
    def engine(self) -> ResolutionEngine:
        if self._engine is None:
            self._engine = ResolutionEngine(
                RegionLocator(self.region_dataset),
                ModelSelector(),
                BasinCorrectionPolicy()
            )
        return self._engine

    def load(self) -> None:
        """Eagerly load all datasets so startup fails fast on bad data."""
        regions = self.region_dataset
        store = self.grid_store
        logger.info(
            f"Basin datasets loaded: {len(regions)} regions, {len(store.basin_ids)} local grids",
            extra={"event": "datasets_loaded", "grids": store.basin_ids}
        )

    async def close(self) -> None:
        if self._arcgis_client is not None:
            await self._arcgis_client.close()
            self._arcgis_client = None
            self._remote_source = None


_service_container: Optional[ServiceContainer] = None


def init_service_container(settings: Settings) -> ServiceContainer:
    """Initialize the global service container."""
    global _service_container
    _service_container = ServiceContainer(settings)
    _service_container.load()
    logger.info("Service container initialized successfully")
    return _service_container


def get_service_container() -> ServiceContainer:
    if _service_container is None:
        raise RuntimeError("Service container not initialized. Call init_service_container() first.")
    return _service_container


async def close_service_container():
    """Close the global service container and clean up all resources."""
    global _service_container
    if _service_container:
        await _service_container.close()
        _service_container = None
        logger.info("Service container closed and reset")
