"""
Shared test fixtures for the Basin Term Service test suite.
Provides small synthetic region/grid datasets and a mocked ArcGIS client.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from basin_service.basin.corrections import BasinCorrectionPolicy
from basin_service.basin.engine import ResolutionEngine
from basin_service.basin.models import BasinModel, Coordinate
from basin_service.basin.regions import RegionDataset, RegionLocator
from basin_service.config import Settings
from basin_service.data_sources.arcgis_client import ArcGisClient
from basin_service.data_sources.arcgis_source import RemoteModelSource
from basin_service.data_sources.local_grid_source import GridDataStore, LocalGridSource
from basin_service.dependencies import ServiceContainer, get_service_container
from basin_service.main import app


def box_feature(region_id, title, default_model, min_lon, min_lat, max_lon, max_lat):
    """GeoJSON feature for a rectangular test region."""
    return {
        "type": "Feature",
        "properties": {"id": region_id, "title": title, "defaultModel": default_model},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[
                [min_lon, min_lat], [max_lon, min_lat], [max_lon, max_lat],
                [min_lon, max_lat], [min_lon, min_lat]
            ]]
        }
    }


class TestCoordinates:
    """Standard test coordinates."""
    SEATTLE = (47.6, -122.3)
    # Inside Puget Lowland, where the z1p0 grid has no value
    SEATTLE_Z1P0_GAP = (46.9, -122.7)
    ALPHA = (12.0, -8.0)
    # Inside both alpha and overlap boxes
    OVERLAP = (13.0, -6.0)
    OUTSIDE = (0.0, 0.0)


@pytest.fixture
def test_coordinates():
    return TestCoordinates()


@pytest.fixture
def region_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            box_feature("alpha", "Alpha Basin", "bayarea", -10.0, 10.0, -5.0, 15.0),
            box_feature("pugetlowland", "Puget Lowland", "seattle", -123.2, 46.6, -121.8, 48.4),
            box_feature("overlap", "Overlap Basin", "wasatch", -7.0, 12.0, -3.0, 14.0),
        ]
    }


@pytest.fixture
def region_dataset(region_geojson):
    return RegionDataset.from_geojson(region_geojson)


@pytest.fixture
def grid_store():
    return GridDataStore({
        "pugetlowland": {
            (47.6, -122.3): {"seattle_z1p0": 0.48, "seattle_z2p5": 5.12},
            (46.9, -122.7): {"seattle_z2p5": 1.86},
        },
        "alpha": {
            (12.0, -8.0): {"bayarea_z1p0": 0.12, "bayarea_z2p5": 1.34, "cca06_z1p0": 0.2, "cca06_z2p5": 2.1},
        },
    })


@pytest.fixture
def arcgis_values():
    """Raw ArcGIS identify values in millimeters."""
    return {
        "seattle_z1p0": 480.0,
        "seattle_z2p5": 5120.0,
        "bayarea_z1p0": 120.0,
        "bayarea_z2p5": 1340.0,
        "cca06_z1p0": None,
        "cca06_z2p5": 2100.0,
    }


@pytest.fixture
def mock_arcgis_client(arcgis_values):
    client = MagicMock(spec=ArcGisClient)
    client.query = AsyncMock(return_value=arcgis_values)
    client.close = AsyncMock()
    return client


@pytest.fixture
def local_source(grid_store):
    return LocalGridSource(grid_store)


@pytest.fixture
def remote_source(mock_arcgis_client):
    return RemoteModelSource(mock_arcgis_client)


@pytest.fixture
def engine(region_dataset):
    return ResolutionEngine(RegionLocator(region_dataset), policy=BasinCorrectionPolicy())


@pytest.fixture
def service_container(region_dataset, grid_store, mock_arcgis_client):
    return ServiceContainer(
        Settings(),
        region_dataset=region_dataset,
        grid_store=grid_store,
        arcgis_client=mock_arcgis_client
    )


@pytest.fixture
def test_client(service_container):
    """FastAPI test client with the synthetic service container injected."""
    app.state.limiter.reset()
    app.dependency_overrides[get_service_container] = lambda: service_container
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seattle_coordinate():
    return Coordinate(47.6, -122.3)


@pytest.fixture(autouse=True)
def suppress_logging():
    """Suppress logging during tests to reduce noise."""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)
