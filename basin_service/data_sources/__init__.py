"""
Value sources for basin term resolution.

Contains the local-grid and ArcGIS implementations of the ValueSource interface.
"""

from .base_source import ValueSource
from .local_grid_source import GridDataStore, LocalGridSource
from .arcgis_client import ArcGisClient, ArcGisConfig
from .arcgis_source import RemoteModelSource

__all__ = ['ValueSource', 'GridDataStore', 'LocalGridSource', 'ArcGisClient', 'ArcGisConfig', 'RemoteModelSource']
