import json
import logging
import math
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from ..basin.models import Coordinate
from ..exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

SERVICE_NAME = "ArcGIS basin service"

NO_DATA_VALUES = {"", "nodata", "null", "none", "nan"}


class ArcGisConfig(BaseModel):
    """ArcGIS basin depth service configuration"""
    host: str
    service_path: str = "/arcgis/rest/services/nshmp/basin_depths/MapServer/identify"
    timeout: float = Field(default=8.0, gt=0)

    @property
    def url(self) -> str:
        return self.host.rstrip("/") + "/" + self.service_path.lstrip("/")


class ArcGisClient:
    """
    Client for the ArcGIS basin depth map service.

    The service is queried with a raster identify at a single point; every
    layer of the map service is one model field (e.g. ``seattle_z2p5``) and
    the returned pixel values are depths in millimeters.
    """

    def __init__(self, config: ArcGisConfig):
        self.config = config
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
        return self._client

    def _identify_params(self, coordinate: Coordinate) -> Dict[str, Any]:
        lon, lat = coordinate.longitude, coordinate.latitude
        return {
            "geometry": json.dumps({"x": lon, "y": lat, "spatialReference": {"wkid": 4326}}),
            "geometryType": "esriGeometryPoint",
            "sr": 4326,
            "layers": "all",
            "tolerance": 0,
            "mapExtent": f"{lon - 0.01},{lat - 0.01},{lon + 0.01},{lat + 0.01}",
            "imageDisplay": "100,100,96",
            "returnGeometry": "false",
            "f": "json",
        }

    async def query(self, coordinate: Coordinate) -> Dict[str, Optional[float]]:
        """
        Get raw basin model values (millimeters) for a coordinate.

        Returns a mapping of model field key to value; layers reporting
        NoData map to None.

        Raises:
            UpstreamUnavailable: on timeout, transport error, non-2xx status or
                a response that is not an identify result
        """
        start_time = time.time()
        try:
            response = await self.client.get(self.config.url, params=self._identify_params(coordinate))
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"ArcGIS timeout for ({coordinate.latitude}, {coordinate.longitude}): {e}")
            raise UpstreamUnavailable(SERVICE_NAME, str(e) or "request timed out", self.config.timeout) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"ArcGIS HTTP {e.response.status_code} for ({coordinate.latitude}, {coordinate.longitude})")
            raise UpstreamUnavailable(SERVICE_NAME, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"ArcGIS transport error for ({coordinate.latitude}, {coordinate.longitude}): {e}")
            raise UpstreamUnavailable(SERVICE_NAME, str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error(f"ArcGIS returned invalid JSON: {e}")
            raise UpstreamUnavailable(SERVICE_NAME, "invalid JSON response") from e

        values = parse_identify_response(data)
        query_time = (time.time() - start_time) * 1000
        logger.info(
            f"ArcGIS returned {len(values)} basin fields for ({coordinate.latitude}, {coordinate.longitude})",
            extra={"response_time_ms": round(query_time, 2)}
        )
        return values

    async def close(self):
        """Close the HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def parse_identify_response(data: Any) -> Dict[str, Optional[float]]:
    """Flatten an ArcGIS identify response into field key -> raw value."""
    if not isinstance(data, dict):
        raise UpstreamUnavailable(SERVICE_NAME, "unexpected response format")
    if "error" in data:
        error = data["error"] or {}
        message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
        raise UpstreamUnavailable(SERVICE_NAME, f"service error: {message}")
    results = data.get("results")
    if not isinstance(results, list):
        raise UpstreamUnavailable(SERVICE_NAME, "response has no identify results")

    values = {}
    for result in results:
        if not isinstance(result, dict):
            continue
        key = result.get("layerName")
        if not key:
            continue
        attributes = result.get("attributes") or {}
        values[key] = _parse_pixel_value(attributes.get("Pixel Value", result.get("value")))
    return values


def _parse_pixel_value(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    if isinstance(raw, str) and raw.strip().lower() in NO_DATA_VALUES:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None
