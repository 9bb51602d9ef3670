from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Any, Dict, Literal, Optional
import logging
from pathlib import Path
from dotenv import load_dotenv

from .exceptions import BasinConfigurationError

# Explicitly load .env file to ensure environment variables are available
load_dotenv()

logger = logging.getLogger(__name__)

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    APP_ENV: Literal["production", "development"] = Field(
        default="production",
        description="Application environment"
    )
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level"
    )
    LOG_FORMAT: Literal["text", "json"] = Field(
        default="text",
        description="Log output format; production always logs JSON"
    )

    # Basin datasets, loaded once at startup
    BASIN_REGIONS_PATH: str = Field(
        default=str(PACKAGE_DATA_DIR / "basins.geojson"),
        description="GeoJSON FeatureCollection of basin region boundaries"
    )
    BASIN_DATA_DIR: str = Field(
        default=str(PACKAGE_DATA_DIR / "grids"),
        description="Directory of <basin_id>.csv local depth grids"
    )

    # ArcGIS basin-model service
    ARCGIS_HOST: Optional[str] = Field(
        default=None,
        description="ArcGIS server host, e.g. https://some.agol.server; arc-data route is disabled when unset"
    )
    ARCGIS_SERVICE_PATH: str = Field(
        default="/arcgis/rest/services/nshmp/basin_depths/MapServer/identify",
        description="Identify endpoint of the basin depth map service"
    )
    ARCGIS_TIMEOUT_SECONDS: float = Field(default=8.0, description="Timeout for ArcGIS requests")

    # Server settings
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8001, description="Port for the Uvicorn server")
    CORS_ORIGINS: str = Field(default="*", description="Comma-separated list of allowed CORS origins")
    RATE_LIMIT: str = Field(default="60/minute", description="Per-client rate limit for basin routes")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra="ignore"
    )

    @field_validator('ARCGIS_HOST', mode='before')
    @classmethod
    def empty_host_is_none(cls, v):
        """Treat an empty ARCGIS_HOST from the environment as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cors_origins(self):
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return origins or ["*"]

    @property
    def use_json_logs(self) -> bool:
        return self.APP_ENV == "production" or self.LOG_FORMAT == "json"

    @property
    def arcgis_configured(self) -> bool:
        return self.ARCGIS_HOST is not None


def validate_environment_configuration(settings: Settings) -> None:
    """Validate settings that pydantic cannot check on its own.

    Raises:
        BasinConfigurationError: on the first invalid setting
    """
    if not Path(settings.BASIN_REGIONS_PATH).is_file():
        raise BasinConfigurationError("BASIN_REGIONS_PATH", f"file not found: {settings.BASIN_REGIONS_PATH}")

    if not Path(settings.BASIN_DATA_DIR).is_dir():
        raise BasinConfigurationError("BASIN_DATA_DIR", f"directory not found: {settings.BASIN_DATA_DIR}")

    if settings.ARCGIS_TIMEOUT_SECONDS <= 0:
        raise BasinConfigurationError("ARCGIS_TIMEOUT_SECONDS", "must be greater than 0")

    if settings.ARCGIS_HOST is not None and not settings.ARCGIS_HOST.startswith(("http://", "https://")):
        raise BasinConfigurationError("ARCGIS_HOST", "must start with http:// or https://")

    if not settings.arcgis_configured:
        logger.warning("ARCGIS_HOST not set - /basin/arc-data requests will fail as upstream unavailable")


def runtime_config_summary(settings: Settings) -> Dict[str, Any]:
    """Non-secret configuration summary for startup logs and health checks"""
    return {
        "app_env": settings.APP_ENV,
        "regions_path": settings.BASIN_REGIONS_PATH,
        "grid_dir": settings.BASIN_DATA_DIR,
        "arcgis_configured": settings.arcgis_configured,
        "arcgis_timeout_seconds": settings.ARCGIS_TIMEOUT_SECONDS,
    }


def get_settings() -> Settings:
    """Dependency for getting settings with validation."""
    settings = Settings()
    validate_environment_configuration(settings)
    return settings
